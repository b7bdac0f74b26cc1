import asyncio
import hashlib
import hmac
import logging

import aiohttp

import config
from exceptions.payment import PaymentGatewayException
from models.payment import PaymentIntentDTO

logger = logging.getLogger(__name__)


class PaymentGateway:
    """
    Remote payment gateway used by the checkout pipeline for online payments.

    Implementations create a payment intent (gateway-side order) for the final,
    server-computed amount and verify the signature the gateway returns to the
    client once the customer has paid.
    """

    async def create_payment_intent(self, amount_minor_units: int, currency: str, receipt: str) -> PaymentIntentDTO:
        raise NotImplementedError

    @staticmethod
    def verify_signature(intent_id: str, payment_id: str, signature: str, secret: str) -> bool:
        """
        Check a payment callback signature.

        Expected signature is the hex HMAC-SHA256 of "{intent_id}|{payment_id}"
        keyed with the gateway secret. Comparison is constant-time.
        """
        if not intent_id or not payment_id or not signature or not secret:
            return False
        expected = hmac.new(
            secret.encode(),
            f"{intent_id}|{payment_id}".encode(),
            hashlib.sha256
        ).hexdigest()
        return hmac.compare_digest(expected, signature)


class RazorpayGateway(PaymentGateway):

    def __init__(
        self,
        key_id: str | None = None,
        key_secret: str | None = None,
        api_url: str | None = None,
        timeout_seconds: float | None = None
    ):
        self.key_id = key_id or config.RAZORPAY_KEY_ID
        self.key_secret = key_secret or config.RAZORPAY_KEY_SECRET
        self.api_url = (api_url or config.RAZORPAY_API_URL).rstrip("/")
        self.timeout_seconds = timeout_seconds or config.PAYMENT_GATEWAY_TIMEOUT_SECONDS

    async def create_payment_intent(self, amount_minor_units: int, currency: str, receipt: str) -> PaymentIntentDTO:
        """
        Create a Razorpay order for the given amount.

        Args:
            amount_minor_units: Amount in paise
            currency: ISO currency code
            receipt: Merchant reference shown in the Razorpay dashboard

        Raises:
            PaymentGatewayException: On missing credentials, non-2xx response,
                network error or timeout
        """
        if not self.key_id or not self.key_secret:
            raise PaymentGatewayException("create order", "gateway credentials are not configured")

        payload = {
            "amount": amount_minor_units,
            "currency": currency,
            "receipt": receipt,
        }
        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
        auth = aiohttp.BasicAuth(self.key_id, self.key_secret)

        try:
            async with aiohttp.ClientSession(timeout=timeout, auth=auth) as http:
                async with http.post(f"{self.api_url}/orders", json=payload) as response:
                    if response.status < 200 or response.status >= 300:
                        body = await response.text()
                        logger.error(f"Razorpay order creation rejected ({response.status}): {body[:200]}")
                        raise PaymentGatewayException(
                            "create order",
                            f"HTTP {response.status}",
                            status_code=response.status
                        )
                    data = await response.json()
        except asyncio.TimeoutError as e:
            logger.error(f"Razorpay order creation timed out after {self.timeout_seconds}s")
            raise PaymentGatewayException("create order", f"timed out after {self.timeout_seconds}s") from e
        except aiohttp.ClientError as e:
            logger.error(f"Razorpay order creation failed: {e}")
            raise PaymentGatewayException("create order", str(e)) from e

        if not isinstance(data, dict) or "id" not in data:
            raise PaymentGatewayException("create order", "response did not contain an order id")

        return PaymentIntentDTO(
            intent_id=data["id"],
            amount=data.get("amount", amount_minor_units),
            currency=data.get("currency", currency),
            receipt=data.get("receipt", receipt),
            status=data.get("status")
        )

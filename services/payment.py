import logging

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

import config
from db import session_commit
from enums.payment_status import PaymentStatus
from exceptions.order import InvalidOrderInputException, OrderNotFoundException
from exceptions.payment import InvalidPaymentSignatureException
from models.order import OrderDTO
from repositories.order import OrderRepository
from services.payment_gateway import PaymentGateway

logger = logging.getLogger(__name__)


class PaymentService:

    @staticmethod
    async def verify_payment(
        gateway_order_id: str,
        payment_id: str,
        signature: str,
        session: AsyncSession | Session,
        secret: str | None = None
    ) -> OrderDTO:
        """
        Confirm an online payment reported back by the client.

        Flow:
        1. All three gateway values are required
        2. Signature must match HMAC-SHA256("{gateway_order_id}|{payment_id}")
        3. Order is looked up by gateway order id
        4. Already PAID -> returned unchanged (callback retries are harmless)
        5. Otherwise mark PAID, store payment id and signature, add timeline entry

        Item price snapshots and the order total are never touched here.

        Raises:
            InvalidOrderInputException: Missing payment details
            InvalidPaymentSignatureException: Signature mismatch
            OrderNotFoundException: No order for this gateway order id
        """
        if not gateway_order_id or not payment_id or not signature:
            raise InvalidOrderInputException("missing payment details")

        secret = secret or config.RAZORPAY_KEY_SECRET
        if not PaymentGateway.verify_signature(gateway_order_id, payment_id, signature, secret):
            logger.warning(f"Payment signature mismatch for gateway order {gateway_order_id}")
            raise InvalidPaymentSignatureException(gateway_order_id)

        order = await OrderRepository.get_by_gateway_order_id(gateway_order_id, session)
        if order is None:
            raise OrderNotFoundException(gateway_order_id)

        if order.payment_status == PaymentStatus.PAID:
            logger.info(f"Order {order.id} already marked as paid, skipping")
            return order

        updated = await OrderRepository.update(
            order.id,
            {
                'payment_status': PaymentStatus.PAID,
                'gateway_payment_id': payment_id,
                'gateway_signature': signature,
            },
            session,
            timeline_status=PaymentStatus.PAID.value,
            timeline_note=f"Payment received. Payment ID: {payment_id}"
        )
        await session_commit(session)
        logger.info(f"Payment verified for order {order.id} ({payment_id})")
        return updated

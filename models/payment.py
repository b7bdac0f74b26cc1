from pydantic import BaseModel


class PaymentIntentDTO(BaseModel):
    """Remote payment intent (gateway order) created for an online checkout."""
    intent_id: str
    amount: int          # minor units (paise)
    currency: str
    receipt: str | None = None
    status: str | None = None

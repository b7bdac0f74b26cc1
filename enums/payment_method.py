from enum import Enum


class PaymentMethod(str, Enum):
    RAZORPAY = "RAZORPAY"   # Online payment through the gateway
    COD = "COD"             # Cash on delivery

    @property
    def is_online(self) -> bool:
        return self == PaymentMethod.RAZORPAY

from pydantic import BaseModel, field_validator
from sqlalchemy import Column, Integer, String, ForeignKey
from sqlalchemy.orm import relationship

from models.base import Base


class ShippingAddress(Base):
    """
    Delivery (and doorstep installation) address of an order.
    """
    __tablename__ = 'shipping_addresses'

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey('orders.id', ondelete='CASCADE'), nullable=False, unique=True)

    street = Column(String, nullable=False)
    city = Column(String, nullable=False)
    state = Column(String, nullable=False)
    zip = Column(String, nullable=False)
    country = Column(String, nullable=False, default="India")
    phone = Column(String, nullable=True)

    # Relation
    order = relationship('Order', back_populates='shipping_address')


class ShippingAddressDTO(BaseModel):
    street: str
    city: str
    state: str
    zip: str
    country: str = "India"
    phone: str | None = None

    @field_validator('street', 'city', 'state', 'zip')
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        return v

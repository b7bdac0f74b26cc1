from datetime import datetime

from pydantic import BaseModel
from sqlalchemy import Column, Integer, DateTime, Float, Boolean, ForeignKey, CheckConstraint, Index
from sqlalchemy.orm import relationship

from models.base import Base


class OrderItem(Base):
    """
    Line item of an order.

    price and installation_cost are per-unit snapshots taken at order creation.
    They are written once and never recomputed from live catalog or rule data.
    """
    __tablename__ = 'order_items'

    __table_args__ = (
        # Check constraints for data integrity
        CheckConstraint('quantity > 0', name='ck_order_item_positive_quantity'),
        CheckConstraint('price >= 0', name='ck_order_item_non_negative_price'),
        CheckConstraint('installation_cost >= 0', name='ck_order_item_non_negative_installation'),

        # Indexes for performance
        Index('ix_order_items_order_id', 'order_id'),
        Index('ix_order_items_product_id', 'product_id'),
    )

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey('orders.id', ondelete='CASCADE'), nullable=False)
    # Deliberately no FK: deleting a product must not touch order history
    product_id = Column(Integer, nullable=False)
    quantity = Column(Integer, nullable=False)
    price = Column(Float, nullable=False)
    has_installation = Column(Boolean, nullable=False, default=False)
    installation_cost = Column(Float, nullable=False, default=0.0)
    created_at = Column(DateTime, default=datetime.now, nullable=False)

    # Relationships
    order = relationship("Order", back_populates="items")


class OrderItemDTO(BaseModel):
    id: int | None = None
    order_id: int | None = None
    product_id: int
    quantity: int
    price: float
    has_installation: bool = False
    installation_cost: float = 0.0
    created_at: datetime | None = None

    @property
    def line_total(self) -> float:
        return round(self.quantity * (self.price + self.installation_cost), 2)

from datetime import datetime

from pydantic import BaseModel
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship

from models.base import Base


class OrderTimelineEntry(Base):
    """Append-only history of status changes shown to customers and admins."""
    __tablename__ = 'order_timeline'

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey('orders.id', ondelete='CASCADE'), nullable=False, index=True)
    # Free-form: order statuses plus events like RETURN_APPROVED or REFUNDED
    status = Column(String(50), nullable=False)
    note = Column(Text, nullable=True)
    timestamp = Column(DateTime, default=datetime.now, nullable=False)

    order = relationship('Order', back_populates='timeline')


class OrderTimelineEntryDTO(BaseModel):
    id: int | None = None
    order_id: int | None = None
    status: str
    note: str | None = None
    timestamp: datetime | None = None

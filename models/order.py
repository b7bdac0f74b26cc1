from datetime import datetime

from pydantic import BaseModel
from sqlalchemy import Column, Integer, Float, DateTime, String, CheckConstraint, Enum as SQLEnum, Text
from sqlalchemy.orm import relationship

from enums.currency import Currency
from enums.order_status import OrderStatus
from enums.payment_method import PaymentMethod
from enums.payment_status import PaymentStatus
from enums.return_status import ReturnStatus
from enums.vehicle_segment import VehicleSegment
from models.base import Base
from models.orderItem import OrderItemDTO
from models.order_timeline import OrderTimelineEntryDTO
from models.shipping_address import ShippingAddressDTO


class Order(Base):
    __tablename__ = 'orders'

    id = Column(Integer, primary_key=True, unique=True)
    user_id = Column(String, nullable=False, index=True)
    total_amount = Column(Float, nullable=False)
    currency = Column(SQLEnum(Currency), nullable=False, default=Currency.INR)
    payment_method = Column(SQLEnum(PaymentMethod), nullable=False)
    payment_status = Column(SQLEnum(PaymentStatus), nullable=False, default=PaymentStatus.PENDING)
    order_status = Column(SQLEnum(OrderStatus), nullable=False, default=OrderStatus.PROCESSING)

    # Vehicle the installation was priced for (None when no item booked installation)
    vehicle_segment = Column(SQLEnum(VehicleSegment), nullable=True)

    # Payment Gateway Fields
    gateway_order_id = Column(String, nullable=True, unique=True, index=True)
    gateway_payment_id = Column(String, nullable=True)
    gateway_signature = Column(String, nullable=True)

    # Tracking
    tracking_carrier = Column(String, nullable=True)
    tracking_code = Column(String, nullable=True)
    tracking_url = Column(String, nullable=True)

    # Cancellation / Return
    cancellation_reason = Column(Text, nullable=True)
    cancelled_at = Column(DateTime, nullable=True)
    return_reason = Column(Text, nullable=True)
    return_status = Column(SQLEnum(ReturnStatus), nullable=True)
    return_requested_at = Column(DateTime, nullable=True)
    refund_amount = Column(Float, nullable=True)

    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    # Relations
    items = relationship('OrderItem', back_populates='order', cascade='all, delete-orphan', lazy='selectin')
    timeline = relationship('OrderTimelineEntry', back_populates='order', cascade='all, delete-orphan',
                            lazy='selectin', order_by='OrderTimelineEntry.id')
    shipping_address = relationship('ShippingAddress', back_populates='order', uselist=False,
                                    cascade='all, delete-orphan', lazy='selectin')

    __table_args__ = (
        CheckConstraint('total_amount >= 0', name='check_order_total_amount_non_negative'),
    )


class OrderDTO(BaseModel):
    id: int | None = None
    user_id: str | None = None
    total_amount: float | None = None
    currency: Currency | None = None
    payment_method: PaymentMethod | None = None
    payment_status: PaymentStatus | None = None
    order_status: OrderStatus | None = None
    vehicle_segment: VehicleSegment | None = None
    gateway_order_id: str | None = None
    gateway_payment_id: str | None = None
    gateway_signature: str | None = None
    tracking_carrier: str | None = None
    tracking_code: str | None = None
    tracking_url: str | None = None
    cancellation_reason: str | None = None
    cancelled_at: datetime | None = None
    return_reason: str | None = None
    return_status: ReturnStatus | None = None
    return_requested_at: datetime | None = None
    refund_amount: float | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    items: list[OrderItemDTO] = []
    timeline: list[OrderTimelineEntryDTO] = []
    shipping_address: ShippingAddressDTO | None = None

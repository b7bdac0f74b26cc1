from datetime import datetime

from pydantic import BaseModel, Field, field_validator
from sqlalchemy import Column, Integer, String, Float, DateTime, JSON, CheckConstraint

from enums.product_status import ProductStatus
from enums.vehicle_segment import VehicleSegment
from models.base import Base
from models.installation_rule import drop_unknown_segments


class Product(Base):
    __tablename__ = 'products'

    id = Column(Integer, primary_key=True, unique=True)
    name = Column(String, nullable=False)
    slug = Column(String, nullable=False, unique=True, index=True)
    description = Column(String, nullable=True)
    price = Column(Float, nullable=False)
    discount_price = Column(Float, nullable=True)
    sku = Column(String, nullable=True, unique=True)
    status = Column(String(10), nullable=False, default=ProductStatus.ACTIVE.value)

    # Category lineage (slugs from the static category tree)
    category = Column(String, nullable=False, index=True)
    sub_category = Column(String, nullable=True, index=True)
    sub_sub_category = Column(String, nullable=True, index=True)

    stock = Column(Integer, nullable=False, default=0)

    # Installation override (JSON)
    # NULL = defer to category installation rules
    # Format: {"is_available": true, "flat_rate": 499.0, "segment_rates": {"SUV": 699.0}}
    installation_override = Column(JSON, nullable=True)

    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    __table_args__ = (
        CheckConstraint('price >= 0', name='check_product_price_non_negative'),
        CheckConstraint('discount_price IS NULL OR discount_price >= 0', name='check_discount_price_non_negative'),
        CheckConstraint('stock >= 0', name='check_stock_non_negative'),
    )


class InstallationOverrideDTO(BaseModel):
    """
    Product-level installation setting that supersedes category rules.

    is_available=False opts the product out of installation entirely.
    flat_rate wins over segment_rates when both are set.
    """
    is_available: bool = True
    flat_rate: float | None = Field(default=None, ge=0)
    segment_rates: dict[VehicleSegment, float] | None = None

    @field_validator('segment_rates', mode='before')
    @classmethod
    def skip_unknown_segments(cls, v):
        return drop_unknown_segments(v)

    @field_validator('segment_rates')
    @classmethod
    def validate_segment_rates(cls, v):
        if v is None:
            return v
        for segment, rate in v.items():
            if rate < 0:
                raise ValueError(f"Installation rate for {segment.value} must be non-negative (got {rate})")
        return v


class ProductDTO(BaseModel):
    id: int | None = None
    name: str | None = None
    slug: str | None = None
    description: str | None = None
    price: float | None = None
    discount_price: float | None = None
    sku: str | None = None
    status: ProductStatus = ProductStatus.ACTIVE
    category: str | None = None
    sub_category: str | None = None
    sub_sub_category: str | None = None
    stock: int | None = None
    installation_override: InstallationOverrideDTO | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator('sub_category', 'sub_sub_category', mode='before')
    @classmethod
    def empty_level_to_none(cls, v):
        """Blank category levels mean "no value", same as NULL."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

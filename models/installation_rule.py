import logging
from datetime import datetime

from pydantic import BaseModel, field_validator
from sqlalchemy import Column, Integer, String, Boolean, DateTime, JSON, UniqueConstraint

from enums.vehicle_segment import VehicleSegment
from models.base import Base

logger = logging.getLogger(__name__)


class InstallationRule(Base):
    """
    Category-level default installation price table.

    Keyed by (category, sub_category, sub_sub_category); absent levels are NULL,
    so a rule scoped to "alloy-wheels" only has sub_category=NULL and
    sub_sub_category=NULL. Rules are soft-disabled via is_active, never deleted
    by the pricing path.
    """
    __tablename__ = 'installation_rules'

    id = Column(Integer, primary_key=True, autoincrement=True)
    category = Column(String, nullable=False, index=True)
    sub_category = Column(String, nullable=True, index=True)
    sub_sub_category = Column(String, nullable=True, index=True)

    # Segment -> price, e.g. {"Hatchback": 499, "SUV": 599}
    segment_rates = Column(JSON, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    # NOTE: SQLite treats NULLs as distinct in unique constraints, so uniqueness of
    # partially specified keys is enforced by InstallationRuleRepository.upsert
    __table_args__ = (
        UniqueConstraint('category', 'sub_category', 'sub_sub_category', name='uq_installation_rule_key'),
    )


RuleKey = tuple[str, str | None, str | None]


def drop_unknown_segments(rates):
    """
    Keep only rate entries keyed by a known VehicleSegment.

    Older rows may carry free-form keys ("Compact"); those entries are skipped
    so the remaining rates stay usable.
    """
    if not isinstance(rates, dict):
        return rates
    known = {}
    for segment, rate in rates.items():
        try:
            known[VehicleSegment.from_string(segment)] = rate
        except ValueError:
            logger.warning(f"Skipping installation rate for unknown vehicle segment {segment!r}")
    return known


def rule_keys_for(category: str, sub_category: str | None, sub_sub_category: str | None) -> list[RuleKey]:
    """
    Rule keys that apply to a product lineage, most specific first.

    (cat, sub, subsub) if the product has a sub-sub-category,
    (cat, sub, None) if it has a sub-category, then (cat, None, None).
    """
    keys: list[RuleKey] = []
    if sub_sub_category is not None:
        keys.append((category, sub_category, sub_sub_category))
    if sub_category is not None:
        keys.append((category, sub_category, None))
    keys.append((category, None, None))
    return keys


class InstallationRuleDTO(BaseModel):
    id: int | None = None
    category: str
    sub_category: str | None = None
    sub_sub_category: str | None = None
    segment_rates: dict[VehicleSegment, float]
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def key(self) -> RuleKey:
        return self.category, self.sub_category, self.sub_sub_category

    @field_validator('segment_rates', mode='before')
    @classmethod
    def skip_unknown_segments(cls, v):
        return drop_unknown_segments(v)

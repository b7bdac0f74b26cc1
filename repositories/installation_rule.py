from sqlalchemy import select, update, and_, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_execute, session_flush
from enums.vehicle_segment import VehicleSegment
from models.installation_rule import InstallationRule, InstallationRuleDTO, RuleKey, rule_keys_for


def _level_matches(column, value: str | None):
    # Absent levels match an explicit NULL only, never act as wildcards
    return column.is_(None) if value is None else column == value


def _key_condition(category: str, sub_category: str | None, sub_sub_category: str | None):
    return and_(
        InstallationRule.category == category,
        _level_matches(InstallationRule.sub_category, sub_category),
        _level_matches(InstallationRule.sub_sub_category, sub_sub_category),
    )


def normalize_level(value: str | None) -> str | None:
    """Blank strings are stored as NULL so "" and None address the same rule."""
    if value is None:
        return None
    value = value.strip()
    return value or None


class InstallationRuleRepository:
    """Exact-match store for category installation rules. Performs no fallback."""

    @staticmethod
    async def find_rule(
        category: str,
        sub_category: str | None,
        sub_sub_category: str | None,
        session: Session | AsyncSession
    ) -> InstallationRuleDTO | None:
        """
        Get the active rule whose key triple matches exactly.

        Args:
            category: Top-level category slug
            sub_category: Sub-category slug, or None for "no sub-category"
            sub_sub_category: Sub-sub-category slug, or None for "no sub-sub-category"
            session: Database session

        Returns:
            InstallationRuleDTO if an active rule exists, None otherwise
        """
        stmt = (
            select(InstallationRule)
            .where(_key_condition(category, sub_category, sub_sub_category))
            .where(InstallationRule.is_active == True)
            .limit(1)
        )
        result = await session_execute(stmt, session)
        rule = result.scalar()
        if rule is None:
            return None
        return InstallationRuleDTO.model_validate(rule, from_attributes=True)

    @staticmethod
    async def find_candidates(
        category: str,
        sub_category: str | None,
        sub_sub_category: str | None,
        session: Session | AsyncSession
    ) -> dict[RuleKey, InstallationRuleDTO]:
        """
        Batch-load every active rule the resolver may consult for a product lineage.

        For lineage (cat, sub, subsub) these are the keys (cat, sub, subsub),
        (cat, sub, None) and (cat, None, None); missing levels shorten the list.
        One query instead of three.

        Returns:
            Dict mapping exact key triple -> InstallationRuleDTO (only keys that exist)
        """
        keys = rule_keys_for(category, sub_category, sub_sub_category)

        stmt = (
            select(InstallationRule)
            .where(or_(*[_key_condition(*key) for key in keys]))
            .where(InstallationRule.is_active == True)
        )
        result = await session_execute(stmt, session)
        rules = [InstallationRuleDTO.model_validate(r, from_attributes=True) for r in result.scalars().all()]
        return {rule.key: rule for rule in rules}

    @staticmethod
    async def upsert(
        category: str,
        sub_category: str | None,
        sub_sub_category: str | None,
        segment_rates: dict[VehicleSegment, float],
        session: Session | AsyncSession
    ) -> InstallationRuleDTO:
        """
        Create or replace the rule with exactly this key triple.

        Idempotent: writing the same key twice leaves a single (active) rule
        carrying the latest rates.
        """
        category = normalize_level(category)
        sub_category = normalize_level(sub_category)
        sub_sub_category = normalize_level(sub_sub_category)
        rates = {VehicleSegment(segment).value: float(rate) for segment, rate in segment_rates.items()}

        stmt = select(InstallationRule).where(_key_condition(category, sub_category, sub_sub_category))
        result = await session_execute(stmt, session)
        rule = result.scalar()

        if rule is None:
            rule = InstallationRule(
                category=category,
                sub_category=sub_category,
                sub_sub_category=sub_sub_category,
                segment_rates=rates,
                is_active=True
            )
            session.add(rule)
        else:
            rule.segment_rates = rates
            rule.is_active = True

        await session_flush(session)
        return InstallationRuleDTO.model_validate(rule, from_attributes=True)

    @staticmethod
    async def get_all_active(session: Session | AsyncSession) -> list[InstallationRuleDTO]:
        stmt = (
            select(InstallationRule)
            .where(InstallationRule.is_active == True)
            .order_by(InstallationRule.category, InstallationRule.sub_category, InstallationRule.sub_sub_category)
        )
        result = await session_execute(stmt, session)
        return [InstallationRuleDTO.model_validate(r, from_attributes=True) for r in result.scalars().all()]

    @staticmethod
    async def deactivate(rule_id: int, session: Session | AsyncSession) -> bool:
        stmt = (
            update(InstallationRule)
            .where(InstallationRule.id == rule_id)
            .values(is_active=False)
            .execution_options(synchronize_session="fetch")
        )
        result = await session_execute(stmt, session)
        return result.rowcount == 1

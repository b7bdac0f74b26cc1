import asyncio
import logging
from typing import Mapping

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

import config
from db import session_commit
from enums.installation_price_source import InstallationPriceSource
from enums.vehicle_segment import VehicleSegment
from exceptions.catalog import CatalogUnavailableException
from exceptions.product import InvalidInstallationRuleException
from models.installation_price import InstallationPriceDTO
from models.installation_rule import InstallationRuleDTO, RuleKey, rule_keys_for
from models.product import ProductDTO
from repositories.installation_rule import InstallationRuleRepository, normalize_level
from services.product import ProductService
from utils.category_tree import get_category_lineage
from utils.vehicle_reference import segment_for_model

logger = logging.getLogger(__name__)


def resolve_installation_price(
    product: ProductDTO,
    vehicle_segment: VehicleSegment | None,
    rules: Mapping[RuleKey, InstallationRuleDTO]
) -> InstallationPriceDTO:
    """
    Decide whether doorstep installation is offered for a product and at what price.

    Pure function: `rules` is a snapshot of the category rules keyed by their exact
    (category, sub_category, sub_sub_category) triple, normally produced by
    InstallationRuleRepository.find_candidates(). The quote path and the checkout
    path both go through here, so the displayed and the charged price agree.

    Precedence (first match wins):
    1. Override present with is_available=False -> not available (terminal)
    2. Override with a flat rate -> flat rate, for every segment
       (wins over segment rates if both are set)
    3. Override with a segment rate for the vehicle segment -> that rate
    4. Category rules, most specific first: (cat, sub, subsub), (cat, sub, None),
       (cat, None, None). A rule applies if it is active and lists the segment.
       Without a vehicle segment no category rule can apply.
    5. Nothing matched -> not available

    A rate of 0 that is explicitly present is a free installation, not "missing".

    Args:
        product: Current product snapshot
        vehicle_segment: Customer's vehicle segment, or None if unknown
        rules: Candidate category rules keyed by exact key triple

    Returns:
        InstallationPriceDTO(price, source, available)
    """
    override = product.installation_override

    if override is not None:
        if override.is_available is False:
            return InstallationPriceDTO.unavailable()

        if override.flat_rate is not None:
            return InstallationPriceDTO(
                price=override.flat_rate,
                source=InstallationPriceSource.OVERRIDE,
                available=True
            )

        if vehicle_segment is not None and override.segment_rates and vehicle_segment in override.segment_rates:
            return InstallationPriceDTO(
                price=override.segment_rates[vehicle_segment],
                source=InstallationPriceSource.OVERRIDE,
                available=True
            )

    if vehicle_segment is None or product.category is None:
        return InstallationPriceDTO.unavailable()

    for key in rule_keys_for(product.category, product.sub_category, product.sub_sub_category):
        rule = rules.get(key)
        if rule is not None and rule.is_active and vehicle_segment in rule.segment_rates:
            return InstallationPriceDTO(
                price=rule.segment_rates[vehicle_segment],
                source=InstallationPriceSource.CATEGORY,
                available=True
            )

    return InstallationPriceDTO.unavailable()


class InstallationService:

    @staticmethod
    def resolve_vehicle_segment(
        vehicle_segment: VehicleSegment | str | None = None,
        vehicle_model: str | None = None
    ) -> VehicleSegment | None:
        """
        Work out the customer's vehicle segment.

        An explicitly supplied segment wins; otherwise the model name is looked up
        in the vehicle reference table (first brand listing it). Unknown segment,
        unknown model or nothing supplied -> None.
        """
        if vehicle_segment is not None:
            if isinstance(vehicle_segment, VehicleSegment):
                return vehicle_segment
            try:
                return VehicleSegment.from_string(vehicle_segment)
            except ValueError:
                logger.warning(f"Ignoring unknown vehicle segment {vehicle_segment!r}")
                return None
        return segment_for_model(vehicle_model)

    @staticmethod
    async def resolve_for_product(
        product: ProductDTO,
        vehicle_segment: VehicleSegment | None,
        session: Session | AsyncSession
    ) -> InstallationPriceDTO:
        """
        Load the candidate category rules for a product and resolve its price.

        Raises:
            CatalogUnavailableException: If the rule store fails or times out
        """
        try:
            rules = await asyncio.wait_for(
                InstallationRuleRepository.find_candidates(
                    product.category,
                    product.sub_category,
                    product.sub_sub_category,
                    session
                ),
                timeout=config.CATALOG_TIMEOUT_SECONDS
            )
        except asyncio.TimeoutError:
            raise CatalogUnavailableException(
                "installation rule lookup",
                f"timed out after {config.CATALOG_TIMEOUT_SECONDS}s"
            )
        except (SQLAlchemyError, ValidationError) as e:
            raise CatalogUnavailableException("installation rule lookup", str(e)) from e

        return resolve_installation_price(product, vehicle_segment, rules)

    @staticmethod
    async def quote(
        product_id: int,
        session: Session | AsyncSession,
        vehicle_segment: VehicleSegment | str | None = None,
        vehicle_model: str | None = None
    ) -> InstallationPriceDTO:
        """
        Installation price for display on product and cart pages.

        Store failures never surface as a price: they are logged and reported as
        "not available".

        Raises:
            ProductNotFoundException: If the product doesn't exist
        """
        try:
            segment = InstallationService.resolve_vehicle_segment(vehicle_segment, vehicle_model)
            product = await ProductService.get_product(product_id, session)
            return await InstallationService.resolve_for_product(product, segment, session)
        except CatalogUnavailableException as e:
            logger.error(f"Installation quote for product {product_id} failed: {e}")
            return InstallationPriceDTO.unavailable()

    @staticmethod
    async def get_rules(session: Session | AsyncSession) -> list[InstallationRuleDTO]:
        return await InstallationRuleRepository.get_all_active(session)

    @staticmethod
    async def save_rule(
        category: str,
        sub_category: str | None,
        sub_sub_category: str | None,
        segment_rates: Mapping[str, float],
        session: Session | AsyncSession
    ) -> InstallationRuleDTO:
        """
        Create or replace the category installation rule for a key triple.

        The key must be a real path in the category tree and every rate must be
        a non-negative number for a known vehicle segment.

        Raises:
            InvalidInstallationRuleException: If the key or the rates are invalid
        """
        category = normalize_level(category)
        sub_category = normalize_level(sub_category)
        sub_sub_category = normalize_level(sub_sub_category)

        if category is None:
            raise InvalidInstallationRuleException(None, "category is required")
        if sub_sub_category is not None and sub_category is None:
            raise InvalidInstallationRuleException(category, "sub-sub-category given without sub-category")

        most_specific = sub_sub_category or sub_category or category
        lineage = get_category_lineage(most_specific)
        if lineage is None or (lineage.category, lineage.sub_category, lineage.sub_sub_category) != \
                (category, sub_category, sub_sub_category):
            raise InvalidInstallationRuleException(
                category,
                f"'{most_specific}' is not at path {category}/{sub_category}/{sub_sub_category} in the category tree"
            )

        if not segment_rates:
            raise InvalidInstallationRuleException(category, "at least one segment rate is required")

        rates: dict[VehicleSegment, float] = {}
        for segment_name, rate in segment_rates.items():
            try:
                segment = VehicleSegment.from_string(segment_name) \
                    if not isinstance(segment_name, VehicleSegment) else segment_name
            except ValueError as e:
                raise InvalidInstallationRuleException(category, str(e)) from e
            if isinstance(rate, bool) or not isinstance(rate, (int, float)) or rate < 0:
                raise InvalidInstallationRuleException(
                    category,
                    f"rate for {segment.value} must be a non-negative number (got {rate!r})"
                )
            rates[segment] = float(rate)

        rule = await InstallationRuleRepository.upsert(category, sub_category, sub_sub_category, rates, session)
        await session_commit(session)
        logger.info(
            f"Installation rule saved: {category}/{sub_category}/{sub_sub_category} "
            f"-> {', '.join(f'{s.value}={r:.2f}' for s, r in rates.items())}"
        )
        return rule

"""
Unit tests for InstallationRuleRepository exact-key lookups.

Absent key levels are stored as NULL and only ever match NULL: the repository
itself never falls back to a broader rule.
"""

import pytest

from enums.vehicle_segment import VehicleSegment
from repositories.installation_rule import InstallationRuleRepository


class TestFindRule:

    @pytest.mark.asyncio
    async def test_exact_match_only(self, test_session, add_rule):
        await add_rule("exterior-accessories", None, None, {VehicleSegment.SUV: 300.0})

        broad = await InstallationRuleRepository.find_rule("exterior-accessories", None, None, test_session)
        narrow = await InstallationRuleRepository.find_rule("exterior-accessories", "alloy-wheels", None,
                                                            test_session)

        assert broad.segment_rates[VehicleSegment.SUV] == 300.0
        assert narrow is None

    @pytest.mark.asyncio
    async def test_inactive_rule_not_returned(self, test_session, add_rule):
        await add_rule("exterior-accessories", None, None, {VehicleSegment.SUV: 300.0}, is_active=False)

        assert await InstallationRuleRepository.find_rule("exterior-accessories", None, None, test_session) is None


class TestFindCandidates:

    @pytest.mark.asyncio
    async def test_returns_only_lineage_keys(self, test_session, add_rule):
        await add_rule("exterior-accessories", None, None, {VehicleSegment.SUV: 300.0})
        await add_rule("exterior-accessories", "alloy-wheels", None, {VehicleSegment.SUV: 500.0})
        await add_rule("exterior-accessories", "alloy-wheels", "18-inch", {VehicleSegment.SUV: 700.0})
        await add_rule("exterior-accessories", "alloy-wheels", "17-inch", {VehicleSegment.SUV: 650.0})
        await add_rule("exterior-accessories", "spoilers", None, {VehicleSegment.SUV: 900.0})

        candidates = await InstallationRuleRepository.find_candidates(
            "exterior-accessories", "alloy-wheels", "18-inch", test_session
        )

        assert set(candidates) == {
            ("exterior-accessories", "alloy-wheels", "18-inch"),
            ("exterior-accessories", "alloy-wheels", None),
            ("exterior-accessories", None, None),
        }

    @pytest.mark.asyncio
    async def test_top_level_product(self, test_session, add_rule):
        await add_rule("car-care-tools", None, None, {VehicleSegment.SEDAN: 100.0})
        await add_rule("car-care-tools", "cleaning-kits", None, {VehicleSegment.SEDAN: 150.0})

        candidates = await InstallationRuleRepository.find_candidates("car-care-tools", None, None, test_session)

        assert list(candidates) == [("car-care-tools", None, None)]


class TestUpsert:

    @pytest.mark.asyncio
    async def test_upsert_replaces_rates_and_reactivates(self, test_session, add_rule):
        rule_id = await add_rule("car-care-tools", None, None, {VehicleSegment.SUV: 100.0}, is_active=False)

        rule = await InstallationRuleRepository.upsert("car-care-tools", "", None, {VehicleSegment.SEDAN: 50.0},
                                                       test_session)

        assert rule.id == rule_id
        assert rule.is_active is True
        assert rule.segment_rates == {VehicleSegment.SEDAN: 50.0}

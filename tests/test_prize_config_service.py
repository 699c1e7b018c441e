"""Tests for per-area high-tier prize caps."""
import pytest

from ladders.services.prize_config_service import PrizeConfigService
from ladders.utils.exceptions import InvalidInputError


class TestPrizeConfig:

    async def test_unconfigured_area_has_zero_cap(self, db_session, area):
        status = await PrizeConfigService(db_session).get_prize_status(area)

        assert status.area == area
        assert status.max_high_tier_winners == 0
        assert status.used_high_tier_count == 0
        assert status.remaining_high_tier == 0
        assert status.high_tier_reward == 25

    async def test_set_and_update_cap(self, db_session, area):
        service = PrizeConfigService(db_session)

        await service.set_max_high_tier_winners(area.lower(), 3)
        status = await service.set_max_high_tier_winners(area, 5)

        assert status.max_high_tier_winners == 5
        stored = await service.get_prize_status(area)
        assert stored.max_high_tier_winners == 5
        assert stored.remaining_high_tier == 5

    async def test_usage_counts_high_tier_winners(self, db_session, player_factory, area):
        service = PrizeConfigService(db_session)
        await service.set_max_high_tier_winners(area, 2)
        await player_factory(area, position=30, completed=True, reward=25, high_tier=True)
        await player_factory(area, position=30, completed=True, reward=10)

        status = await service.get_prize_status(area)

        assert status.used_high_tier_count == 1
        assert status.remaining_high_tier == 1

    @pytest.mark.parametrize("cap", [-1, "3", 2.5, True])
    async def test_rejects_invalid_caps(self, db_session, area, cap):
        with pytest.raises(InvalidInputError):
            await PrizeConfigService(db_session).set_max_high_tier_winners(area, cap)

    async def test_cap_cannot_drop_below_winners(self, db_session, player_factory, area):
        service = PrizeConfigService(db_session)
        await service.set_max_high_tier_winners(area, 2)
        await player_factory(area, position=30, completed=True, reward=25, high_tier=True)
        await player_factory(area, position=30, completed=True, reward=25, high_tier=True)

        with pytest.raises(InvalidInputError):
            await service.set_max_high_tier_winners(area, 1)

        status = await service.set_max_high_tier_winners(area, 2)
        assert status.remaining_high_tier == 0

    async def test_list_prize_statuses(self, db_session, area):
        service = PrizeConfigService(db_session)
        await service.set_max_high_tier_winners(area, 4)

        statuses = {status.area: status for status in await service.list_prize_statuses()}

        assert statuses[area].max_high_tier_winners == 4

"""Tests for runtime configuration overrides."""
import pytest

from ladders.config import Settings
from ladders.services.player_service import PlayerService
from ladders.services.system_config_service import SystemConfigService
from ladders.utils.exceptions import InvalidInputError


class TestSystemConfig:

    async def test_defaults_come_from_settings(self, db_session):
        config = await SystemConfigService(db_session).get_all_config()

        assert config["starting_rolls"] == 6
        assert config["reward_policy"] == "first_come"
        assert config["guaranteed_finish"] is False

    async def test_override_and_reset(self, db_session, area):
        service = SystemConfigService(db_session)

        entry = await service.set_config_value("starting_rolls", "8", updated_by="admin")
        try:
            assert entry.value == "8"
            assert entry.updated_by == "admin"
            assert await service.get_config_value("starting_rolls") == 8

            player = await PlayerService(db_session).register("override@example.com", area)
            assert player.rolls_granted == 8
        finally:
            value = await service.reset_config_value("starting_rolls", updated_by="admin")

        assert value == 6
        assert await service.get_config_value("starting_rolls") == 6

    async def test_bool_round_trip(self, db_session):
        service = SystemConfigService(db_session)

        await service.set_config_value("guaranteed_finish", "true")
        try:
            assert await service.get_config_value("guaranteed_finish") is True
        finally:
            await service.reset_config_value("guaranteed_finish")

    async def test_unknown_key(self, db_session):
        with pytest.raises(InvalidInputError):
            await SystemConfigService(db_session).set_config_value("wallet", 100)
        with pytest.raises(InvalidInputError):
            await SystemConfigService(db_session).reset_config_value("wallet")

    @pytest.mark.parametrize(
        "key,value",
        [
            ("starting_rolls", -1),
            ("starting_rolls", "many"),
            ("starting_rolls", True),
            ("reward_policy", "lottery"),
            ("high_tier_chance", 1.5),
        ],
    )
    async def test_invalid_values(self, db_session, key, value):
        with pytest.raises(InvalidInputError):
            await SystemConfigService(db_session).set_config_value(key, value)


class TestRewardTiers:

    async def test_tier_amounts_are_not_runtime_settings(self, db_session):
        service = SystemConfigService(db_session)

        config = await service.get_all_config()
        assert "base_reward" not in config
        assert "high_tier_reward" not in config

        with pytest.raises(InvalidInputError):
            await service.set_config_value("high_tier_reward", 30)
        with pytest.raises(InvalidInputError):
            await service.set_config_value("base_reward", 25)

    @pytest.mark.parametrize("base_reward,high_tier_reward", [(25, 25), (30, 25), (-1, 25)])
    def test_settings_require_distinct_ordered_tiers(self, base_reward, high_tier_reward):
        with pytest.raises(ValueError):
            Settings(base_reward=base_reward, high_tier_reward=high_tier_reward)

    def test_settings_accept_ordered_tiers(self):
        settings = Settings(base_reward=5, high_tier_reward=50)
        assert (settings.base_reward, settings.high_tier_reward) == (5, 50)

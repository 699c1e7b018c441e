"""Reward allocation at board completion."""

import logging
import random

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ladders.config import get_settings
from ladders.models.area_prize_config import AreaPrizeConfig
from ladders.models.player_record import PlayerRecord
from ladders.services.system_config_service import SystemConfigService

logger = logging.getLogger(__name__)

FIRST_COME = "first_come"
RANDOM_CHANCE = "random"


class RewardService:
    """Decides the reward tier for a completing player.

    Must run inside the caller's transaction while the caller holds the area
    lock: the high-tier count and the reward it returns are only consistent
    if nobody else can complete in the same area in between. The prize config
    row is also read FOR UPDATE so Postgres serializes completions even across
    processes that do not share the area lock.
    """

    def __init__(
        self,
        db: AsyncSession,
        rng: random.Random | None = None,
        policy: str | None = None,
        high_tier_chance: float | None = None,
    ):
        self.db = db
        self.rng = rng or random.Random()
        self.policy = policy
        self.high_tier_chance = high_tier_chance
        self.config_service = SystemConfigService(db)

    def get_reward_values(self) -> tuple[int, int]:
        """Return ``(base_reward, high_tier_reward)``.

        Tier amounts are deployment settings, not runtime overrides.
        """
        settings = get_settings()
        return settings.base_reward, settings.high_tier_reward

    async def count_high_tier_winners(self, area: str) -> int:
        """Players in ``area`` holding a high-tier reward, whatever amount it paid."""
        result = await self.db.execute(
            select(func.count())
            .select_from(PlayerRecord)
            .where(PlayerRecord.area == area, PlayerRecord.high_tier.is_(True))
        )
        return result.scalar_one()

    async def allocate_reward(self, area: str) -> tuple[int, bool]:
        """Pick the reward for one completion in ``area``; does not commit.

        Returns ``(amount, high_tier)``. The caller stores both on the player
        row; the flag is what counts against the area cap.
        """
        base_reward, high_tier_reward = self.get_reward_values()

        result = await self.db.execute(
            select(AreaPrizeConfig)
            .where(AreaPrizeConfig.area == area)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        config = result.scalar_one_or_none()
        cap = config.max_high_tier_winners if config else 0

        if cap <= 0:
            return base_reward, False

        used = await self.count_high_tier_winners(area)
        if used >= cap:
            logger.info(f"High-tier slots exhausted in {area} ({used}/{cap}), paying base tier")
            return base_reward, False

        policy = self.policy or await self.config_service.get_config_value("reward_policy")
        if policy == RANDOM_CHANCE:
            chance = self.high_tier_chance
            if chance is None:
                chance = await self.config_service.get_config_value("high_tier_chance")
            if self.rng.random() >= chance:
                return base_reward, False

        logger.info(f"High-tier slot {used + 1}/{cap} allocated in {area}")
        return high_tier_reward, True

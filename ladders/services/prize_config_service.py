"""Per-area high-tier prize caps."""

import logging
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ladders.config import get_settings
from ladders.models.area_prize_config import AreaPrizeConfig
from ladders.services.player_service import area_lock_name, normalize_area
from ladders.services.reward_service import RewardService
from ladders.utils import lock_client
from ladders.utils.exceptions import InvalidInputError

logger = logging.getLogger(__name__)


@dataclass
class PrizeStatus:
    area: str
    max_high_tier_winners: int
    used_high_tier_count: int
    high_tier_reward: int

    @property
    def remaining_high_tier(self) -> int:
        return max(0, self.max_high_tier_winners - self.used_high_tier_count)


class PrizeConfigService:
    """Reads and updates AreaPrizeConfig rows."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.settings = get_settings()
        self.reward_service = RewardService(db)

    async def _status(self, area: str, config: AreaPrizeConfig | None) -> PrizeStatus:
        _, high_tier_reward = self.reward_service.get_reward_values()
        return PrizeStatus(
            area=area,
            max_high_tier_winners=config.max_high_tier_winners if config else 0,
            used_high_tier_count=await self.reward_service.count_high_tier_winners(area),
            high_tier_reward=high_tier_reward,
        )

    async def get_prize_status(self, area: str) -> PrizeStatus:
        """Cap and usage for an area. Unconfigured areas have a cap of 0."""
        area = normalize_area(area)
        result = await self.db.execute(
            select(AreaPrizeConfig).where(AreaPrizeConfig.area == area).execution_options(populate_existing=True)
        )
        return await self._status(area, result.scalar_one_or_none())

    async def list_prize_statuses(self) -> list[PrizeStatus]:
        result = await self.db.execute(
            select(AreaPrizeConfig).order_by(AreaPrizeConfig.area.asc()).execution_options(populate_existing=True)
        )
        return [await self._status(config.area, config) for config in result.scalars().all()]

    async def set_max_high_tier_winners(self, area: str, max_high_tier_winners: int) -> PrizeStatus:
        """Upsert the area's cap.

        Raises:
            InvalidInputError: Negative cap, or a cap below the high-tier rewards already issued
        """
        area = normalize_area(area)
        if isinstance(max_high_tier_winners, bool) or not isinstance(max_high_tier_winners, int):
            raise InvalidInputError("Please enter a non-negative whole number of high-tier winners.")
        if max_high_tier_winners < 0:
            raise InvalidInputError("Please enter a non-negative whole number of high-tier winners.")

        async with lock_client.lock(area_lock_name(area), timeout=self.settings.area_lock_timeout_seconds):
            try:
                result = await self.db.execute(
                    select(AreaPrizeConfig)
                    .where(AreaPrizeConfig.area == area)
                    .with_for_update()
                    .execution_options(populate_existing=True)
                )
                config = result.scalar_one_or_none()

                _, high_tier_reward = self.reward_service.get_reward_values()
                used = await self.reward_service.count_high_tier_winners(area)
                if max_high_tier_winners < used:
                    raise InvalidInputError(
                        f"{used} high-tier reward(s) already issued in {area}; the cap cannot go below that."
                    )

                if config:
                    config.max_high_tier_winners = max_high_tier_winners
                else:
                    config = AreaPrizeConfig(area=area, max_high_tier_winners=max_high_tier_winners)
                    self.db.add(config)
                await self.db.commit()
            except Exception:
                await self.db.rollback()
                raise

        logger.info(f"Prize config saved: area={area}, max_high_tier_winners={max_high_tier_winners}")
        return PrizeStatus(
            area=area,
            max_high_tier_winners=max_high_tier_winners,
            used_high_tier_count=used,
            high_tier_reward=high_tier_reward,
        )

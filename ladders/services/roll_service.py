"""Roll resolution: one die roll applied transactionally to one player."""

import logging
import random
from dataclasses import dataclass
from datetime import datetime, UTC

from sqlalchemy.ext.asyncio import AsyncSession

from ladders.config import get_settings
from ladders.services.board import DEFAULT_BOARD, DIE_FACES, Board
from ladders.services.player_service import PlayerService, area_lock_name, normalize_area, normalize_email
from ladders.services.reward_service import RewardService
from ladders.services.system_config_service import SystemConfigService
from ladders.utils import lock_client
from ladders.utils.exceptions import AlreadyCompletedError, NoRollsRemainingError, PlayerNotFoundError

logger = logging.getLogger(__name__)


@dataclass
class RollOutcome:
    """Result of a committed roll."""

    email: str
    area: str
    die_value: int
    from_position: int
    to_position: int
    rolls_used: int
    rolls_granted: int
    completed: bool
    reward: int | None
    jumped_from: int | None = None  # raw landing square when a snake or ladder fired


class RollService:
    """Resolves rolls under the area lock and the player's row lock."""

    def __init__(
        self,
        db: AsyncSession,
        board: Board | None = None,
        rng: random.Random | None = None,
        guaranteed_finish: bool | None = None,
        reward_service: RewardService | None = None,
    ):
        """Initialize roll service.

        Args:
            db: Database session
            board: Board layout, defaults to the standard 30-square board
            rng: Source of die values
            guaranteed_finish: Override for the ``guaranteed_finish`` config flag
            reward_service: Reward allocator, defaults to one sharing ``rng``
        """
        self.db = db
        self.board = board or DEFAULT_BOARD
        self.rng = rng or random.Random()
        self.guaranteed_finish = guaranteed_finish
        self.reward_service = reward_service or RewardService(db, rng=self.rng)
        self.player_service = PlayerService(db)
        self.settings = get_settings()

    async def _guaranteed_finish_enabled(self) -> bool:
        if self.guaranteed_finish is not None:
            return self.guaranteed_finish
        return bool(await SystemConfigService(self.db).get_config_value("guaranteed_finish"))

    async def draw_die(self, position: int, available_rolls: int) -> int:
        """Uniform 1..6, unless the guaranteed-finish policy forces the exact distance home."""
        distance = self.board.final_square - position
        if available_rolls == 1 and 1 <= distance <= DIE_FACES and await self._guaranteed_finish_enabled():
            return distance
        return self.rng.randint(1, DIE_FACES)

    async def resolve_roll(self, email: str, area: str) -> RollOutcome:
        """Roll once for the player.

        Raises:
            PlayerNotFoundError: No such player
            AlreadyCompletedError: Player already finished
            NoRollsRemainingError: No rolls available
            LockTimeoutError: Area lock not acquired in time
        """
        email = normalize_email(email)
        area = normalize_area(area)

        async with lock_client.lock(area_lock_name(area), timeout=self.settings.area_lock_timeout_seconds):
            try:
                player = await self.player_service.get_for_update(email, area)
                if not player:
                    raise PlayerNotFoundError(f"Player not found: {email} in {area}")
                if player.completed:
                    raise AlreadyCompletedError()
                available = player.available_rolls
                if available <= 0:
                    raise NoRollsRemainingError()

                die = await self.draw_die(player.position, available)
                from_position = player.position
                raw_landing, final_landing = self.board.resolve(from_position, die)

                player.rolls_used += 1
                player.position = final_landing

                if self.board.is_final(final_landing):
                    player.position = self.board.final_square
                    player.completed = True
                    player.completed_at = datetime.now(UTC)
                    player.reward, player.high_tier = await self.reward_service.allocate_reward(area)

                await self.db.commit()
            except Exception:
                await self.db.rollback()
                raise

        outcome = RollOutcome(
            email=email,
            area=area,
            die_value=die,
            from_position=from_position,
            to_position=player.position,
            rolls_used=player.rolls_used,
            rolls_granted=player.rolls_granted,
            completed=player.completed,
            reward=player.reward,
            jumped_from=raw_landing if raw_landing != final_landing else None,
        )

        logger.info(
            f"Roll: email={email}, area={area}, die={die}, {from_position}->{outcome.to_position}"
            f"{f' (jump from {raw_landing})' if outcome.jumped_from is not None else ''}, "
            f"rolls={outcome.rolls_used}/{outcome.rolls_granted}"
        )
        if outcome.completed:
            logger.info(f"Board completed: email={email}, area={area}, reward={outcome.reward}")

        return outcome

"""Player record store: registration, lookup, locking, reset and delete."""

import logging

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ladders.config import get_settings
from ladders.models.player_record import PlayerRecord
from ladders.services.system_config_service import SystemConfigService
from ladders.utils import lock_client
from ladders.utils.exceptions import InvalidInputError, PlayerNotFoundError

logger = logging.getLogger(__name__)


def normalize_email(email: str | None) -> str:
    """Trim and lower-case an email; emails are case-insensitive keys."""
    normalized = (email or "").strip().lower()
    if not normalized:
        raise InvalidInputError("Email is required.")
    if "@" not in normalized:
        raise InvalidInputError(f"Invalid email address: {email}")
    return normalized


def normalize_area(area: str | None) -> str:
    """Trim and upper-case an area code, e.g. ``sw1`` -> ``SW1``."""
    normalized = (area or "").strip().upper()
    if not normalized:
        raise InvalidInputError("Area is required.")
    if len(normalized) > 20 or not normalized.isalnum():
        raise InvalidInputError(f"Invalid area code: {area}")
    return normalized


def area_lock_name(area: str) -> str:
    return f"area:{area}"


class PlayerService:
    """Service for PlayerRecord rows keyed by (email, area)."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.settings = get_settings()

    async def register(self, email: str, area: str) -> PlayerRecord:
        """Create the player if needed. Registering twice returns the existing record unchanged."""
        email = normalize_email(email)
        area = normalize_area(area)

        existing = await self.get_player(email, area)
        if existing:
            logger.debug(f"Player {email} already registered in {area}")
            return existing

        starting_rolls = await SystemConfigService(self.db).get_config_value("starting_rolls")
        player = PlayerRecord(
            email=email,
            area=area,
            position=0,
            rolls_used=0,
            rolls_granted=starting_rolls,
            completed=False,
            reward=None,
        )
        self.db.add(player)
        try:
            await self.db.commit()
        except IntegrityError:
            # Concurrent registration won the insert
            await self.db.rollback()
            existing = await self.get_player(email, area)
            if existing:
                return existing
            raise

        logger.info(f"Player registered: email={email}, area={area}, rolls_granted={starting_rolls}")
        return player

    async def get_player(self, email: str, area: str) -> PlayerRecord | None:
        """Read-only lookup, no locking."""
        result = await self.db.execute(
            select(PlayerRecord)
            .where(PlayerRecord.email == normalize_email(email), PlayerRecord.area == normalize_area(area))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def require_player(self, email: str, area: str) -> PlayerRecord:
        player = await self.get_player(email, area)
        if not player:
            raise PlayerNotFoundError(f"Player not found: {normalize_email(email)} in {normalize_area(area)}")
        return player

    async def get_for_update(self, email: str, area: str) -> PlayerRecord | None:
        """Load the player row under an exclusive row lock held until commit or rollback.

        Expects already-normalized keys. ``populate_existing`` makes sure a row
        already in the identity map is refreshed with the locked values.
        """
        result = await self.db.execute(
            select(PlayerRecord)
            .where(PlayerRecord.email == email, PlayerRecord.area == area)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_by_area(self, area: str) -> list[PlayerRecord]:
        """All players in an area ordered by email."""
        result = await self.db.execute(
            select(PlayerRecord)
            .where(PlayerRecord.area == normalize_area(area))
            .order_by(PlayerRecord.email.asc())
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def reset_player(self, email: str, area: str) -> PlayerRecord:
        """Send the player back to the start. ``rolls_granted`` is kept so they can replay their allowance."""
        email = normalize_email(email)
        area = normalize_area(area)

        async with lock_client.lock(area_lock_name(area), timeout=self.settings.area_lock_timeout_seconds):
            try:
                player = await self.get_for_update(email, area)
                if not player:
                    raise PlayerNotFoundError(f"Player not found: {email} in {area}")

                previous_reward = player.reward
                player.position = 0
                player.rolls_used = 0
                player.completed = False
                player.reward = None
                player.high_tier = False
                player.completed_at = None
                await self.db.commit()
            except Exception:
                await self.db.rollback()
                raise

        logger.info(f"Player reset: email={email}, area={area}, cleared_reward={previous_reward}")
        return player

    async def delete_player(self, email: str, area: str) -> None:
        """Permanently remove the player record."""
        email = normalize_email(email)
        area = normalize_area(area)

        async with lock_client.lock(area_lock_name(area), timeout=self.settings.area_lock_timeout_seconds):
            try:
                result = await self.db.execute(
                    delete(PlayerRecord).where(PlayerRecord.email == email, PlayerRecord.area == area)
                )
                if result.rowcount == 0:
                    raise PlayerNotFoundError(f"Player not found: {email} in {area}")
                await self.db.commit()
            except Exception:
                await self.db.rollback()
                raise

        logger.info(f"Player deleted: email={email}, area={area}")

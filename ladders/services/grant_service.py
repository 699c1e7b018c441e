"""Admin roll grants with a single-level undo ledger per area."""

import logging
from dataclasses import dataclass, field

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ladders.config import get_settings
from ladders.models.grant_record import GrantRecord
from ladders.models.player_record import PlayerRecord
from ladders.services.player_service import area_lock_name, normalize_area, normalize_email
from ladders.utils import lock_client
from ladders.utils.exceptions import InvalidAmountError, InvalidInputError, NoGrantHistoryError

logger = logging.getLogger(__name__)


@dataclass
class GrantResult:
    area: str
    amount: int
    affected_emails: list[str] = field(default_factory=list)


class GrantService:
    """Applies and reverts bulk changes to ``rolls_granted``.

    Each grant replaces the area's ledger entry, so only the latest grant in
    an area can be undone, and only once.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.settings = get_settings()

    async def _players_for_update(self, area: str, emails: list[str] | None) -> list[PlayerRecord]:
        stmt = select(PlayerRecord).where(PlayerRecord.area == area)
        if emails is not None:
            stmt = stmt.where(PlayerRecord.email.in_(emails))
        result = await self.db.execute(
            stmt.order_by(PlayerRecord.email.asc()).with_for_update().execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    @staticmethod
    def _apply_delta(players: list[PlayerRecord], amount: int) -> dict[str, int]:
        """Add ``amount`` to each player's grant, clamped at zero.

        Returns the change actually made per email, skipping players left unchanged.
        """
        applied = {}
        for player in players:
            new_value = max(0, player.rolls_granted + amount)
            if new_value != player.rolls_granted:
                applied[player.email] = new_value - player.rolls_granted
                player.rolls_granted = new_value
        return applied

    async def grant_rolls(self, area: str, amount: int, emails: list[str] | None = None) -> GrantResult:
        """Grant (or, with a negative amount, revoke) rolls in an area.

        Args:
            area: Area code
            amount: Signed number of rolls; zero is rejected
            emails: Restrict to these players; unknown emails are skipped. ``None`` means the whole area.

        Returns:
            GrantResult listing the emails that actually changed
        """
        area = normalize_area(area)
        if isinstance(amount, bool) or not isinstance(amount, int):
            raise InvalidAmountError(f"Grant amount must be a whole number, got {amount!r}")
        if amount == 0:
            raise InvalidAmountError()

        targets = None
        if emails is not None:
            targets = sorted({normalize_email(email) for email in emails})
            if not targets:
                raise InvalidInputError("Select at least one player to grant rolls.")

        async with lock_client.lock(area_lock_name(area), timeout=self.settings.area_lock_timeout_seconds):
            try:
                players = await self._players_for_update(area, targets)
                applied = self._apply_delta(players, amount)
                affected = sorted(applied)

                await self.db.execute(delete(GrantRecord).where(GrantRecord.area == area))
                self.db.add(
                    GrantRecord(area=area, affected_emails=affected, rolls_granted=amount, applied_deltas=applied)
                )
                await self.db.commit()
            except Exception:
                await self.db.rollback()
                raise

        if targets is not None:
            skipped = sorted(set(targets) - {player.email for player in players})
            if skipped:
                logger.warning(f"Grant in {area} skipped unknown players: {skipped}")
        logger.info(f"Granted {amount:+d} rolls in {area} to {len(affected)} player(s)")

        return GrantResult(area=area, amount=amount, affected_emails=affected)

    async def get_last_grant(self, area: str) -> GrantRecord | None:
        """The undoable grant for an area, if any."""
        result = await self.db.execute(
            select(GrantRecord)
            .where(GrantRecord.area == normalize_area(area))
            .order_by(GrantRecord.created_at.desc(), GrantRecord.grant_id.desc())
            .limit(1)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def undo_last_grant(self, area: str) -> GrantResult:
        """Revert the area's most recent grant for exactly the players it changed.

        Each player gets back the change actually applied to them, so a
        negative grant that was clamped at zero restores the old allowance.

        Players deleted since the grant are skipped; players registered since
        are untouched. The ledger entry is consumed.

        Raises:
            NoGrantHistoryError: Nothing to undo in this area
        """
        area = normalize_area(area)

        async with lock_client.lock(area_lock_name(area), timeout=self.settings.area_lock_timeout_seconds):
            try:
                result = await self.db.execute(
                    select(GrantRecord)
                    .where(GrantRecord.area == area)
                    .order_by(GrantRecord.created_at.desc(), GrantRecord.grant_id.desc())
                    .limit(1)
                    .with_for_update()
                    .execution_options(populate_existing=True)
                )
                record = result.scalar_one_or_none()
                if not record:
                    raise NoGrantHistoryError(f"No grant action to undo in {area}.")

                amount = record.rolls_granted
                recorded = list(record.affected_emails or [])
                applied = dict(record.applied_deltas or {})
                players = await self._players_for_update(area, recorded) if recorded else []
                for player in players:
                    delta = applied.get(player.email, amount)
                    player.rolls_granted = max(0, player.rolls_granted - delta)
                restored = [player.email for player in players]

                await self.db.delete(record)
                await self.db.commit()
            except Exception:
                await self.db.rollback()
                raise

        missing = sorted(set(recorded) - set(restored))
        if missing:
            logger.warning(f"Undo in {area} skipped players deleted since the grant: {missing}")
        logger.info(f"Undid grant of {amount:+d} rolls in {area} for {len(restored)} player(s)")

        return GrantResult(area=area, amount=amount, affected_emails=restored)

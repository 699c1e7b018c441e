"""Tests for GrantService: bulk roll grants and single-level undo."""
import pytest

from ladders.services.grant_service import GrantService
from ladders.services.player_service import PlayerService
from ladders.utils.exceptions import InvalidAmountError, InvalidInputError, NoGrantHistoryError


class TestGrantRolls:

    async def test_grant_whole_area_then_undo(self, db_session, player_factory, area):
        """Granting 3 to an area and undoing restores every player; a second undo fails."""
        first = await player_factory(area, rolls_granted=6)
        second = await player_factory(area, rolls_granted=2, rolls_used=2)
        service = GrantService(db_session)

        result = await service.grant_rolls(area, 3)

        assert result.amount == 3
        assert sorted(result.affected_emails) == sorted([first.email, second.email])
        assert first.rolls_granted == 9
        assert second.rolls_granted == 5
        assert second.available_rolls == 3

        undone = await service.undo_last_grant(area)

        assert sorted(undone.affected_emails) == sorted([first.email, second.email])
        assert first.rolls_granted == 6
        assert second.rolls_granted == 2

        with pytest.raises(NoGrantHistoryError):
            await service.undo_last_grant(area)

    async def test_grant_to_selected_players(self, db_session, player_factory, area):
        chosen = await player_factory(area, rolls_granted=6)
        other = await player_factory(area, rolls_granted=6)

        result = await GrantService(db_session).grant_rolls(area, 2, emails=[chosen.email.upper()])

        assert result.affected_emails == [chosen.email]
        assert chosen.rolls_granted == 8
        assert other.rolls_granted == 6

    async def test_unknown_emails_are_skipped(self, db_session, player_factory, area):
        known = await player_factory(area, rolls_granted=1)

        result = await GrantService(db_session).grant_rolls(area, 1, emails=[known.email, "nobody@example.com"])

        assert result.affected_emails == [known.email]
        assert known.rolls_granted == 2

    async def test_negative_grant_clamps_at_zero(self, db_session, player_factory, area):
        some = await player_factory(area, rolls_granted=3)
        none_left = await player_factory(area, rolls_granted=0)

        result = await GrantService(db_session).grant_rolls(area, -5)

        assert some.rolls_granted == 0
        assert none_left.rolls_granted == 0
        # Players whose value did not change are not recorded
        assert result.affected_emails == [some.email]

    async def test_players_in_other_areas_untouched(self, db_session, player_factory, area):
        local = await player_factory(area, rolls_granted=6)
        elsewhere = await player_factory(f"{area}X", email=local.email, rolls_granted=6)

        await GrantService(db_session).grant_rolls(area, 4)

        assert local.rolls_granted == 10
        assert elsewhere.rolls_granted == 6

    @pytest.mark.parametrize("amount", [0, True, 1.5])
    async def test_invalid_amounts(self, db_session, area, amount):
        with pytest.raises(InvalidAmountError):
            await GrantService(db_session).grant_rolls(area, amount)

    async def test_empty_email_list_rejected(self, db_session, area):
        with pytest.raises(InvalidInputError):
            await GrantService(db_session).grant_rolls(area, 1, emails=[])

    async def test_grant_recorded_even_when_nobody_changed(self, db_session, area):
        service = GrantService(db_session)

        result = await service.grant_rolls(area, 2)
        assert result.affected_emails == []

        record = await service.get_last_grant(area)
        assert record is not None
        assert record.rolls_granted == 2
        assert record.affected_emails == []
        assert record.applied_deltas == {}


class TestUndoGrant:

    async def test_only_latest_grant_is_undoable(self, db_session, player_factory, area):
        player = await player_factory(area, rolls_granted=6)
        service = GrantService(db_session)

        await service.grant_rolls(area, 3)
        await service.grant_rolls(area, 2)
        undone = await service.undo_last_grant(area)

        assert undone.amount == 2
        assert player.rolls_granted == 9
        with pytest.raises(NoGrantHistoryError):
            await service.undo_last_grant(area)

    async def test_undo_skips_players_deleted_since(self, db_session, player_factory, area):
        kept = await player_factory(area, rolls_granted=6)
        removed = await player_factory(area, rolls_granted=6)
        service = GrantService(db_session)

        await service.grant_rolls(area, 3)
        await PlayerService(db_session).delete_player(removed.email, area)
        undone = await service.undo_last_grant(area)

        assert undone.affected_emails == [kept.email]
        assert kept.rolls_granted == 6

    async def test_undo_ignores_players_registered_since(self, db_session, player_factory, area):
        early = await player_factory(area, rolls_granted=6)
        service = GrantService(db_session)

        await service.grant_rolls(area, 3)
        late = await player_factory(area, rolls_granted=6)
        await service.undo_last_grant(area)

        assert early.rolls_granted == 6
        assert late.rolls_granted == 6

    async def test_undo_is_per_area(self, db_session, player_factory, area):
        await player_factory(area, rolls_granted=6)
        service = GrantService(db_session)

        await service.grant_rolls(area, 1)

        with pytest.raises(NoGrantHistoryError):
            await service.undo_last_grant(f"{area}Y")
        assert await service.get_last_grant(area) is not None

    async def test_undo_consumes_the_record(self, db_session, player_factory, area):
        await player_factory(area, rolls_granted=6)
        service = GrantService(db_session)

        await service.grant_rolls(area, 1)
        await service.undo_last_grant(area)

        assert await service.get_last_grant(area) is None

    async def test_undo_after_clamped_revoke_restores_previous_allowance(self, db_session, player_factory, area):
        """Undo gives back what each player actually lost, not the requested amount."""
        low = await player_factory(area, rolls_granted=3)
        empty = await player_factory(area, rolls_granted=0)
        high = await player_factory(area, rolls_granted=8)
        service = GrantService(db_session)

        await service.grant_rolls(area, -5)

        assert (low.rolls_granted, empty.rolls_granted, high.rolls_granted) == (0, 0, 3)
        record = await service.get_last_grant(area)
        assert record.applied_deltas == {low.email: -3, high.email: -5}

        await service.undo_last_grant(area)

        assert (low.rolls_granted, empty.rolls_granted, high.rolls_granted) == (3, 0, 8)

    async def test_undo_after_positive_grant_clamped_by_later_revoke(self, db_session, player_factory, area):
        """Undo never pushes a player's allowance below zero."""
        player = await player_factory(area, rolls_granted=1)
        service = GrantService(db_session)

        await service.grant_rolls(area, 4)
        player.rolls_granted = 2
        await db_session.commit()
        await service.undo_last_grant(area)

        assert player.rolls_granted == 0


class TestGrantRollback:

    @pytest.fixture
    def failing_commit(self, db_session, monkeypatch):
        """Make the next commit on the test session fail."""

        async def _fail():
            raise RuntimeError("database went away")

        def _arm():
            monkeypatch.setattr(db_session, "commit", _fail)

        return _arm

    async def test_failed_grant_leaves_no_ledger_entry(self, db_session, player_factory, failing_commit, area):
        player = await player_factory(area, rolls_granted=6)
        email = player.email
        service = GrantService(db_session)

        failing_commit()
        with pytest.raises(RuntimeError):
            await service.grant_rolls(area, 3)

        assert await service.get_last_grant(area) is None
        stored = await PlayerService(db_session).get_player(email, area)
        assert stored.rolls_granted == 6

    async def test_failed_grant_keeps_previous_ledger_entry(
            self, db_session, session_factory, player_factory, failing_commit, area
    ):
        player = await player_factory(area, rolls_granted=6)
        email = player.email
        service = GrantService(db_session)
        await service.grant_rolls(area, 2)

        failing_commit()
        with pytest.raises(RuntimeError):
            await service.grant_rolls(area, -4)

        async with session_factory() as session:
            record = await GrantService(session).get_last_grant(area)
            assert record is not None
            assert record.rolls_granted == 2
            assert record.affected_emails == [email]

            stored = await PlayerService(session).get_player(email, area)
            assert stored.rolls_granted == 8

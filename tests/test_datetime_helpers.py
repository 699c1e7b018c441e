"""Tests for datetime helpers and UTC serialization of API payloads."""
from datetime import UTC, datetime, timedelta, timezone

from ladders.schemas.base import serialize_datetime_utc
from ladders.schemas.player import PlayerState
from ladders.utils.datetime_helpers import ensure_utc


def test_ensure_utc_none_returns_none():
    assert ensure_utc(None) is None


def test_ensure_utc_attaches_timezone_to_naive_datetime():
    """Naive datetimes (as SQLite returns them) are marked as UTC without moving the clock."""
    naive = datetime(2024, 5, 1, 12, 30, 0)

    result = ensure_utc(naive)

    assert result.tzinfo is UTC
    assert result.replace(tzinfo=None) == naive


def test_ensure_utc_converts_from_other_timezones_to_utc():
    eastern = timezone(timedelta(hours=-4))
    aware = datetime(2024, 5, 1, 8, 0, tzinfo=eastern)

    result = ensure_utc(aware)

    assert result.tzinfo is UTC
    assert result.replace(tzinfo=None) == datetime(2024, 5, 1, 12, 0)


def test_serialize_uses_z_suffix():
    assert serialize_datetime_utc(datetime(2024, 5, 1, 12, 0)) == "2024-05-01T12:00:00Z"


def test_player_state_dumps_camel_case_utc():
    state = PlayerState(
        email="a@example.com",
        area="SW1",
        position=30,
        rolls_used=4,
        rolls_granted=6,
        available_rolls=2,
        completed=True,
        reward=25,
        completed_at=datetime(2024, 5, 1, 9, 15),
    )

    data = state.model_dump(by_alias=True)

    assert data["rollsUsed"] == 4
    assert data["availableRolls"] == 2
    assert data["completedAt"] == "2024-05-01T09:15:00Z"
    assert data["createdAt"] is None

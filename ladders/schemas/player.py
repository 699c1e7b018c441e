"""Player-facing request and response schemas."""
from datetime import datetime
from typing import Optional

from pydantic import Field

from ladders.schemas.base import AreaCode, BaseSchema, EmailLike


class PlayerKeyRequest(BaseSchema):
    """Identifies a player: email plus area code."""

    email: EmailLike
    area: AreaCode


class PlayerState(BaseSchema):
    email: str
    area: str
    position: int
    rolls_used: int
    rolls_granted: int
    available_rolls: int
    completed: bool
    reward: Optional[int] = None
    high_tier: bool = False
    completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class RollResponse(BaseSchema):
    die_value: int
    from_position: int
    to_position: int
    rolls_used: int
    rolls_granted: int
    available_rolls: int
    completed: bool
    reward: Optional[int] = None
    jumped_from: Optional[int] = None


class BoardJump(BaseSchema):
    """A snake or ladder; serialized as ``{from, to, kind}``."""

    source: int = Field(alias="from")
    destination: int = Field(alias="to")
    kind: str


class BoardLayout(BaseSchema):
    final_square: int
    jumps: list[BoardJump]

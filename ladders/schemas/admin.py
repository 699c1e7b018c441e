"""Admin request and response schemas."""
from datetime import datetime
from typing import Any, Optional

from pydantic import Field

from ladders.schemas.base import AreaCode, BaseSchema, EmailLike
from ladders.schemas.player import PlayerState


class AdminLoginRequest(BaseSchema):
    username: str = Field(min_length=1, max_length=80)
    password: str = Field(min_length=1, max_length=128)


class AdminChangePasswordRequest(BaseSchema):
    current_password: str = Field(min_length=1, max_length=128)
    new_password: str = Field(min_length=1, max_length=128)


class AdminSuccessResponse(BaseSchema):
    success: bool = True
    message: Optional[str] = None


class AreaPlayersResponse(BaseSchema):
    area: str
    players: list[PlayerState]


class GrantRollsRequest(BaseSchema):
    area: AreaCode
    amount: int
    emails: Optional[list[EmailLike]] = None


class UndoGrantRequest(BaseSchema):
    area: AreaCode


class GrantResultResponse(BaseSchema):
    area: str
    amount: int
    affected_emails: list[str]


class LastGrantResponse(BaseSchema):
    area: str
    amount: int
    affected_emails: list[str]
    created_at: datetime


class PrizeConfigRequest(BaseSchema):
    area: AreaCode
    max_high_tier_winners: int


class PrizeStatusResponse(BaseSchema):
    area: str
    max_high_tier_winners: int
    used_high_tier_count: int
    remaining_high_tier: int
    high_tier_reward: int


class UpdateConfigRequest(BaseSchema):
    key: str
    value: Any


class UpdateConfigResponse(BaseSchema):
    success: bool
    key: str
    value: Any
    message: Optional[str] = None

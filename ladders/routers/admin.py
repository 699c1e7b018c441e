"""Admin API router: players, grants, prize caps and runtime config."""
import logging
from typing import Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ladders.database import get_db
from ladders.dependencies import require_admin
from ladders.schemas.admin import (
    AdminChangePasswordRequest,
    AdminLoginRequest,
    AdminSuccessResponse,
    AreaPlayersResponse,
    GrantResultResponse,
    GrantRollsRequest,
    LastGrantResponse,
    PrizeConfigRequest,
    PrizeStatusResponse,
    UndoGrantRequest,
    UpdateConfigRequest,
    UpdateConfigResponse,
)
from ladders.schemas.player import PlayerKeyRequest, PlayerState
from ladders.services import (
    AdminAuthService,
    GrantService,
    PlayerService,
    PrizeConfigService,
    SystemConfigService,
    normalize_area,
    normalize_email,
)
from ladders.utils.exceptions import NoGrantHistoryError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/login", response_model=AdminSuccessResponse)
async def admin_login(request: AdminLoginRequest, db: AsyncSession = Depends(get_db)):
    """Check admin credentials. Clients send them as HTTP Basic on later calls."""
    await AdminAuthService(db).login(request.username, request.password)
    return AdminSuccessResponse(success=True, message="Login successful")


@router.post("/change-password", response_model=AdminSuccessResponse)
async def admin_change_password(request: AdminChangePasswordRequest, db: AsyncSession = Depends(get_db)):
    await AdminAuthService(db).change_password(request.current_password, request.new_password)
    return AdminSuccessResponse(success=True, message="Password changed")


@router.get("/players", response_model=AreaPlayersResponse)
async def list_players(
        area: str = Query(..., min_length=1),
        admin: str = Depends(require_admin),
        db: AsyncSession = Depends(get_db),
):
    """All players in an area ordered by email."""
    players = await PlayerService(db).list_by_area(area)
    return AreaPlayersResponse(
        area=normalize_area(area),
        players=[PlayerState.model_validate(player) for player in players],
    )


@router.post("/players/reset", response_model=PlayerState)
async def reset_player(
        request: PlayerKeyRequest,
        admin: str = Depends(require_admin),
        db: AsyncSession = Depends(get_db),
):
    player = await PlayerService(db).reset_player(request.email, request.area)
    logger.info(f"Admin {admin} reset {player.email} in {player.area}")
    return PlayerState.model_validate(player)


@router.delete("/players", response_model=AdminSuccessResponse)
async def delete_player(
        request: PlayerKeyRequest,
        admin: str = Depends(require_admin),
        db: AsyncSession = Depends(get_db),
):
    await PlayerService(db).delete_player(request.email, request.area)
    logger.info(f"Admin {admin} deleted {normalize_email(request.email)} in {normalize_area(request.area)}")
    return AdminSuccessResponse(success=True, message="Player deleted")


@router.post("/grant-rolls", response_model=GrantResultResponse)
async def grant_rolls(
        request: GrantRollsRequest,
        admin: str = Depends(require_admin),
        db: AsyncSession = Depends(get_db),
):
    """Add (or with a negative amount, remove) rolls for an area or a subset of its players."""
    result = await GrantService(db).grant_rolls(request.area, request.amount, request.emails)
    return GrantResultResponse(area=result.area, amount=result.amount, affected_emails=result.affected_emails)


@router.post("/undo-grant", response_model=GrantResultResponse)
async def undo_grant(
        request: UndoGrantRequest,
        admin: str = Depends(require_admin),
        db: AsyncSession = Depends(get_db),
):
    result = await GrantService(db).undo_last_grant(request.area)
    return GrantResultResponse(area=result.area, amount=result.amount, affected_emails=result.affected_emails)


@router.get("/last-grant", response_model=LastGrantResponse)
async def get_last_grant(
        area: str = Query(..., min_length=1),
        admin: str = Depends(require_admin),
        db: AsyncSession = Depends(get_db),
):
    """The grant that undo would revert."""
    record = await GrantService(db).get_last_grant(area)
    if not record:
        raise NoGrantHistoryError(f"No grant action to undo in {normalize_area(area)}.")
    return LastGrantResponse(
        area=record.area,
        amount=record.rolls_granted,
        affected_emails=list(record.affected_emails or []),
        created_at=record.created_at,
    )


@router.get("/prizes", response_model=list[PrizeStatusResponse])
async def list_prizes(admin: str = Depends(require_admin), db: AsyncSession = Depends(get_db)):
    statuses = await PrizeConfigService(db).list_prize_statuses()
    return [PrizeStatusResponse.model_validate(status) for status in statuses]


@router.get("/prize", response_model=PrizeStatusResponse)
async def get_prize(
        area: str = Query(..., min_length=1),
        admin: str = Depends(require_admin),
        db: AsyncSession = Depends(get_db),
):
    status = await PrizeConfigService(db).get_prize_status(area)
    return PrizeStatusResponse.model_validate(status)


@router.put("/prize", response_model=PrizeStatusResponse)
async def set_prize(
        request: PrizeConfigRequest,
        admin: str = Depends(require_admin),
        db: AsyncSession = Depends(get_db),
):
    status = await PrizeConfigService(db).set_max_high_tier_winners(request.area, request.max_high_tier_winners)
    logger.info(f"Admin {admin} set high-tier cap for {status.area} to {status.max_high_tier_winners}")
    return PrizeStatusResponse.model_validate(status)


@router.get("/config")
async def get_config(admin: str = Depends(require_admin), db: AsyncSession = Depends(get_db)) -> dict[str, Any]:
    """Effective runtime configuration (database overrides on top of environment settings)."""
    return await SystemConfigService(db).get_all_config()


@router.patch("/config", response_model=UpdateConfigResponse)
async def update_config(
        request: UpdateConfigRequest,
        admin: str = Depends(require_admin),
        db: AsyncSession = Depends(get_db),
):
    service = SystemConfigService(db)
    config_entry = await service.set_config_value(request.key, request.value, updated_by=admin)
    value = service.deserialize_value(config_entry.value, config_entry.value_type)
    return UpdateConfigResponse(
        success=True,
        key=request.key,
        value=value,
        message=f"Configuration '{request.key}' updated successfully",
    )


@router.delete("/config/{key}", response_model=UpdateConfigResponse)
async def reset_config(key: str, admin: str = Depends(require_admin), db: AsyncSession = Depends(get_db)):
    """Drop a database override so the environment value applies again."""
    value = await SystemConfigService(db).reset_config_value(key, updated_by=admin)
    return UpdateConfigResponse(
        success=True,
        key=key,
        value=value,
        message=f"Configuration '{key}' reset to default",
    )

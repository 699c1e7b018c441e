"""Player API router: register, state, roll, board layout."""
import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ladders.database import get_db
from ladders.schemas.player import BoardJump, BoardLayout, PlayerKeyRequest, PlayerState, RollResponse
from ladders.services import DEFAULT_BOARD, PlayerService, RollService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["player"])


@router.post("/player/register", response_model=PlayerState)
async def register_player(request: PlayerKeyRequest, db: AsyncSession = Depends(get_db)):
    """Register a player. Registering again returns the existing record."""
    player = await PlayerService(db).register(request.email, request.area)
    return PlayerState.model_validate(player)


@router.post("/player/login", response_model=PlayerState)
async def login_player(request: PlayerKeyRequest, db: AsyncSession = Depends(get_db)):
    """Check a player exists; 404 means they should register first."""
    player = await PlayerService(db).require_player(request.email, request.area)
    return PlayerState.model_validate(player)


@router.get("/player/state", response_model=PlayerState)
async def get_player_state(
        email: str = Query(..., min_length=1),
        area: str = Query(..., min_length=1),
        db: AsyncSession = Depends(get_db),
):
    """Current record for a player (read only)."""
    player = await PlayerService(db).require_player(email, area)
    return PlayerState.model_validate(player)


@router.post("/player/roll", response_model=RollResponse)
async def roll(request: PlayerKeyRequest, db: AsyncSession = Depends(get_db)):
    """Roll the die once for the player."""
    outcome = await RollService(db).resolve_roll(request.email, request.area)
    return RollResponse(
        die_value=outcome.die_value,
        from_position=outcome.from_position,
        to_position=outcome.to_position,
        rolls_used=outcome.rolls_used,
        rolls_granted=outcome.rolls_granted,
        available_rolls=max(0, outcome.rolls_granted - outcome.rolls_used),
        completed=outcome.completed,
        reward=outcome.reward,
        jumped_from=outcome.jumped_from,
    )


@router.get("/board", response_model=BoardLayout)
async def get_board():
    """Board size and snake/ladder squares."""
    return BoardLayout(
        final_square=DEFAULT_BOARD.final_square,
        jumps=[
            BoardJump(source=jump.source, destination=jump.destination, kind=jump.kind)
            for jump in DEFAULT_BOARD.describe_jumps()
        ],
    )

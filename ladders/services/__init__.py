from ladders.services.board import Board, DEFAULT_BOARD, FINAL_SQUARE, JUMPS
from ladders.services.system_config_service import SystemConfigService
from ladders.services.player_service import PlayerService, normalize_area, normalize_email
from ladders.services.reward_service import RewardService
from ladders.services.roll_service import RollOutcome, RollService
from ladders.services.grant_service import GrantResult, GrantService
from ladders.services.prize_config_service import PrizeConfigService, PrizeStatus
from ladders.services.admin_auth_service import AdminAuthService

__all__ = [
    "Board",
    "DEFAULT_BOARD",
    "FINAL_SQUARE",
    "JUMPS",
    "SystemConfigService",
    "PlayerService",
    "normalize_area",
    "normalize_email",
    "RewardService",
    "RollOutcome",
    "RollService",
    "GrantResult",
    "GrantService",
    "PrizeConfigService",
    "PrizeStatus",
    "AdminAuthService",
]

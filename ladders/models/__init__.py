"""Database models."""
from ladders.models.player_record import PlayerRecord
from ladders.models.area_prize_config import AreaPrizeConfig
from ladders.models.grant_record import GrantRecord
from ladders.models.admin_credential import AdminCredential, ADMIN_CREDENTIAL_ID
from ladders.models.system_config import SystemConfig

__all__ = [
    "PlayerRecord",
    "AreaPrizeConfig",
    "GrantRecord",
    "AdminCredential",
    "ADMIN_CREDENTIAL_ID",
    "SystemConfig",
]

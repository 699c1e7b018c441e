"""Application configuration management."""
from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from sqlalchemy.engine.url import make_url, URL
from typing import Optional
import logging

SQLITE_LOCAL_URL = "sqlite+aiosqlite:///./ladders.db"
DEFAULT_ADMIN_PASSWORD = "ChangeMe123!"
REWARD_POLICIES = ("first_come", "random")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str = SQLITE_LOCAL_URL
    db_pool_size: int = 5
    db_max_overflow: int = 10

    # Redis (optional, falls back to in-process locks)
    redis_url: str = ""

    # Application
    frontend_url: str = "https://snakes-ladders.example.com"
    environment: str = "development"
    log_dir: str = "logs"

    # Admin access (bootstrapped into admin_credentials on first run)
    admin_username: str = "admin"
    admin_password: str = DEFAULT_ADMIN_PASSWORD

    # Game constants
    starting_rolls: int = 6  # Free rolls every new player gets
    base_reward: int = 10  # Unlimited tier
    high_tier_reward: int = 25  # Capped per area by AreaPrizeConfig
    reward_policy: str = "first_come"  # "first_come" or "random"
    high_tier_chance: float = 0.5  # Only used by the "random" policy
    guaranteed_finish: bool = False  # Force the last roll to land on the final square when in reach

    # Locking
    area_lock_timeout_seconds: int = 10

    @model_validator(mode="after")
    def validate_all_config(self):
        """Validate game configuration and normalize Postgres URLs."""
        logger = logging.getLogger(__name__)

        if self.environment == "production" and self.admin_password == DEFAULT_ADMIN_PASSWORD:
            raise ValueError("admin_password must be changed from default value in production")

        if self.starting_rolls < 0:
            raise ValueError("starting_rolls must be >= 0")

        if self.base_reward < 0 or self.high_tier_reward <= self.base_reward:
            raise ValueError("Rewards must satisfy 0 <= base_reward < high_tier_reward")

        if self.reward_policy not in REWARD_POLICIES:
            raise ValueError(f"Unsupported reward_policy: {self.reward_policy}. Use one of {REWARD_POLICIES}.")

        if not 0.0 <= self.high_tier_chance <= 1.0:
            raise ValueError("high_tier_chance must be between 0 and 1")

        if self.area_lock_timeout_seconds < 1:
            raise ValueError("area_lock_timeout_seconds must be at least 1 second")

        # Database URL normalization
        url = self.database_url
        if not url:
            logger.warning("Empty DATABASE_URL, using SQLite fallback")
            self.database_url = SQLITE_LOCAL_URL
            return self

        parsed: Optional[URL] = None
        try:
            parsed = make_url(url)
        except Exception as e:  # pragma: no cover
            logger.error(f"Failed to parse DATABASE_URL: {e}")
            self.database_url = SQLITE_LOCAL_URL
            return self

        drivername = parsed.drivername
        if drivername.startswith("postgres") and "+asyncpg" not in drivername:
            parsed = parsed.set(drivername="postgresql+asyncpg")
            logger.info(f"Driver normalized: {drivername} -> {parsed.drivername}")

        # render_as_string re-encodes special characters in the password
        self.database_url = parsed.render_as_string(hide_password=False)
        return self

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

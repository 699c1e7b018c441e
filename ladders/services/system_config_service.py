"""Service for managing runtime game configuration."""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import delete, select
from ladders.config import REWARD_POLICIES, get_settings
from ladders.models.system_config import SystemConfig
from ladders.utils.exceptions import InvalidInputError
from datetime import datetime, timezone
from typing import Any, Dict, Optional
import logging

logger = logging.getLogger(__name__)


class SystemConfigService:
    """Service for managing system configuration values."""

    # Define all configurable keys with their metadata
    CONFIG_SCHEMA: Dict[str, Dict[str, Any]] = {
        # Rolls
        "starting_rolls": {
            "type": "int",
            "category": "rolls",
            "description": "Rolls granted to a newly registered player",
            "min": 0,
            "max": 100,
        },
        "guaranteed_finish": {
            "type": "bool",
            "category": "rolls",
            "description": "Force the last available roll to reach the final square when in range",
        },

        # Rewards
        "reward_policy": {
            "type": "string",
            "category": "rewards",
            "description": "How high-tier slots are handed out",
            "options": list(REWARD_POLICIES),
        },
        "high_tier_chance": {
            "type": "float",
            "category": "rewards",
            "description": "Chance of the high tier per completion under the random policy",
            "min": 0.0,
            "max": 1.0,
        },
    }

    def __init__(self, session: AsyncSession):
        """Initialize the service with a database session."""
        self.session = session

    async def get_config_value(self, key: str) -> Optional[Any]:
        """
        Get a configuration value from the database, falling back to environment settings.

        Args:
            key: Configuration key

        Returns:
            Configuration value, or None if not found
        """
        result = await self.session.execute(
            select(SystemConfig).where(SystemConfig.key == key)
        )
        config_entry = result.scalar_one_or_none()

        if config_entry:
            return self.deserialize_value(config_entry.value, config_entry.value_type)

        settings = get_settings()
        return getattr(settings, key, None)

    async def set_config_value(
        self,
        key: str,
        value: Any,
        updated_by: Optional[str] = None
    ) -> SystemConfig:
        """
        Set a configuration value in the database.

        Args:
            key: Configuration key
            value: New value
            updated_by: Username of the admin making the change

        Returns:
            Updated SystemConfig entry

        Raises:
            InvalidInputError: If key is not in schema or value is invalid
        """
        if key not in self.CONFIG_SCHEMA:
            raise InvalidInputError(f"Unknown configuration key: {key}")

        schema = self.CONFIG_SCHEMA[key]
        value_type = schema["type"]

        validated_value = self._validate_value(key, value, schema)
        serialized_value = self._serialize_value(validated_value, value_type)

        result = await self.session.execute(
            select(SystemConfig).where(SystemConfig.key == key)
        )
        config_entry = result.scalar_one_or_none()

        if config_entry:
            config_entry.value = serialized_value
            config_entry.value_type = value_type
            config_entry.updated_at = datetime.now(timezone.utc)
            config_entry.updated_by = updated_by
        else:
            config_entry = SystemConfig(
                key=key,
                value=serialized_value,
                value_type=value_type,
                description=schema.get("description"),
                category=schema.get("category"),
                updated_at=datetime.now(timezone.utc),
                updated_by=updated_by
            )
            self.session.add(config_entry)

        await self.session.commit()
        await self.session.refresh(config_entry)

        logger.info(f"Config updated: {key} = {validated_value} by {updated_by or 'system'}")

        return config_entry

    async def reset_config_value(self, key: str, updated_by: Optional[str] = None) -> Any:
        """Drop the database override for ``key`` and return the environment value now in effect."""
        if key not in self.CONFIG_SCHEMA:
            raise InvalidInputError(f"Unknown configuration key: {key}")

        await self.session.execute(delete(SystemConfig).where(SystemConfig.key == key))
        await self.session.commit()

        value = getattr(get_settings(), key, None)
        logger.info(f"Config reset: {key} = {value} by {updated_by or 'system'}")
        return value

    async def get_all_config(self) -> Dict[str, Any]:
        """
        Get all configuration values as a dictionary.

        Returns:
            Dictionary of all config values
        """
        settings = get_settings()
        config_dict = {key: getattr(settings, key, None) for key in self.CONFIG_SCHEMA}

        result = await self.session.execute(select(SystemConfig))
        for config_entry in result.scalars().all():
            if config_entry.key in self.CONFIG_SCHEMA:
                config_dict[config_entry.key] = self.deserialize_value(
                    config_entry.value,
                    config_entry.value_type
                )

        return config_dict

    @staticmethod
    def _validate_value(key: str, value: Any, schema: Dict[str, Any]) -> Any:
        """Validate and convert a configuration value."""
        value_type = schema["type"]

        if value_type == "int":
            if isinstance(value, bool):
                raise InvalidInputError(f"Invalid integer value for {key}: {value}")
            try:
                validated = int(value)
            except (ValueError, TypeError):
                raise InvalidInputError(f"Invalid integer value for {key}: {value}")

            if "min" in schema and validated < schema["min"]:
                raise InvalidInputError(f"{key} must be >= {schema['min']}, got {validated}")
            if "max" in schema and validated > schema["max"]:
                raise InvalidInputError(f"{key} must be <= {schema['max']}, got {validated}")

        elif value_type == "float":
            try:
                validated = float(value)
            except (ValueError, TypeError):
                raise InvalidInputError(f"Invalid float value for {key}: {value}")

            if "min" in schema and validated < schema["min"]:
                raise InvalidInputError(f"{key} must be >= {schema['min']}, got {validated}")
            if "max" in schema and validated > schema["max"]:
                raise InvalidInputError(f"{key} must be <= {schema['max']}, got {validated}")

        elif value_type == "string":
            validated = str(value)

            if "options" in schema and validated not in schema["options"]:
                raise InvalidInputError(
                    f"{key} must be one of {schema['options']}, got {validated}"
                )

        elif value_type == "bool":
            if isinstance(value, bool):
                validated = value
            elif isinstance(value, str):
                validated = value.lower() in ("true", "1", "yes")
            else:
                validated = bool(value)
        else:
            raise InvalidInputError(f"Unknown value type: {value_type}")

        return validated

    @staticmethod
    def _serialize_value(value: Any, value_type: str) -> str:
        """Convert a value to string for database storage."""
        if value_type == "bool":
            return "true" if value else "false"
        return str(value)

    @staticmethod
    def deserialize_value(value: str, value_type: str) -> Any:
        """Convert a string value from database to proper Python type."""
        if value_type == "int":
            return int(value)
        elif value_type == "float":
            return float(value)
        elif value_type == "bool":
            return value.lower() in ("true", "1", "yes")
        return value

"""
Pydantic models for SceneKit configuration validation

Type-safe configuration schema with automatic validation, so a malformed
config file is reported at load time instead of failing inside a scene.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .constants import DEFAULT_POLL_INTERVAL_SECONDS, HOUSEKEEPING_VARIABLE


class SceneKitConfig(BaseModel):
    """Complete SceneKit configuration schema.

    Example:
        >>> validated = SceneKitConfig(**json.load(open("config/production.json")))
        >>> validated.poll_interval_seconds
        60
    """

    # Controller connection (credentials come from the environment)
    host_url: str = Field(default="http://homecenter.local", description="Base URL of the controller")
    request_timeout_seconds: float = Field(default=10.0, gt=0, le=120, description="HTTP read timeout")

    # Housekeeping
    housekeeping_variable: str = Field(
        default=HOUSEKEEPING_VARIABLE,
        min_length=1,
        description="Global variable holding the housekeeping schedule",
    )
    housekeeping_enabled: bool = Field(default=True, description="Run the housekeeping loop")
    poll_interval_seconds: int = Field(
        default=DEFAULT_POLL_INTERVAL_SECONDS, ge=1, le=3600, description="Seconds between housekeeping passes"
    )

    # Runtime settings
    environment: str = Field(default="development", description="Runtime environment")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", pattern=r"^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$", description="Logging level")
    timezone: str = Field(default="Europe/Stockholm", description="Timezone for time-window helpers")
    host: str = Field(default="0.0.0.0", description="Bind address of the HTTP service")
    port: int = Field(default=5080, ge=1, le=65535, description="Port of the HTTP service")

    # Runtime metadata (not saved to file)
    _runtime: Optional[Dict[str, Any]] = None

    model_config = {
        "extra": "allow",  # forward compatibility
        "str_strip_whitespace": True,
        "validate_assignment": True,
    }

    @field_validator('timezone')
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
            return v
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Invalid timezone: {v}. Must be a valid IANA timezone (e.g., 'Europe/Stockholm')")

    @field_validator('host_url')
    @classmethod
    def validate_host_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("host_url must start with http:// or https://")
        return v.rstrip("/")

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(exclude={'_runtime'}, mode='json')


def validate_config_dict(config_dict: Dict[str, Any]) -> tuple[SceneKitConfig, list[str]]:
    """Validate a config dictionary against the schema.

    Returns:
        Tuple of (validated_config, warnings_list)

    Raises:
        ValueError: If config is invalid with detailed error messages
    """
    warnings = []
    try:
        validated = SceneKitConfig(**config_dict)
    except Exception as e:
        raise ValueError(f"Configuration validation failed: {str(e)}")

    if "housekeeping_var" in config_dict:
        warnings.append("Field 'housekeeping_var' is deprecated, use 'housekeeping_variable' instead")
    return validated, warnings


def migrate_legacy_config(config_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Migrate legacy config keys to the current schema."""
    migrated = config_dict.copy()
    if 'housekeeping_var' in migrated and 'housekeeping_variable' not in migrated:
        migrated['housekeeping_variable'] = migrated['housekeeping_var']
    return migrated

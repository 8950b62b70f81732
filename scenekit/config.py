"""
Centralized configuration management for SceneKit
Handles environment-specific config files, environment overrides and
schema validation.
"""

import copy
import json
import logging
import os
import threading
from pathlib import Path
from typing import Any, Dict, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .config_schema import migrate_legacy_config, validate_config_dict
from .constants import DEFAULT_POLL_INTERVAL_SECONDS, HOUSEKEEPING_VARIABLE
from .utils.timezone import invalidate_timezone_cache

logger = logging.getLogger(__name__)

# Environment variables that override file settings
ENV_OVERRIDES = {
    "SCENEKIT_HOST_URL": "host_url",
    "SCENEKIT_TIMEZONE": "timezone",
    "SCENEKIT_HOUSEKEEPING_VARIABLE": "housekeeping_variable",
    "SCENEKIT_LOG_LEVEL": "log_level",
}


class ConfigManager:
    """Manages configuration loading and validation"""

    def __init__(self, base_path: Optional[str] = None):
        self.base_path = Path(base_path) if base_path else Path(__file__).parent.parent
        self.config_dir = self.base_path / "config"
        self.environment = os.getenv("SCENEKIT_ENV", "development")
        self._lock = threading.RLock()
        self._cache: Optional[Dict[str, Any]] = None

    def _read_json(self, path: Path) -> Dict[str, Any]:
        if not path.exists():
            return {}
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Could not load config file %s: %s", path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring config file %s: expected a JSON object", path)
            return {}
        return data

    def load_config(self, config_name: Optional[str] = None) -> Dict[str, Any]:
        """
        Load configuration based on environment

        Args:
            config_name: Specific config file name (without .json).
                         If None, uses environment-based config

        Returns:
            Configuration dictionary
        """
        if config_name is None:
            config_name = self.environment

        config_file = self.config_dir / f"{config_name}.json"
        default_config = self._read_json(self.config_dir / "default_config.json")
        env_config = self._read_json(config_file)

        config = {**default_config, **env_config}
        for env_name, key in ENV_OVERRIDES.items():
            value = os.getenv(env_name)
            if value:
                config[key] = value
        config.setdefault("environment", self.environment)

        validated = self.validate_config(config)
        validated["_runtime"] = {
            "environment": self.environment,
            "config_file": str(config_file),
            "base_path": str(self.base_path),
        }
        return validated

    def validate_config(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Validate and clean configuration.

        Uses the pydantic schema; falls back to a defaults pass when the
        schema rejects the config so the service can still start.
        """
        try:
            validated_model, warnings = validate_config_dict(migrate_legacy_config(config))
            for warning in warnings:
                logger.warning(f"Config validation warning: {warning}")
            return validated_model.to_dict()
        except ValueError as e:
            logger.error(f"Configuration schema validation failed: {e}")
            logger.warning("Falling back to legacy validation (data may be incomplete)")
        return self._legacy_validate_config(config)

    def _legacy_validate_config(self, config: Dict[str, Any]) -> Dict[str, Any]:
        defaults = {
            "host_url": "http://homecenter.local",
            "request_timeout_seconds": 10.0,
            "housekeeping_variable": HOUSEKEEPING_VARIABLE,
            "housekeeping_enabled": True,
            "poll_interval_seconds": DEFAULT_POLL_INTERVAL_SECONDS,
            "environment": self.environment,
            "debug": False,
            "log_level": "INFO",
            "timezone": "Europe/Stockholm",
            "host": "0.0.0.0",
            "port": 5080,
        }
        cleaned = {k: v for k, v in config.items() if not k.startswith("_")}
        for key, default_value in defaults.items():
            if key not in cleaned:
                cleaned[key] = copy.deepcopy(default_value)

        try:
            cleaned["poll_interval_seconds"] = max(1, min(3600, int(cleaned["poll_interval_seconds"])))
        except (ValueError, TypeError):
            cleaned["poll_interval_seconds"] = DEFAULT_POLL_INTERVAL_SECONDS

        try:
            cleaned["port"] = int(cleaned["port"])
        except (ValueError, TypeError):
            cleaned["port"] = 5080

        if not isinstance(cleaned.get("housekeeping_variable"), str) or not cleaned["housekeeping_variable"].strip():
            cleaned["housekeeping_variable"] = HOUSEKEEPING_VARIABLE

        tz_value = str(cleaned.get("timezone") or "").strip()
        try:
            ZoneInfo(tz_value)
            cleaned["timezone"] = tz_value
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning("Invalid timezone '%s' in config - falling back to Europe/Stockholm", tz_value)
            cleaned["timezone"] = "Europe/Stockholm"

        return cleaned

    def get_config(self) -> Dict[str, Any]:
        """Return the cached configuration, loading it on first use."""
        with self._lock:
            if self._cache is None:
                self._cache = self.load_config()
            return copy.deepcopy(self._cache)

    def invalidate(self) -> None:
        with self._lock:
            self._cache = None
        invalidate_timezone_cache()

    def save_config(self, config: Dict[str, Any], config_name: Optional[str] = None) -> bool:
        """
        Save configuration to file

        Returns:
            True if saved successfully
        """
        if config_name is None:
            config_name = self.environment
        config_file = self.config_dir / f"{config_name}.json"

        try:
            validated_model, _ = validate_config_dict(config)
            save_data = validated_model.to_dict()
        except ValueError as e:
            logger.error("Refusing to save invalid configuration: %s", e)
            return False

        try:
            config_file.parent.mkdir(parents=True, exist_ok=True)
            with open(config_file, 'w', encoding='utf-8') as f:
                json.dump(save_data, f, indent=2)
        except OSError as e:
            logger.error("Could not write %s: %s", config_file, e)
            return False
        self.invalidate()
        return True


# Global config manager instance
config_manager = ConfigManager()


def load_config() -> Dict[str, Any]:
    """Load current environment configuration (cached)"""
    return config_manager.get_config()





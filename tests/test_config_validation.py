"""
Unit tests for configuration validation and loading.

Tests cover:
- Pydantic schema defaults and field errors
- Legacy key migration
- ConfigManager merge order (default file, environment file, env vars)
- Fallback to the legacy defaults pass
"""
import json

import pytest

from scenekit.config import ENV_OVERRIDES, ConfigManager
from scenekit.config_schema import (SceneKitConfig, migrate_legacy_config,
                                    validate_config_dict)


class TestPydanticValidation:

    def test_defaults(self):
        config = SceneKitConfig()
        assert config.housekeeping_variable == "HOUSEKEEPING"
        assert config.poll_interval_seconds == 60
        assert config.timezone == "Europe/Stockholm"

    def test_host_url_trailing_slash_is_stripped(self):
        validated, warnings = validate_config_dict({"host_url": "http://hc.local/"})
        assert validated.host_url == "http://hc.local"
        assert warnings == []

    @pytest.mark.parametrize("config", [
        {"host_url": "hc.local"},
        {"timezone": "Mars/Olympus"},
        {"poll_interval_seconds": 0},
        {"poll_interval_seconds": 7200},
        {"log_level": "LOUD"},
        {"port": 70000},
        {"housekeeping_variable": ""},
    ])
    def test_invalid_fields(self, config):
        with pytest.raises(ValueError):
            validate_config_dict(config)

    def test_extra_fields_allowed(self):
        validated, _ = validate_config_dict({"future_option": True})
        assert validated.to_dict()["future_option"] is True


class TestLegacyMigration:

    def test_housekeeping_var_is_migrated(self):
        migrated = migrate_legacy_config({"housekeeping_var": "HK"})
        assert migrated["housekeeping_variable"] == "HK"

    def test_new_key_wins(self):
        migrated = migrate_legacy_config({"housekeeping_var": "OLD", "housekeeping_variable": "NEW"})
        assert migrated["housekeeping_variable"] == "NEW"

    def test_deprecation_warning(self):
        _, warnings = validate_config_dict(migrate_legacy_config({"housekeeping_var": "HK"}))
        assert any("deprecated" in w for w in warnings)


@pytest.fixture
def config_root(tmp_path, monkeypatch):
    for env_name in ENV_OVERRIDES:
        monkeypatch.delenv(env_name, raising=False)
    monkeypatch.setenv("SCENEKIT_ENV", "testing")
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    (config_dir / "default_config.json").write_text(json.dumps({
        "host_url": "http://default.local",
        "poll_interval_seconds": 60,
    }))
    return tmp_path


class TestConfigManager:

    def test_environment_file_overrides_defaults(self, config_root):
        (config_root / "config" / "testing.json").write_text(json.dumps({"poll_interval_seconds": 15}))
        config = ConfigManager(str(config_root)).load_config()
        assert config["host_url"] == "http://default.local"
        assert config["poll_interval_seconds"] == 15
        assert config["environment"] == "testing"
        assert config["_runtime"]["environment"] == "testing"

    def test_env_vars_override_files(self, config_root, monkeypatch):
        monkeypatch.setenv("SCENEKIT_HOST_URL", "https://override.local")
        monkeypatch.setenv("SCENEKIT_HOUSEKEEPING_VARIABLE", "HK_TEST")
        config = ConfigManager(str(config_root)).load_config()
        assert config["host_url"] == "https://override.local"
        assert config["housekeeping_variable"] == "HK_TEST"

    def test_broken_environment_file_is_ignored(self, config_root):
        (config_root / "config" / "testing.json").write_text("{not json")
        config = ConfigManager(str(config_root)).load_config()
        assert config["host_url"] == "http://default.local"

    def test_invalid_values_fall_back_to_legacy_pass(self, config_root):
        (config_root / "config" / "testing.json").write_text(json.dumps({
            "poll_interval_seconds": 0,
            "timezone": "Nowhere/Land",
        }))
        config = ConfigManager(str(config_root)).load_config()
        assert config["poll_interval_seconds"] == 1
        assert config["timezone"] == "Europe/Stockholm"
        assert config["housekeeping_variable"] == "HOUSEKEEPING"

    def test_get_config_is_cached_copy(self, config_root):
        manager = ConfigManager(str(config_root))
        first = manager.get_config()
        first["poll_interval_seconds"] = 999
        assert manager.get_config()["poll_interval_seconds"] == 60

    def test_save_config_round_trip(self, config_root):
        manager = ConfigManager(str(config_root))
        config = manager.get_config()
        config.pop("_runtime")
        config["poll_interval_seconds"] = 30
        assert manager.save_config(config) is True
        assert manager.get_config()["poll_interval_seconds"] == 30

    def test_save_config_rejects_invalid(self, config_root):
        manager = ConfigManager(str(config_root))
        assert manager.save_config({"poll_interval_seconds": -5}) is False
        assert not (config_root / "config" / "testing.json").exists()

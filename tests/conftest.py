"""Shared pytest fixtures for the SceneKit test suite."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

import pytest

from scenekit.app import create_app
from scenekit.core.host import HostError, HostPlatform
from scenekit.core.housekeeping import Housekeeper

# Epoch base for scenario timestamps; anything at or below 1510469428 is invalid
T0 = 1_700_000_000


class FakeHost(HostPlatform):
    """In-memory controller with a settable clock."""

    def __init__(self, now: int = T0):
        self.clock = now
        self.globals: Dict[str, str] = {}
        self.device_calls: List[Tuple[int, str, Tuple[Any, ...]]] = []
        self.global_writes: List[Tuple[str, str]] = []
        self.device_values: Dict[Tuple[int, str], str] = {}
        self.scenes: Dict[int, bool] = {}
        self.started_scenes: List[int] = []
        self.slept: List[float] = []
        self.failing_devices: set = set()
        self.offline = False

    def now(self) -> int:
        return self.clock

    def sleep(self, seconds: float) -> None:
        self.slept.append(seconds)
        self.clock += int(seconds)

    def _check_online(self) -> None:
        if self.offline:
            raise HostError("controller offline")

    def get_global_value(self, name: str) -> Optional[str]:
        self._check_online()
        return self.globals.get(name)

    def set_global(self, name: str, value: Any) -> None:
        self._check_online()
        self.globals[name] = str(value)
        self.global_writes.append((name, str(value)))

    def call_device(self, device_id: int, command: str, *args: Any) -> None:
        self._check_online()
        if device_id in self.failing_devices:
            raise HostError(f"device {device_id} unreachable", status_code=502)
        self.device_calls.append((device_id, command, args))

    def get_device_value(self, device_id: int, prop: str = "value") -> Optional[str]:
        return self.device_values.get((device_id, prop))

    def is_scene_enabled(self, scene_id: int) -> bool:
        return self.scenes.get(scene_id, False)

    def start_scene(self, scene_id: int) -> None:
        self.started_scenes.append(scene_id)


@pytest.fixture
def host() -> FakeHost:
    fake = FakeHost()
    fake.globals["HOUSEKEEPING"] = "{}"
    return fake


@pytest.fixture
def housekeeper(host: FakeHost) -> Housekeeper:
    return Housekeeper(host)


@pytest.fixture
def app_config() -> Dict[str, Any]:
    return {
        "host_url": "http://hc.test",
        "housekeeping_variable": "HOUSEKEEPING",
        "housekeeping_enabled": False,
        "poll_interval_seconds": 60,
        "environment": "testing",
    }


@pytest.fixture
def flask_app(host: FakeHost, app_config: Dict[str, Any]):
    app = create_app(host=host, config=app_config)
    app.config.update({"TESTING": True})
    return app


@pytest.fixture
def client(flask_app):
    """Provide a fresh Flask test client for each test."""
    with flask_app.test_client() as test_client:
        yield test_client

"""
Host platform interface used by scene helpers and the housekeeping scheduler.

Everything SceneKit needs from the controller goes through ``HostPlatform``:
reading and writing global variables, calling device actions, starting
scenes and reading the clock. The REST implementation lives in
``scenekit.api.homecenter``; tests use an in-memory implementation.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from typing import Any, Optional


class HostError(Exception):
    """Raised when the controller cannot be reached or rejects a request."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class HostPlatform(ABC):
    """Abstract access to a Home Center style controller."""

    def now(self) -> int:
        """Current epoch time in whole seconds."""
        return int(time.time())

    def sleep(self, seconds: float) -> None:
        """Pause the calling scene."""
        if seconds > 0:
            time.sleep(seconds)

    @abstractmethod
    def get_global_value(self, name: str) -> Optional[str]:
        """Return the value of a global variable, or None if it does not exist."""

    @abstractmethod
    def set_global(self, name: str, value: Any) -> None:
        """Set a global variable to ``value`` (stored as text)."""

    def global_exists(self, name: str) -> bool:
        return self.get_global_value(name) is not None

    @abstractmethod
    def call_device(self, device_id: int, command: str, *args: Any) -> None:
        """Dispatch ``command`` with zero, one or two arguments to a device."""

    @abstractmethod
    def get_device_value(self, device_id: int, prop: str = "value") -> Optional[str]:
        """Return a device property, or None when it is not reported."""

    @abstractmethod
    def is_scene_enabled(self, scene_id: int) -> bool:
        ...

    @abstractmethod
    def start_scene(self, scene_id: int) -> None:
        ...

#!/usr/bin/env python3
"""
REST client for Home Center style controllers.

Implements ``HostPlatform`` on top of the controller's JSON API:
- global variables (read / write)
- device actions and device properties
- scene state and scene start
"""

import logging
import os
from typing import Any, Dict, Optional
from urllib.parse import quote

import requests
from dotenv import load_dotenv

from ..core.host import HostError, HostPlatform
from .http import get_http_session

__all__ = ["HomeCenterClient", "build_host_from_config"]

logger = logging.getLogger("homecenter")


def _get_env_path() -> str:
    app_name = os.getenv("SCENEKIT_APP_NAME", "scenekit")
    return os.path.join(os.path.expanduser(f"~/.{app_name}"), ".env")


ENV_PATH = _get_env_path()

# Credentials may live in ~/.scenekit/.env or a project-root .env
if os.path.exists(ENV_PATH):
    load_dotenv(dotenv_path=ENV_PATH)
load_dotenv()


class HomeCenterClient(HostPlatform):
    """Controller access over HTTP with basic authentication."""

    def __init__(
        self,
        base_url: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.session = session or get_http_session()
        self.timeout = timeout
        username = username if username is not None else os.getenv("SCENEKIT_HC_USERNAME")
        password = password if password is not None else os.getenv("SCENEKIT_HC_PASSWORD")
        self.auth = (username, password or "") if username else None

    def _request(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        url = f"{self.base_url}{path}"
        if self.timeout is not None:
            kwargs.setdefault("timeout", self.timeout)
        try:
            response = self.session.request(method, url, auth=self.auth, **kwargs)
        except requests.RequestException as exc:
            logger.warning("Controller request failed: %s %s (%s)", method, path, exc)
            raise HostError(f"{method} {path} failed: {exc}") from exc
        return response

    def _checked(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        response = self._request(method, path, **kwargs)
        if response.status_code >= 400:
            logger.warning("Controller rejected %s %s with HTTP %s", method, path, response.status_code)
            raise HostError(f"{method} {path} returned HTTP {response.status_code}",
                            status_code=response.status_code)
        return response

    def _json(self, method: str, path: str, **kwargs: Any) -> Dict[str, Any]:
        response = self._checked(method, path, **kwargs)
        try:
            data = response.json()
        except ValueError as exc:
            raise HostError(f"{method} {path} returned invalid JSON") from exc
        if not isinstance(data, dict):
            raise HostError(f"{method} {path} returned {type(data).__name__}, expected an object")
        return data

    # Global variables

    def get_global_value(self, name: str) -> Optional[str]:
        path = f"/api/globalVariables/{quote(name, safe='')}"
        response = self._request("GET", path)
        if response.status_code == 404:
            return None
        if response.status_code >= 400:
            raise HostError(f"GET {path} returned HTTP {response.status_code}",
                            status_code=response.status_code)
        try:
            data = response.json()
        except ValueError as exc:
            raise HostError(f"GET {path} returned invalid JSON") from exc
        value = data.get("value") if isinstance(data, dict) else None
        return None if value is None else str(value)

    def set_global(self, name: str, value: Any) -> None:
        self._checked("PUT", f"/api/globalVariables/{quote(name, safe='')}",
                      json={"name": name, "value": str(value)})

    # Devices

    def call_device(self, device_id: int, command: str, *args: Any) -> None:
        logger.debug("Device %s <- %s%s", device_id, command, list(args))
        self._checked("POST", f"/api/devices/{int(device_id)}/action/{quote(command, safe='')}",
                      json={"args": list(args)})

    def get_device_value(self, device_id: int, prop: str = "value") -> Optional[str]:
        data = self._json("GET", f"/api/devices/{int(device_id)}")
        properties = data.get("properties") or {}
        value = properties.get(prop)
        return None if value is None else str(value)

    # Scenes

    def is_scene_enabled(self, scene_id: int) -> bool:
        data = self._json("GET", f"/api/scenes/{int(scene_id)}")
        return bool(data.get("enabled", False))

    def start_scene(self, scene_id: int) -> None:
        self._checked("POST", f"/api/scenes/{int(scene_id)}/action/start")


def build_host_from_config(config: Optional[Dict[str, Any]] = None) -> HomeCenterClient:
    """Create a ``HomeCenterClient`` from the loaded configuration."""
    if config is None:
        from ..config import load_config
        config = load_config()
    return HomeCenterClient(
        base_url=config.get("host_url", "http://homecenter.local"),
        timeout=config.get("request_timeout_seconds"),
    )

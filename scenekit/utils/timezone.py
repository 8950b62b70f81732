"""Local timezone lookup for the time-window helpers."""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

_LOGGER = logging.getLogger("timezone")
_FALLBACK_TZ = "Europe/Stockholm"


@lru_cache(maxsize=1)
def _timezone_name() -> str:
    # SCENEKIT_TIMEZONE wins over the config file
    name = (os.getenv("SCENEKIT_TIMEZONE") or "").strip()
    if name:
        return name
    from ..config import load_config

    value = load_config().get("timezone")
    return value.strip() if isinstance(value, str) and value.strip() else _FALLBACK_TZ


@lru_cache(maxsize=1)
def get_local_timezone() -> ZoneInfo:
    """Return the configured zone, or Europe/Stockholm when it is unknown."""
    name = _timezone_name()
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        _LOGGER.warning("Unknown timezone '%s' - falling back to '%s'", name, _FALLBACK_TZ)
        return ZoneInfo(_FALLBACK_TZ)


def invalidate_timezone_cache() -> None:
    """Forget the cached zone (config changed)."""
    _timezone_name.cache_clear()
    get_local_timezone.cache_clear()

#!/usr/bin/env python3
"""Centralised HTTP session configuration for controller API access."""

import logging
import os
import platform
from threading import RLock
from typing import Any, Callable, Optional, Tuple, Union

import requests
from requests.adapters import HTTPAdapter
from urllib3.util import Retry

from ..version import VERSION

TimeoutValue = Union[float, Tuple[float, float]]

_LOGGER = logging.getLogger("homecenter.http")
_SESSION_LOCK = RLock()
_SESSION: Optional[requests.Session] = None


def _float_env(name: str, default: float, minimum: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return max(minimum, float(value))
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


DEFAULT_TIMEOUT: Tuple[float, float] = (
    _float_env("SCENEKIT_HTTP_CONNECT_TIMEOUT", 3.0, 0.5),
    _float_env("SCENEKIT_HTTP_READ_TIMEOUT", 10.0, 1.0),
)


def _coerce_timeout(value: TimeoutValue) -> Tuple[float, float]:
    """Normalise timeout values to a tuple of (connect, read)."""
    if isinstance(value, tuple):
        if len(value) == 2:
            return max(0.5, float(value[0])), max(1.0, float(value[1]))
        raise ValueError("Timeout tuples must be length 2 (connect, read)")
    numeric = max(0.5, float(value))
    return numeric, numeric


def _with_default_timeout(
    request_func: Callable[..., requests.Response],
    timeout: Tuple[float, float],
) -> Callable[..., requests.Response]:
    """Wrap session.request to inject default timeouts."""

    def wrapper(method: str, url: str, **kwargs: Any) -> requests.Response:
        provided = kwargs.get("timeout")
        if provided is None:
            kwargs["timeout"] = timeout
        else:
            try:
                kwargs["timeout"] = _coerce_timeout(provided)
            except (TypeError, ValueError):
                kwargs["timeout"] = timeout
        return request_func(method, url, **kwargs)

    return wrapper


def _build_retry_configuration() -> Retry:
    # Device actions are not idempotent, so POST is never retried
    return Retry(
        total=_int_env("SCENEKIT_HTTP_RETRY_TOTAL", 3),
        connect=_int_env("SCENEKIT_HTTP_RETRY_CONNECT", 3),
        read=_int_env("SCENEKIT_HTTP_RETRY_READ", 2),
        backoff_factor=_float_env("SCENEKIT_HTTP_BACKOFF_FACTOR", 0.5, 0.0),
        status_forcelist=[429, 500, 502, 503, 504],
        allowed_methods=["GET", "PUT"],
        raise_on_status=False,
    )


def build_session(timeout: Optional[TimeoutValue] = None) -> requests.Session:
    """Create a configured requests.Session with retries and timeouts."""
    session = requests.Session()

    adapter = HTTPAdapter(
        max_retries=_build_retry_configuration(),
        pool_connections=_int_env("SCENEKIT_HTTP_POOL_CONNECTIONS", 2),
        pool_maxsize=_int_env("SCENEKIT_HTTP_POOL_MAXSIZE", 4),
    )
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    session.headers.update(
        {
            "Accept": "application/json",
            "User-Agent": f"SceneKit/{VERSION} (Python {platform.python_version()}; Requests {requests.__version__})",
        }
    )
    effective_timeout = _coerce_timeout(timeout) if timeout is not None else DEFAULT_TIMEOUT
    session.request = _with_default_timeout(session.request, effective_timeout)

    _LOGGER.debug(
        "HTTP session configured",
        extra={
            "http.timeout_connect": effective_timeout[0],
            "http.timeout_read": effective_timeout[1],
        },
    )
    return session


def get_http_session() -> requests.Session:
    """Return the shared HTTP session, creating it if necessary."""
    global _SESSION
    if _SESSION is None:
        with _SESSION_LOCK:
            if _SESSION is None:
                _SESSION = build_session()
    return _SESSION


def set_http_session(session: Optional[requests.Session]) -> None:
    """Override (or clear) the shared HTTP session, primarily for testing."""
    global _SESSION
    with _SESSION_LOCK:
        _SESSION = session


__all__ = ["DEFAULT_TIMEOUT", "build_session", "get_http_session", "set_http_session"]

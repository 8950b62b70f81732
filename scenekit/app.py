"""
SceneKit Application
Flask application factory for the housekeeping HTTP service.
"""

import logging
from typing import Any, Dict, Optional

from flask import Flask

from .api.homecenter import build_host_from_config
from .config import load_config
from .core.host import HostPlatform
from .routes import health_bp, housekeeping_bp
from .routes.errors import register_error_handlers
from .services.service_manager import ServiceManager
from .utils.logger import setup_logger

# Loggers used by the core modules; configured once per process
APP_LOGGERS = ("scenekit", "housekeeping", "scene_loop", "homecenter", "service_manager")


def create_app(host: Optional[HostPlatform] = None, config: Optional[Dict[str, Any]] = None) -> Flask:
    """Return a freshly constructed Flask application.

    Args:
        host: Controller access; defaults to a ``HomeCenterClient`` built from config.
        config: Validated configuration; defaults to ``load_config()``.
    """
    for name in APP_LOGGERS:
        setup_logger(name)
    logger = logging.getLogger("scenekit")

    if config is None:
        config = load_config()
    if host is None:
        host = build_host_from_config(config)

    app = Flask(__name__)
    app.config["SCENEKIT"] = config
    app.extensions["scenekit"] = ServiceManager(host, config)

    app.register_blueprint(health_bp)
    app.register_blueprint(housekeeping_bp)
    register_error_handlers(app)

    logger.info("🏠 SceneKit app created (environment=%s)", config.get("environment", "unknown"))
    return app


__all__ = ["create_app"]

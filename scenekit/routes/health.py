"""
Health & Status Routes Blueprint
Liveness, readiness and service status endpoints.
"""

import logging

from flask import Blueprint

from ..core.host import HostError
from ..version import get_app_info, get_full_version
from .helpers import api_error, api_error_handler, api_response, get_services

health_bp = Blueprint("health", __name__)
logger = logging.getLogger(__name__)


@health_bp.route("/healthz")
def healthz():
    """Basic health check endpoint."""
    return api_response(True, data={"ok": True, "version": get_full_version(), "app": get_app_info()})


@health_bp.route("/readyz")
def readyz():
    """Readiness: the controller answers and the housekeeping variable is readable."""
    manager = get_services()
    variable = manager.housekeeper.store.variable
    try:
        exists = manager.host.global_exists(variable)
    except HostError as e:
        logger.warning("Readiness check failed: %s", e)
        return api_error(str(e), status=503, error_code="host_unavailable", data={"ok": False})
    return api_response(True, data={"ok": True, "housekeeping_variable": variable, "variable_exists": exists})


@health_bp.route("/api/services/health")
@api_error_handler
def services_health():
    result = get_services().health_check_all()
    return api_response(result.success, data=result.data, message=result.message or "")

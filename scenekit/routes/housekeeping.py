"""
Housekeeping Routes Blueprint
Register, inspect, run and reset deferred housekeeping tasks.
"""

from flask import Blueprint, request

from .helpers import api_error, api_error_handler, get_services, result_response

housekeeping_bp = Blueprint("housekeeping", __name__, url_prefix="/api/housekeeping")


@housekeeping_bp.route("", methods=["GET"])
@api_error_handler
def get_schedule():
    return result_response(get_services().housekeeping.get_schedule())


@housekeeping_bp.route("/tasks", methods=["POST"])
@api_error_handler
def register_task():
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return api_error("Expected a JSON object body", status=400, error_code="invalid_request")
    result = get_services().housekeeping.register_task(payload)
    return result_response(result, success_status=201)


@housekeeping_bp.route("/run", methods=["POST"])
@api_error_handler
def run_now():
    return result_response(get_services().housekeeping.run_now())


@housekeeping_bp.route("", methods=["DELETE"])
@api_error_handler
def reset_schedule():
    return result_response(get_services().housekeeping.reset())

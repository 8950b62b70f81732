"""
Housekeeping Service - schedule access for the HTTP layer
=========================================================

Maps housekeeping errors onto error codes:

- ``invalid_targets`` / ``invalid_delay`` / ``invalid_command``: rejected
  input, nothing was persisted
- ``corrupt_schedule``: the stored schedule failed validation
- ``host_unavailable``: the controller could not be reached
"""

from typing import Any, Dict, Optional

from . import BaseService, ServiceResult
from ..core.commands import CommandError
from ..core.host import HostError
from ..core.housekeeping import (Housekeeper, HousekeepingError, InvalidDelay,
                                 InvalidTargetList)
from ..core.loop import HousekeepingLoop


class HousekeepingService(BaseService):
    """Service for registering, inspecting and running housekeeping tasks."""

    def __init__(self, housekeeper: Housekeeper, loop: Optional[HousekeepingLoop] = None):
        super().__init__("housekeeping")
        self.housekeeper = housekeeper
        self.loop = loop

    def register_task(self, payload: Dict[str, Any]) -> ServiceResult:
        """Register a task from a request body ``{"targets", "delay_seconds", "command"}``."""
        if not isinstance(payload, dict) or "targets" not in payload:
            return self._error_result("Request body must contain 'targets'", "invalid_targets")
        delay = payload.get("delay_seconds", 0)
        command = payload.get("command", "turnOff")
        try:
            schedule = self.housekeeper.register(payload["targets"], delay, command)
        except InvalidTargetList as exc:
            return self._error_result(str(exc), "invalid_targets")
        except InvalidDelay as exc:
            return self._error_result(str(exc), "invalid_delay")
        except CommandError as exc:
            return self._error_result(str(exc), "invalid_command")
        except HostError as exc:
            return self._error_result(str(exc), "host_unavailable")
        return self._success_result({"schedule": schedule}, "Housekeeping task registered")

    def get_schedule(self) -> ServiceResult:
        try:
            schedule = self.housekeeper.pending_tasks()
        except HousekeepingError as exc:
            return self._error_result(str(exc), "corrupt_schedule")
        except HostError as exc:
            return self._error_result(str(exc), "host_unavailable")
        return self._success_result({"schedule": schedule, "count": len(schedule)})

    def run_now(self) -> ServiceResult:
        try:
            report = self.housekeeper.run_due_tasks()
        except HostError as exc:
            return self._error_result(str(exc), "host_unavailable")
        message = "Schedule was corrupt and has been reset" if report.reset else "Housekeeping pass completed"
        return self._success_result(report.to_dict(), message)

    def reset(self) -> ServiceResult:
        try:
            self.housekeeper.initialize()
        except HostError as exc:
            return self._error_result(str(exc), "host_unavailable")
        return self._success_result({"schedule": {}}, "Housekeeping schedule reset")

    def health_check(self) -> ServiceResult:
        base = super().health_check()
        if not base.success:
            return base
        data: Dict[str, Any] = {"status": "healthy", "service": self.name}
        if self.loop is not None:
            data["loop_running"] = self.loop.running
            data["passes"] = self.loop.passes
            if self.loop.last_report is not None:
                data["last_report"] = self.loop.last_report.to_dict()
        return self._success_result(data)

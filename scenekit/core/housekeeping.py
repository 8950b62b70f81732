"""Housekeeping: deferred device/variable commands persisted in a global variable.

Scenes register "do X to device Y in N seconds" tasks; a polling loop calls
``Housekeeper.run_due_tasks()`` (roughly once a minute) to execute whatever
has become due. Because the schedule lives in the ``HOUSEKEEPING`` global
variable rather than in a sleeping scene, pending timers survive a restart
of the controller.

Persisted layout (one JSON object, keys are stringified device ids or
global variable names)::

    {"10": {"time": 1025, "cmd": "turnOn"},
     "11": {"time": 1030, "cmd": "setValue", "value": 50},
     "NightMode": {"time": 1100, "cmd": "Off"}}

The schedule is validated before every register/run pass. A corrupt or
malformed schedule is discarded (reset to ``{}``) rather than allowed to
block the automation loop.
"""
from __future__ import annotations

import json
import logging
import math
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Union

from ..constants import (DEFAULT_HOUSEKEEPING_COMMAND, HOUSEKEEPING_VARIABLE,
                         MIN_VALID_TIMESTAMP, ONE_ARG_COMMANDS,
                         TWO_ARG_COMMANDS)
from ..utils.logger import log_structured
from .commands import Command, CommandSpec, command_from_task, parse_command
from .host import HostError, HostPlatform

_logger = logging.getLogger("housekeeping")

Schedule = Dict[str, Dict[str, Any]]
TargetSpec = Union[int, str, Sequence[Union[int, str]]]


class HousekeepingError(Exception):
    """Base class for housekeeping failures."""


class CorruptSchedule(HousekeepingError):
    """The stored schedule is missing, not JSON, or not a JSON object."""


class ScheduleValidationError(HousekeepingError):
    """A persisted task breaks one of the schedule invariants."""

    def __init__(self, key: str, message: str):
        super().__init__(f"{key}: {message}")
        self.key = key


class UnresolvableTarget(ScheduleValidationError):
    pass


class MalformedTask(ScheduleValidationError):
    pass


class InvalidTimestamp(ScheduleValidationError):
    pass


class MissingArgument(ScheduleValidationError):
    pass


class InvalidTargetList(HousekeepingError, ValueError):
    """Targets passed to ``register`` are neither a device id nor a list/tuple of keys."""


class InvalidDelay(HousekeepingError, ValueError):
    pass


def device_id_from_key(key: Any) -> Optional[int]:
    """Return the device id a schedule key refers to, or None for variable names."""
    if isinstance(key, bool):
        return None
    if isinstance(key, int):
        return key
    try:
        return int(str(key).strip())
    except ValueError:
        return None


def _as_timestamp(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def encode_schedule(schedule: Schedule) -> str:
    return json.dumps(schedule, separators=(",", ":"), sort_keys=True)


def decode_schedule(raw: Optional[str]) -> Schedule:
    """Parse the stored schedule text.

    Raises:
        CorruptSchedule: If ``raw`` is empty, not JSON, or not a JSON object.
    """
    if raw is None or not str(raw).strip():
        raise CorruptSchedule("Housekeeping variable is empty or missing")
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise CorruptSchedule(f"Housekeeping variable is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise CorruptSchedule(f"Housekeeping variable holds {type(data).__name__}, expected an object")
    return data


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------

class ScheduleStore(ABC):
    """Whole-schedule persistence. Every save overwrites unconditionally."""

    @abstractmethod
    def load(self) -> Schedule:
        ...

    @abstractmethod
    def save(self, schedule: Schedule) -> None:
        ...

    def reset(self) -> None:
        self.save({})


class GlobalVariableStore(ScheduleStore):
    """Keeps the schedule as JSON text in a controller global variable."""

    def __init__(self, host: HostPlatform, variable: str = HOUSEKEEPING_VARIABLE):
        self.host = host
        self.variable = variable

    def load(self) -> Schedule:
        return decode_schedule(self.host.get_global_value(self.variable))

    def save(self, schedule: Schedule) -> None:
        self.host.set_global(self.variable, encode_schedule(schedule))


# ---------------------------------------------------------------------------
# Validator
# ---------------------------------------------------------------------------

class ScheduleValidator:
    """Fail-fast integrity check of a decoded schedule."""

    def __init__(self, host: HostPlatform):
        self.host = host

    def validate_key(self, key: str) -> None:
        if device_id_from_key(key) is not None:
            return
        if not key or not self.host.global_exists(key):
            raise UnresolvableTarget(key, "must be a device id or the name of an existing global variable")

    @staticmethod
    def validate_task(key: str, task: Any) -> None:
        if not isinstance(task, dict) or task.get("cmd") is None or task.get("time") is None:
            raise MalformedTask(key, "task must be an object with 'cmd' and 'time' fields")
        command = task["cmd"]
        if not isinstance(command, str) or not command:
            raise MalformedTask(key, "'cmd' must be a non-empty string")

        due = _as_timestamp(task["time"])
        if due is None or due <= MIN_VALID_TIMESTAMP:
            raise InvalidTimestamp(key, f"'time' must be an epoch timestamp after {MIN_VALID_TIMESTAMP}")

        if command in ONE_ARG_COMMANDS and task.get("value") is None:
            raise MissingArgument(key, f"'{command}' takes one argument but no 'value' is set")
        if command in TWO_ARG_COMMANDS and (task.get("arg1") is None or task.get("arg2") is None):
            raise MissingArgument(key, f"'{command}' takes two arguments but 'arg1'/'arg2' are not set")

    def validate(self, schedule: Schedule) -> None:
        """Raise the first ``ScheduleValidationError`` found in ``schedule``."""
        for key, task in schedule.items():
            self.validate_key(key)
            self.validate_task(key, task)

    def is_valid(self, schedule: Schedule) -> bool:
        try:
            self.validate(schedule)
        except ScheduleValidationError:
            return False
        return True


# ---------------------------------------------------------------------------
# Registrar & runner
# ---------------------------------------------------------------------------

@dataclass
class RunReport:
    """Outcome of one ``run_due_tasks`` pass."""
    executed: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    remaining: int = 0
    reset: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "executed": list(self.executed),
            "failed": list(self.failed),
            "remaining": self.remaining,
            "reset": self.reset,
        }


class Housekeeper:
    """Registers and replays housekeeping tasks for one host."""

    def __init__(
        self,
        host: HostPlatform,
        store: Optional[ScheduleStore] = None,
        validator: Optional[ScheduleValidator] = None,
    ):
        self.host = host
        self.store = store or GlobalVariableStore(host)
        self.validator = validator or ScheduleValidator(host)
        # Serializes read-modify-write cycles within this process only
        self._lock = threading.RLock()

    def initialize(self) -> None:
        """Reset the schedule to an empty object."""
        with self._lock:
            _logger.info("Initiating the housekeeping schedule to {}")
            self.store.reset()

    def load_schedule(self) -> Schedule:
        """Load and validate the persisted schedule.

        Raises:
            CorruptSchedule: If the stored text cannot be decoded.
            ScheduleValidationError: If any task breaks an invariant.
        """
        schedule = self.store.load()
        self.validator.validate(schedule)
        return schedule

    def _load_or_none(self) -> Optional[Schedule]:
        try:
            return self.load_schedule()
        except HousekeepingError as exc:
            _logger.warning("Housekeeping schedule rejected: %s", exc)
            return None

    def _save(self, schedule: Schedule) -> None:
        _logger.info("Setting housekeeping tasks: %s", encode_schedule(schedule))
        self.store.save(schedule)

    def normalize_targets(self, targets: TargetSpec) -> List[str]:
        """Turn ``targets`` into schedule keys.

        A single device id (int or numeric string) is one key. Several
        targets, or global variable names, must be given as a list or tuple.
        """
        if isinstance(targets, (list, tuple)):
            items = list(targets)
            if not items:
                raise InvalidTargetList("At least one target is required")
        elif isinstance(targets, (int, str)) and device_id_from_key(targets) is not None:
            items = [targets]
        else:
            raise InvalidTargetList(
                "Supply a device id, or a list/tuple of device ids and global variable names"
            )

        keys: List[str] = []
        for item in items:
            if isinstance(item, bool) or not isinstance(item, (int, str)):
                raise InvalidTargetList(f"Unsupported target {item!r}")
            device_id = device_id_from_key(item)
            if device_id is not None:
                keys.append(str(device_id))
                continue
            name = item.strip()
            if not name or not self.host.global_exists(name):
                raise InvalidTargetList(f"'{item}' is neither a device id nor an existing global variable")
            keys.append(name)
        return keys

    def register(
        self,
        targets: TargetSpec,
        delay_seconds: Union[int, float],
        command: CommandSpec = DEFAULT_HOUSEKEEPING_COMMAND,
    ) -> Schedule:
        """Schedule ``command`` for every target ``delay_seconds`` from now.

        Any task already pending for a target is replaced. A corrupt stored
        schedule is reset before the new tasks are added.

        Returns:
            The schedule as persisted.

        Raises:
            InvalidTargetList: If ``targets`` cannot be normalized.
            InvalidDelay: If ``delay_seconds`` is not a non-negative number.
            CommandError: If ``command`` is malformed or lacks required arguments.
        """
        if isinstance(delay_seconds, bool) or not isinstance(delay_seconds, (int, float)) \
                or not math.isfinite(delay_seconds) or delay_seconds < 0:
            raise InvalidDelay(f"delay_seconds must be a non-negative number, got {delay_seconds!r}")
        parsed = parse_command(command)
        keys = self.normalize_targets(targets)

        with self._lock:
            schedule = self._load_or_none()
            if schedule is None:
                _logger.warning("Re-initiating housekeeping schedule before registering new tasks")
                schedule = {}

            due = self.host.now() + delay_seconds
            for key in keys:
                # Only one pending task per target
                schedule[key] = {"time": due, **parsed.to_fields()}

            self._save(schedule)
            return schedule

    def _dispatch(self, key: str, command: Command) -> None:
        device_id = device_id_from_key(key)
        if device_id is not None:
            self.host.call_device(device_id, command.name, *command.args)
        else:
            # Variable targets are assigned the command text itself
            self.host.set_global(key, command.name)

    def run_due_tasks(self) -> RunReport:
        """Execute and remove every task whose time has come.

        Nothing is executed off a schedule that fails validation; it is reset
        to ``{}`` instead. Tasks are removed whether or not the dispatch
        succeeded, so each task runs at most once.
        """
        report = RunReport()
        with self._lock:
            schedule = self._load_or_none()
            if schedule is None:
                _logger.error(
                    "Housekeeping tasks are not well structured. Performing reset. "
                    "No tasks will be performed, so they need to be registered again."
                )
                self.store.reset()
                report.reset = True
                return report

            _logger.debug("Housekeeping schedule loaded: %s", encode_schedule(schedule))
            now = self.host.now()
            for key, task in list(schedule.items()):
                if _as_timestamp(task["time"]) > now:
                    continue
                command = command_from_task(task)
                # Removed before dispatch so a task never runs twice
                del schedule[key]
                try:
                    self._dispatch(key, command)
                    log_structured(_logger, logging.INFO, "Housekeeping task dispatched",
                                   target=key, command=command.name, args=list(command.args))
                    report.executed.append(key)
                except HostError as exc:
                    log_structured(_logger, logging.ERROR, "Housekeeping task failed",
                                   target=key, command=command.name, error=str(exc))
                    report.failed.append(key)
                except Exception:
                    _logger.exception("Unexpected error dispatching housekeeping task %s", key)
                    report.failed.append(key)

            report.remaining = len(schedule)
            self._save(schedule)
        return report

    def pending_tasks(self) -> Schedule:
        """Return the validated schedule without modifying it."""
        with self._lock:
            return self.load_schedule()


__all__ = [
    "CorruptSchedule", "GlobalVariableStore", "Housekeeper", "HousekeepingError",
    "InvalidDelay", "InvalidTargetList", "InvalidTimestamp", "MalformedTask",
    "MissingArgument", "RunReport", "Schedule", "ScheduleStore",
    "ScheduleValidationError", "ScheduleValidator", "UnresolvableTarget",
    "decode_schedule", "device_id_from_key", "encode_schedule",
]

"""
Housekeeping command shapes.

A pending housekeeping task carries one of three command variants. The
variant decides which optional fields are written to the persisted task
record and which arguments are passed when the task is dispatched:

- ``ZeroArgCommand("turnOn")``            -> {"cmd": "turnOn"}
- ``OneArgCommand("setValue", 50)``       -> {"cmd": "setValue", "value": 50}
- ``TwoArgCommand("setProperty", "a", 1)`` -> {"cmd": ..., "arg1": "a", "arg2": 1}
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Sequence, Tuple, Union

from ..constants import ONE_ARG_COMMANDS, TWO_ARG_COMMANDS


class CommandError(ValueError):
    """Raised when a command cannot be turned into a valid task."""


@dataclass(frozen=True)
class ZeroArgCommand:
    name: str

    @property
    def args(self) -> Tuple[Any, ...]:
        return ()

    def to_fields(self) -> Dict[str, Any]:
        return {"cmd": self.name}


@dataclass(frozen=True)
class OneArgCommand:
    name: str
    value: Any

    @property
    def args(self) -> Tuple[Any, ...]:
        return (self.value,)

    def to_fields(self) -> Dict[str, Any]:
        return {"cmd": self.name, "value": self.value}


@dataclass(frozen=True)
class TwoArgCommand:
    name: str
    arg1: Any
    arg2: Any

    @property
    def args(self) -> Tuple[Any, ...]:
        return (self.arg1, self.arg2)

    def to_fields(self) -> Dict[str, Any]:
        return {"cmd": self.name, "arg1": self.arg1, "arg2": self.arg2}


Command = Union[ZeroArgCommand, OneArgCommand, TwoArgCommand]
CommandSpec = Union[str, Sequence[Any], Command]


def expected_arity(name: str) -> int:
    """Number of arguments a known command requires (0 for unknown commands)."""
    if name in TWO_ARG_COMMANDS:
        return 2
    if name in ONE_ARG_COMMANDS:
        return 1
    return 0


def _check_arity(command: Command) -> Command:
    if not isinstance(command.name, str) or not command.name:
        raise CommandError("Command name must be a non-empty string")
    required = expected_arity(command.name)
    if required == 1 and not isinstance(command, OneArgCommand):
        raise CommandError(f"'{command.name}' takes one argument but none was supplied")
    if required == 2 and not isinstance(command, TwoArgCommand):
        raise CommandError(f"'{command.name}' takes two arguments (arg1, arg2)")
    # A null argument is stored as missing and would fail schedule validation
    if isinstance(command, OneArgCommand) and command.value is None:
        raise CommandError(f"'{command.name}' needs a value, got None")
    if isinstance(command, TwoArgCommand) and (command.arg1 is None or command.arg2 is None):
        raise CommandError(f"'{command.name}' needs arg1 and arg2, got None")
    return command


def parse_command(spec: CommandSpec) -> Command:
    """Build a command variant from a string, a tuple/list or a command object.

    Tuples follow the scene-script convention: ``("turnOn",)``,
    ``("setValue", 50)`` or ``("setThermostatSetpoint", 1, 21)``.

    Raises:
        CommandError: If the shape is unknown, the name is empty, or a known
            one/two-argument command is missing its arguments.
    """
    if isinstance(spec, (ZeroArgCommand, OneArgCommand, TwoArgCommand)):
        return _check_arity(spec)

    if isinstance(spec, str):
        return _check_arity(ZeroArgCommand(spec))

    if isinstance(spec, (list, tuple)):
        if len(spec) == 1:
            return _check_arity(ZeroArgCommand(spec[0]))
        if len(spec) == 2:
            return _check_arity(OneArgCommand(spec[0], spec[1]))
        if len(spec) == 3:
            return _check_arity(TwoArgCommand(spec[0], spec[1], spec[2]))
        raise CommandError(f"Command tuples take 1 to 3 items, got {len(spec)}")

    raise CommandError(f"Unsupported command type: {type(spec).__name__}")


def command_from_task(task: Dict[str, Any]) -> Command:
    """Rebuild the command variant of a persisted (already validated) task.

    ``arg1``/``arg2`` take precedence over ``value`` when both are present.
    """
    name = str(task["cmd"])
    if task.get("arg1") is not None and task.get("arg2") is not None:
        return TwoArgCommand(name, task["arg1"], task["arg2"])
    if task.get("value") is not None:
        return OneArgCommand(name, task["value"])
    return ZeroArgCommand(name)

"""Central constants for SceneKit (small, stable primitives only).

Avoid runtime/config dependent values here.
"""

# Name of the global variable that holds the housekeeping schedule
HOUSEKEEPING_VARIABLE: str = "HOUSEKEEPING"

# No housekeeping task can be due before the scheduler was first written
# (2017-11-12). Anything at or below this is treated as a corrupt timestamp.
MIN_VALID_TIMESTAMP: int = 1510469428

# Command used when a task is registered without one
DEFAULT_HOUSEKEEPING_COMMAND: str = "turnOff"

# Device commands known to take exactly one argument (stored as "value")
ONE_ARG_COMMANDS = frozenset({
    "setValue",
    "setSetpointMode",
    "setMode",
    "setFanMode",
    "setVolume",
    "setInterval",
    "pressButton",
})

# Device commands known to take two arguments (stored as "arg1"/"arg2")
TWO_ARG_COMMANDS = frozenset({
    "setThermostatSetpoint",
    "setSlider",
    "setProperty",
})

# Default polling cadence of the housekeeping loop
DEFAULT_POLL_INTERVAL_SECONDS: int = 60

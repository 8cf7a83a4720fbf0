from enum import Enum


class MonitorState(str, Enum):
    IDLE = "idle"
    STARTUP_DELAY = "startup_delay"
    POLLING = "polling"
    COLLECTING = "collecting"
    TERMINATED = "terminated"


class MonitorOutcome(str, Enum):
    """How a monitor run reached the terminated state."""

    ALREADY_CAPTURED = "already_captured"
    CAPTURED = "captured"

import tempfile
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

# Timeouts
COLLECTION_DEFAULT_TIMEOUT_S = 15 * 60.0
COLLECTION_MIN_TIMEOUT_S = 5 * 60.0

MONITOR_DEFAULT_INTERVAL_S = 5 * 60.0
MONITOR_DEFAULT_STARTUP_DELAY_S = 5 * 60.0
MONITOR_DEFAULT_OUTPUT_BASE_DIR = Path("/private/var/db/ec2-macos-utils/sysdiagnose")


def _check_collection_timeout(value: float) -> float:
    if value < COLLECTION_MIN_TIMEOUT_S:
        raise ValueError(
            f"timeout must be at least {COLLECTION_MIN_TIMEOUT_S:g}s "
            "to ensure creation can complete"
        )
    return value


class MonitorConfig(BaseModel, frozen=True):
    """Settings for the network health monitor."""

    interval_s: float = Field(
        default=MONITOR_DEFAULT_INTERVAL_S,
        description="Interval between network checks",
    )
    startup_delay_s: float = Field(
        default=MONITOR_DEFAULT_STARTUP_DELAY_S,
        description="Delay before starting checks",
    )
    output_base_dir: Path = Field(
        default=MONITOR_DEFAULT_OUTPUT_BASE_DIR,
        description="Base directory for sysdiagnose output",
    )
    collection_timeout_s: float = Field(
        default=COLLECTION_DEFAULT_TIMEOUT_S,
        description="Timeout for sysdiagnose collection",
    )

    @field_validator("interval_s")
    @classmethod
    def validate_interval(cls, v: float) -> float:
        if v < 0:
            raise ValueError("interval cannot be negative")
        return v

    @field_validator("startup_delay_s")
    @classmethod
    def validate_startup_delay(cls, v: float) -> float:
        if v < 0:
            raise ValueError("startup delay cannot be negative")
        return v

    @field_validator("collection_timeout_s")
    @classmethod
    def validate_collection_timeout(cls, v: float) -> float:
        return _check_collection_timeout(v)


class CollectionConfig(BaseModel, frozen=True):
    """Settings for a one-shot sysdiagnose collection."""

    output_dir: Path = Field(
        default_factory=lambda: Path(tempfile.gettempdir()),
        description="Directory where the sysdiagnose archive will be saved",
    )
    timeout_s: float = Field(
        default=COLLECTION_DEFAULT_TIMEOUT_S,
        description="Timeout for creation",
    )

    @field_validator("timeout_s")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        return _check_collection_timeout(v)

from ec2_macos_watchdog.domain.value_objects.archive import (
    ARCHIVE_GLOB,
    ARCHIVE_PREFIX,
    ARCHIVE_SUFFIX,
    ARCHIVE_TIMESTAMP_FORMAT,
    FALLBACK_HOST_IDENTITY,
    PersistedArchive,
    build_archive_name,
)
from ec2_macos_watchdog.domain.value_objects.monitor_state import MonitorOutcome, MonitorState

__all__ = [
    # Archive naming
    "ARCHIVE_GLOB",
    "ARCHIVE_PREFIX",
    "ARCHIVE_SUFFIX",
    "ARCHIVE_TIMESTAMP_FORMAT",
    "FALLBACK_HOST_IDENTITY",
    "PersistedArchive",
    "build_archive_name",
    # Monitor
    "MonitorOutcome",
    "MonitorState",
]

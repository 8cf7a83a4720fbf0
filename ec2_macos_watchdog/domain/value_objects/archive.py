from datetime import datetime
from pathlib import Path

from pydantic import BaseModel

ARCHIVE_PREFIX = "sysdiagnose_"
ARCHIVE_SUFFIX = ".tar.gz"
ARCHIVE_TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"  # YYYYMMDD_HHMMSS
ARCHIVE_GLOB = f"{ARCHIVE_PREFIX}*{ARCHIVE_SUFFIX}"

FALLBACK_HOST_IDENTITY = "unknown"


def build_archive_name(now: datetime) -> str:
    """Return the archive base name (without suffix) for a UTC timestamp."""
    return f"{ARCHIVE_PREFIX}{now.strftime(ARCHIVE_TIMESTAMP_FORMAT)}"


class PersistedArchive(BaseModel, frozen=True):
    """An archive written to its final location."""

    path: Path
    bytes_written: int

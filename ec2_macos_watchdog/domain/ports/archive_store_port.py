from abc import ABC, abstractmethod
from pathlib import Path
from typing import BinaryIO

from ec2_macos_watchdog.domain.value_objects.archive import PersistedArchive


class ArchiveStorePort(ABC):
    """Port for the on-disk archive layout."""

    @abstractmethod
    def ensure_base_dir(self) -> Path:
        """Create the base output directory if needed."""

    @abstractmethod
    def ensure_host_dir(self, host: str) -> Path:
        """Create the per-host output directory if needed."""

    @abstractmethod
    def has_capture(self, host: str) -> bool:
        """True if an archive was already captured for host."""

    @abstractmethod
    async def persist(
        self,
        stream: BinaryIO,
        output_dir: Path,
        archive_name: str | None = None,
    ) -> PersistedArchive:
        """Write stream to a new archive file in output_dir."""

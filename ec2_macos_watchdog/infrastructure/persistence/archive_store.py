from __future__ import annotations

import asyncio
import contextlib
import os
from datetime import UTC, datetime
from pathlib import Path
from typing import BinaryIO

import aiofiles
from loguru import logger
from rich.filesize import decimal

from ec2_macos_watchdog.domain.errors import PermissionDeniedError, ResourceError
from ec2_macos_watchdog.domain.ports.archive_store_port import ArchiveStorePort
from ec2_macos_watchdog.domain.value_objects.archive import PersistedArchive, build_archive_name
from ec2_macos_watchdog.infrastructure.persistence._paths import ArchivePathBuilder

# Owner-only directories
DIR_MODE = 0o700
# Archives are read-only once written
ARCHIVE_MODE = 0o400

COPY_CHUNK_SIZE = 1024 * 1024


def _make_dir(path: Path) -> Path:
    try:
        path.mkdir(mode=DIR_MODE, parents=True, exist_ok=True)
    except PermissionError as e:
        raise PermissionDeniedError(f"cannot create output directory {path}: {e}") from e
    except OSError as e:
        raise ResourceError("failed to create output directory", path) from e
    return path


class ArchiveStore(ArchiveStorePort):
    """Filesystem layout for captured archives.

    ``<base_dir>/<host>/sysdiagnose_<YYYYMMDD_HHMMSS>.tar.gz``. An
    archive in a host directory marks that host as already captured.
    """

    def __init__(self, base_dir: Path) -> None:
        self.base_dir = base_dir
        self._paths = ArchivePathBuilder(base_dir)

    def ensure_base_dir(self) -> Path:
        return _make_dir(self.base_dir)

    def ensure_host_dir(self, host: str) -> Path:
        return _make_dir(self._paths.host_dir(host))

    def has_capture(self, host: str) -> bool:
        existing = self._paths.existing_archives(host)
        if existing:
            logger.debug("Found existing archives for {}: {}", host, existing)
        return bool(existing)

    async def persist(
        self,
        stream: BinaryIO,
        output_dir: Path,
        archive_name: str | None = None,
    ) -> PersistedArchive:
        """Copy stream into a new read-only archive file.

        Creation is exclusive: an existing file of the same name is left
        untouched and ResourceError is raised.
        """
        name = archive_name or build_archive_name(datetime.now(UTC))
        path = self._paths.archive_path(output_dir, name)

        try:
            fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, ARCHIVE_MODE)
        except OSError as e:
            raise ResourceError(f"failed to create output file ({e.strerror})", path) from e

        logger.info("Writing archive to {}", path)
        written = 0
        try:
            async with aiofiles.open(fd, mode="wb", closefd=True) as f:
                while chunk := await asyncio.to_thread(stream.read, COPY_CHUNK_SIZE):
                    await f.write(chunk)
                    written += len(chunk)
        except (OSError, ValueError) as e:
            # Drop the partial archive
            with contextlib.suppress(OSError):
                path.unlink()
            raise ResourceError(f"failed to write archive data ({e})", path) from e
        except BaseException:
            with contextlib.suppress(OSError):
                path.unlink()
            raise

        logger.info("Archive written to {} ({})", path, decimal(written))
        return PersistedArchive(path=path, bytes_written=written)

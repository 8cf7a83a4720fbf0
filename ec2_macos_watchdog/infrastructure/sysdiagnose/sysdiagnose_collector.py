import asyncio
import contextlib
import os
import shutil
import signal
import tempfile
import time
from pathlib import Path
from typing import BinaryIO

from loguru import logger

from ec2_macos_watchdog.domain.errors import (
    CollectionFailureError,
    InvalidArgumentError,
    ProcessFailureError,
    ResourceError,
)
from ec2_macos_watchdog.domain.ports.collector_port import DiagnosticCollectorPort
from ec2_macos_watchdog.domain.value_objects.archive import ARCHIVE_SUFFIX

# Hardcoded path to the macOS sysdiagnose executable
SYSDIAGNOSE_EXECUTABLE = "/usr/bin/sysdiagnose"

WORK_DIR_PREFIX = "sysdiagnose-helper"


def validate_archive_name(archive_name: str) -> None:
    """Reject names that are empty or carry any directory component."""
    if not archive_name:
        raise InvalidArgumentError("archive name required")
    if (
        archive_name in (".", "..")
        or os.path.basename(archive_name) != archive_name
        or os.path.normpath(archive_name) != archive_name
        or (os.altsep is not None and os.altsep in archive_name)
    ):
        raise InvalidArgumentError(
            "archive name must be a valid path basename without directory parts"
        )


def sysdiagnose_args(output_path: Path) -> list[str]:
    return [
        "-f",  # output directory
        str(output_path.parent),
        "-A",  # archive name
        output_path.name,
        "-u",  # without UI feedback
        "-b",  # without showing Finder
    ]


async def _terminate(proc: asyncio.subprocess.Process) -> None:
    """Kill the process group of proc and reap it."""
    try:
        os.killpg(os.getpgid(proc.pid), signal.SIGKILL)
    except OSError:
        # Process group already gone
        with contextlib.suppress(ProcessLookupError):
            proc.kill()
    await proc.wait()


class SysdiagnoseCollector(DiagnosticCollectorPort):
    """Runs sysdiagnose into a private workspace and hands back the archive.

    sysdiagnose needs root privileges; the caller is expected to hold
    them already. Collection usually takes a few minutes and produces
    hundreds of MB.
    """

    def __init__(
        self,
        executable: str = SYSDIAGNOSE_EXECUTABLE,
        work_dir_root: Path | None = None,
    ) -> None:
        self.executable = executable
        self.work_dir_root = work_dir_root

    async def collect(self, archive_name: str) -> BinaryIO:
        validate_archive_name(archive_name)

        work_dir = self._make_work_dir()
        try:
            archive_path = work_dir / f"{archive_name}{ARCHIVE_SUFFIX}"
            await self._run(archive_name, archive_path)
            return self._open_detached(archive_path)
        finally:
            shutil.rmtree(work_dir, ignore_errors=True)

    def _make_work_dir(self) -> Path:
        root = str(self.work_dir_root) if self.work_dir_root else None
        try:
            work_dir = Path(tempfile.mkdtemp(prefix=WORK_DIR_PREFIX, dir=root))
        except OSError as e:
            raise ResourceError("failed to create directory", root or tempfile.gettempdir()) from e

        try:
            work_dir.chmod(0o700)
        except OSError as e:
            shutil.rmtree(work_dir, ignore_errors=True)
            raise ResourceError("unable to chmod sysdiagnose dir", work_dir) from e
        return work_dir

    async def _run(self, archive_name: str, archive_path: Path) -> None:
        command = [self.executable, *sysdiagnose_args(archive_path)]
        logger.debug("Preparing sysdiagnose collection: {}", command)
        logger.info(
            "Running sysdiagnose for {} - this produces a large archive in a few minutes, "
            "usually 100s of MB",
            archive_name,
        )

        start = time.monotonic()
        try:
            proc = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
                start_new_session=True,  # Own process group, killed as a unit
            )
        except OSError as e:
            failure = ProcessFailureError(command)
            failure.__cause__ = e
            raise CollectionFailureError(f"error running sysdiagnose: {failure}") from failure

        try:
            _, stderr = await proc.communicate()
        except asyncio.CancelledError:
            await _terminate(proc)
            logger.warning("sysdiagnose cancelled after {:.0f}s", time.monotonic() - start)
            raise

        if proc.returncode != 0:
            failure = ProcessFailureError(
                command,
                proc.returncode,
                stderr.decode(errors="replace").strip(),
            )
            raise CollectionFailureError(f"error running sysdiagnose: {failure}") from failure

        logger.info("sysdiagnose collected in {}s", int(time.monotonic() - start))

    def _open_detached(self, archive_path: Path) -> BinaryIO:
        """Open archive_path and remove its directory entry.

        The open handle keeps the data readable until closed, so nothing
        is left discoverable on disk once control returns to the caller.
        """
        try:
            handle = archive_path.open("rb")
        except OSError as e:
            raise ResourceError("open result handle", archive_path) from e

        try:
            archive_path.unlink()
        except OSError as e:
            logger.warning("sysdiagnose unable to remove temporary file {}: {}", archive_path, e)

        return handle

import asyncio
import contextlib
from collections.abc import Sequence

from loguru import logger

from ec2_macos_watchdog.domain.errors import NotFoundError, ProcessFailureError
from ec2_macos_watchdog.domain.ports.identity_port import HostIdentityPort

# Queries the platform expert device entry, which carries IOPlatformUUID
IOREG_COMMAND = ("ioreg", "-d1", "-c", "IOPlatformExpertDevice", "-r", "-w0")

PLATFORM_UUID_KEY_TOKEN = '"IOPlatformUUID"'


def parse_io_platform_uuid(data: bytes) -> str:
    """Extract the IOPlatformUUID value from ioreg output.

    A line is only trusted when, with quotes removed, it is exactly
    ``key = value`` with the expected key and a non-empty value.

    Raises:
        NotFoundError: If no well-formed line is present.
    """
    key = PLATFORM_UUID_KEY_TOKEN.strip('"')

    for line in data.decode("utf-8", errors="replace").splitlines():
        if PLATFORM_UUID_KEY_TOKEN not in line:
            continue

        fields = line.replace('"', "").split()
        if len(fields) != 3:
            continue
        if fields[0] != key:
            continue
        if fields[2]:
            return fields[2]

    raise NotFoundError("UUID not found in ioreg output")


class IORegPlatformIdentityResolver(HostIdentityPort):
    """Resolve the host identity from the macOS I/O registry."""

    def __init__(self, command: Sequence[str] = IOREG_COMMAND) -> None:
        self.command = tuple(command)

    async def resolve(self) -> str:
        output = await self._query()
        return parse_io_platform_uuid(output)

    async def _query(self) -> bytes:
        try:
            proc = await asyncio.create_subprocess_exec(
                *self.command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.debug("ioreg query could not start: {}", e)
            raise ProcessFailureError(self.command) from e

        try:
            stdout, stderr = await proc.communicate()
        except asyncio.CancelledError:
            with contextlib.suppress(ProcessLookupError):
                proc.kill()
            await proc.wait()
            raise

        if proc.returncode != 0:
            raise ProcessFailureError(
                self.command,
                proc.returncode,
                stderr.decode(errors="replace").strip(),
            )
        return stdout

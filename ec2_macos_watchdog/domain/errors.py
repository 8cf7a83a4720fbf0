"""Error taxonomy shared by every layer of the watchdog.

Cancellation is not part of this hierarchy: it is always carried by
``asyncio.CancelledError`` and propagated untouched.
"""

from collections.abc import Sequence
from pathlib import Path


class WatchdogError(Exception):
    """Base class for all watchdog failures."""


class InvalidArgumentError(WatchdogError):
    """Raised for rejected input such as an archive name with path parts."""


class PermissionDeniedError(WatchdogError):
    """Raised when the process lacks privileges for an operation."""


class NotFoundError(WatchdogError):
    """Raised when an expected value is absent from tool output."""


class ConnectivityError(WatchdogError):
    """Raised when the metadata service cannot be reached."""


class ProcessFailureError(WatchdogError):
    """Raised when an external command cannot start or exits non-zero."""

    def __init__(
        self,
        command: Sequence[str],
        returncode: int | None = None,
        stderr: str = "",
    ) -> None:
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr
        if returncode is None:
            message = f"{self.command[0]} could not be started"
        else:
            message = f"{self.command[0]} exited with status {returncode}"
        if stderr:
            message = f"{message}: {stderr}"
        super().__init__(message)


class CollectionFailureError(WatchdogError):
    """Raised when a diagnostic collection does not produce an archive."""


class CollectionTimeoutError(CollectionFailureError):
    """Raised when a diagnostic collection exceeds its time bound."""

    def __init__(self, timeout_s: float) -> None:
        self.timeout_s = timeout_s
        super().__init__(f"collection timeout of {timeout_s:g}s exceeded")


class ResourceError(WatchdogError):
    """Raised for filesystem failures; carries the offending path."""

    def __init__(self, message: str, path: Path | str) -> None:
        self.path = Path(path)
        super().__init__(f"{message}: {path}")

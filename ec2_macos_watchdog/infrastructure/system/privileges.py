import os

from ec2_macos_watchdog.domain.errors import PermissionDeniedError


def require_root() -> None:
    """Raise PermissionDeniedError unless running with root privileges."""
    if os.geteuid() != 0:
        raise PermissionDeniedError("root privileges required - run with sudo")

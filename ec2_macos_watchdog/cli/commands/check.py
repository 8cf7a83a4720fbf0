import asyncio

from ec2_macos_watchdog.cli.commands._common import console, exit_with_error
from ec2_macos_watchdog.cli.theme import theme
from ec2_macos_watchdog.cli.utils import run_cancellable
from ec2_macos_watchdog.domain.errors import ConnectivityError
from ec2_macos_watchdog.infrastructure.imds.imds_probe import ImdsConnectivityProbe


def check_imds() -> None:
    """Verify connectivity to the EC2 Instance Metadata Service."""
    try:
        run_cancellable(ImdsConnectivityProbe().check())
    except asyncio.CancelledError:
        exit_with_error("IMDS check cancelled")
    except ConnectivityError as e:
        exit_with_error(str(e))

    console.print(f"[{theme.SUCCESS}]IMDS connectivity check passed[/]")

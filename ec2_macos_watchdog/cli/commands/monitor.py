import asyncio
from pathlib import Path

import typer
from pydantic import ValidationError

from ec2_macos_watchdog.application.dto.monitor_config import (
    MONITOR_DEFAULT_OUTPUT_BASE_DIR,
    MonitorConfig,
)
from ec2_macos_watchdog.application.network_health_monitor import NetworkHealthMonitor
from ec2_macos_watchdog.application.use_cases.collect_diagnostics import CollectDiagnostics
from ec2_macos_watchdog.cli.commands._common import console, ensure_root, exit_with_error
from ec2_macos_watchdog.cli.theme import theme
from ec2_macos_watchdog.cli.utils import parse_duration, report_validation_error, run_cancellable
from ec2_macos_watchdog.domain.errors import WatchdogError
from ec2_macos_watchdog.domain.value_objects.monitor_state import MonitorOutcome
from ec2_macos_watchdog.infrastructure.imds.imds_probe import ImdsConnectivityProbe
from ec2_macos_watchdog.infrastructure.persistence.archive_store import ArchiveStore
from ec2_macos_watchdog.infrastructure.sysdiagnose.sysdiagnose_collector import (
    SysdiagnoseCollector,
)
from ec2_macos_watchdog.infrastructure.system.platform_identity import (
    IORegPlatformIdentityResolver,
)


def build_monitor(config: MonitorConfig) -> NetworkHealthMonitor:
    archive_store = ArchiveStore(config.output_base_dir)
    return NetworkHealthMonitor(
        config=config,
        probe=ImdsConnectivityProbe(),
        identity_resolver=IORegPlatformIdentityResolver(),
        collect_diagnostics=CollectDiagnostics(SysdiagnoseCollector(), archive_store),
        archive_store=archive_store,
    )


def network_health_monitor(
    interval: str = typer.Option("5m", "--interval", help="Interval between network checks"),
    startup_delay: str = typer.Option(
        "5m", "--startup-delay", help="Delay before starting checks"
    ),
    output_base_dir: Path = typer.Option(
        MONITOR_DEFAULT_OUTPUT_BASE_DIR,
        "--output-base-dir",
        help="Base directory for sysdiagnose output",
    ),
    sysdiagnose_timeout: str = typer.Option(
        "15m", "--sysdiagnose-timeout", help="Timeout for sysdiagnose collection"
    ),
) -> None:
    """Monitor network health with periodic checks.

    A sysdiagnose is collected on first failure, after which the monitor
    exits. Requires root privileges; run with sudo if not running as root.
    """
    ensure_root()

    try:
        durations = {
            "interval_s": parse_duration(interval),
            "startup_delay_s": parse_duration(startup_delay),
            "collection_timeout_s": parse_duration(sysdiagnose_timeout),
        }
    except ValueError as e:
        raise typer.BadParameter(str(e)) from None

    try:
        config = MonitorConfig(output_base_dir=output_base_dir, **durations)
    except ValidationError as e:
        report_validation_error(e)
        raise typer.Exit(1) from None

    monitor = build_monitor(config)
    try:
        outcome = run_cancellable(monitor.run())
    except asyncio.CancelledError:
        exit_with_error(f"network health monitor cancelled during {monitor.state.value}")
    except WatchdogError as e:
        exit_with_error(str(e))

    if outcome is MonitorOutcome.ALREADY_CAPTURED:
        console.print(f"[{theme.WARNING}]Sysdiagnose already captured for this host.[/]")
    else:
        console.print(f"[{theme.SUCCESS}]Sysdiagnose captured, watchdog stopped.[/]")

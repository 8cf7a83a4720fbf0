import asyncio
import tempfile
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.filesize import decimal

from ec2_macos_watchdog.application.dto.monitor_config import CollectionConfig
from ec2_macos_watchdog.application.use_cases.collect_diagnostics import CollectDiagnostics
from ec2_macos_watchdog.cli.commands._common import console, ensure_root, exit_with_error
from ec2_macos_watchdog.cli.theme import theme
from ec2_macos_watchdog.cli.utils import parse_duration, report_validation_error, run_cancellable
from ec2_macos_watchdog.domain.errors import CollectionTimeoutError, WatchdogError
from ec2_macos_watchdog.domain.value_objects.archive import PersistedArchive
from ec2_macos_watchdog.infrastructure.persistence.archive_store import ArchiveStore
from ec2_macos_watchdog.infrastructure.sysdiagnose.sysdiagnose_collector import (
    SysdiagnoseCollector,
)


async def _create_sysdiagnose(config: CollectionConfig) -> PersistedArchive:
    archive_store = ArchiveStore(config.output_dir)
    output_dir = archive_store.ensure_base_dir()
    use_case = CollectDiagnostics(SysdiagnoseCollector(), archive_store)
    return await use_case.execute(output_dir, config.timeout_s)


def create_sysdiagnose(
    output_dir: Path = typer.Option(
        Path(tempfile.gettempdir()),
        "--output-dir",
        help="Directory where the sysdiagnose archive will be saved",
    ),
    timeout: str = typer.Option(
        "15m", "--timeout", help="Timeout for creation (e.g. 10m, 30m, 1.5h)"
    ),
) -> None:
    """Create a sysdiagnose archive.

    The archive includes logs, system stats and other debug data and is
    saved in the output directory. Requires root privileges; run with
    sudo if not running as root.
    """
    ensure_root()

    try:
        timeout_s = parse_duration(timeout)
    except ValueError as e:
        raise typer.BadParameter(str(e)) from None

    try:
        config = CollectionConfig(output_dir=output_dir, timeout_s=timeout_s)
    except ValidationError as e:
        report_validation_error(e)
        raise typer.Exit(1) from None

    try:
        archive = run_cancellable(_create_sysdiagnose(config))
    except asyncio.CancelledError:
        exit_with_error("sysdiagnose creation cancelled")
    except CollectionTimeoutError:
        exit_with_error("creation timeout exceeded")
    except WatchdogError as e:
        exit_with_error(str(e))

    console.print(
        f"[{theme.SUCCESS}]Sysdiagnose creation completed[/] "
        f"[{theme.PATH}]{archive.path}[/] ({decimal(archive.bytes_written)})"
    )

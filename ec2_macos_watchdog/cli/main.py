import sys
from pathlib import Path

import typer
from loguru import logger

from ec2_macos_watchdog.cli.commands import check, debug, monitor


def setup_logging(verbose: bool = False, log_file: Path | None = None) -> None:
    """Configure loguru logging."""
    logger.remove()

    logger.add(
        sys.stderr,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {message}",
        level="DEBUG" if verbose else "INFO",
    )

    if log_file:
        logger.add(
            log_file,
            format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}",
            level="DEBUG",
            rotation="10 MB",
            encoding="utf-8",
        )


app = typer.Typer(
    name="ec2-macos-watchdog",
    help="Watchdog and diagnostic utilities for EC2 macOS instances",
    no_args_is_help=True,
)

# Watchdog subcommand group
watchdog_app = typer.Typer(
    help="Monitor system health and collect diagnostic data",
    no_args_is_help=True,
)
watchdog_app.command(name="network-health-monitor")(monitor.network_health_monitor)
app.add_typer(watchdog_app, name="watchdog")

# Debug subcommand group
debug_app = typer.Typer(help="Debug utilities for EC2 macOS instances", no_args_is_help=True)
debug_app.command(name="create-sysdiagnose")(debug.create_sysdiagnose)
app.add_typer(debug_app, name="debug")

# Check subcommand group
check_app = typer.Typer(help="Run various system checks", no_args_is_help=True)
check_app.command(name="imds")(check.check_imds)
app.add_typer(check_app, name="check")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output", is_eager=True),
    log_file: Path | None = typer.Option(None, "--log-file", help="Also log to this file"),
) -> None:
    """Watchdog and diagnostic utilities for EC2 macOS instances."""
    setup_logging(verbose=verbose, log_file=log_file)


if __name__ == "__main__":
    app()

from typing import NoReturn

import typer
from rich.console import Console

from ec2_macos_watchdog.cli.theme import theme
from ec2_macos_watchdog.domain.errors import PermissionDeniedError
from ec2_macos_watchdog.infrastructure.system.privileges import require_root

console = Console()
err_console = Console(stderr=True)


def exit_with_error(message: str) -> NoReturn:
    err_console.print(f"[{theme.ERROR_BOLD}]Error:[/] {message}")
    raise typer.Exit(1)


def ensure_root() -> None:
    try:
        require_root()
    except PermissionDeniedError as e:
        exit_with_error(str(e))

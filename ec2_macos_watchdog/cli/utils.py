"""CLI utility functions."""

import asyncio
import math
import re
import signal
from collections.abc import Coroutine
from typing import Any, TypeVar

import typer
from pydantic import ValidationError

T = TypeVar("T")

_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ms|s|m|h)")
_DURATION_UNITS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}

# Config field name -> CLI flag, where they differ
FIELD_FLAGS = {
    "interval_s": "--interval",
    "startup_delay_s": "--startup-delay",
    "output_base_dir": "--output-base-dir",
    "collection_timeout_s": "--sysdiagnose-timeout",
    "output_dir": "--output-dir",
    "timeout_s": "--timeout",
}


def parse_duration(text: str) -> float:
    """Parse a duration such as ``90s``, ``5m``, ``1.5h`` or ``1h30m``.

    Bare numbers are seconds. A leading ``-`` is kept so negative values
    reach config validation instead of failing here.

    Returns:
        Duration in seconds

    Raises:
        ValueError: If text is not a duration
    """
    value = text.strip()
    sign = 1.0
    if value.startswith("-"):
        sign, value = -1.0, value[1:]

    try:
        seconds = float(value)
    except ValueError:
        pass
    else:
        if not math.isfinite(seconds):
            raise ValueError(f"invalid duration: {text!r}")
        return sign * seconds

    pos = 0
    total = 0.0
    for match in _DURATION_PART.finditer(value):
        if match.start() != pos:
            break
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()

    if pos == 0 or pos != len(value) or not math.isfinite(total):
        raise ValueError(f"invalid duration: {text!r}")
    return sign * total


def report_validation_error(e: ValidationError) -> None:
    """Print pydantic errors as per-flag CLI errors."""
    for error in e.errors():
        loc = error.get("loc", ())
        field = str(loc[0]) if loc else ""
        msg = error.get("msg", str(error))
        # Clean up Pydantic message format
        if msg.startswith("Value error, "):
            msg = msg[13:]
        if field:
            flag = FIELD_FLAGS.get(field, f"--{field.replace('_', '-')}")
            typer.echo(f"Error: {flag}: {msg}", err=True)
        else:
            typer.echo(f"Error: {msg}", err=True)


async def _cancel_on_signal(coro: Coroutine[Any, Any, T]) -> T:
    task = asyncio.current_task()
    assert task is not None
    loop = asyncio.get_running_loop()
    signals = (signal.SIGTERM, signal.SIGINT)
    for sig in signals:
        loop.add_signal_handler(sig, task.cancel)
    try:
        return await coro
    finally:
        for sig in signals:
            loop.remove_signal_handler(sig)


def run_cancellable(coro: Coroutine[Any, Any, T]) -> T:
    """Run coro to completion, cancelling it on SIGTERM or SIGINT.

    Cancellation surfaces as ``asyncio.CancelledError``.
    """
    return asyncio.run(_cancel_on_signal(coro))

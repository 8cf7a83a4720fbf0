"""Shared test doubles and helpers."""

import asyncio
import io
import textwrap
from collections.abc import Callable
from pathlib import Path
from typing import BinaryIO

from ec2_macos_watchdog.domain.errors import CollectionFailureError, ConnectivityError
from ec2_macos_watchdog.domain.ports.collector_port import DiagnosticCollectorPort
from ec2_macos_watchdog.domain.ports.probe_port import ConnectivityProbePort

FAKE_ARCHIVE_CONTENT = b"fake sysdiagnose archive\x00\x01\x02" * 1024
PLATFORM_UUID = "ABCD1234-5678-90EF-GHIJ-KLMNOPQRSTUV"


def write_script(path: Path, body: str) -> Path:
    path.write_text("#!/bin/sh\n" + textwrap.dedent(body))
    path.chmod(0o755)
    return path


async def wait_until(predicate: Callable[[], bool], timeout: float = 5.0) -> None:
    """Poll predicate until it is true or fail after timeout."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.01)


class FakeProbe(ConnectivityProbePort):
    """Probe returning scripted results; True means reachable.

    The last result repeats once the script is exhausted.
    """

    def __init__(self, *results: bool, block: bool = False) -> None:
        self.results = list(results) or [True]
        self.block = block
        self.calls = 0
        self.started = asyncio.Event()

    async def check(self) -> None:
        self.calls += 1
        self.started.set()
        if self.block:
            await asyncio.Event().wait()
        idx = min(self.calls - 1, len(self.results) - 1)
        if not self.results[idx]:
            raise ConnectivityError("IMDS unreachable")


class FakeIdentity:
    def __init__(self, host: str | None = None, error: Exception | None = None) -> None:
        self.host = host
        self.error = error

    async def resolve(self) -> str:
        if self.error:
            raise self.error
        assert self.host is not None
        return self.host


class FakeCollector(DiagnosticCollectorPort):
    def __init__(
        self,
        content: bytes = FAKE_ARCHIVE_CONTENT,
        fail: bool = False,
        delay_s: float = 0.0,
    ) -> None:
        self.content = content
        self.fail = fail
        self.delay_s = delay_s
        self.calls: list[str] = []
        self.streams: list[io.BytesIO] = []

    async def collect(self, archive_name: str) -> BinaryIO:
        self.calls.append(archive_name)
        if self.delay_s:
            await asyncio.sleep(self.delay_s)
        if self.fail:
            raise CollectionFailureError("error running sysdiagnose: exit status 1")
        stream = io.BytesIO(self.content)
        self.streams.append(stream)
        return stream

"""Tests for the command line interface."""

import asyncio
import os
import signal
import sys
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from loguru import logger
from typer.testing import CliRunner

from ec2_macos_watchdog.cli.main import app, setup_logging
from ec2_macos_watchdog.cli.utils import parse_duration, run_cancellable
from ec2_macos_watchdog.domain.errors import (
    CollectionTimeoutError,
    ConnectivityError,
    PermissionDeniedError,
)
from ec2_macos_watchdog.domain.value_objects.archive import PersistedArchive
from ec2_macos_watchdog.domain.value_objects.monitor_state import MonitorOutcome, MonitorState

runner = CliRunner()

GETEUID = "ec2_macos_watchdog.infrastructure.system.privileges.os.geteuid"
BUILD_MONITOR = "ec2_macos_watchdog.cli.commands.monitor.build_monitor"


@pytest.fixture(autouse=True)
def _restore_logger() -> Iterator[None]:
    with patch("ec2_macos_watchdog.cli.main.setup_logging"):
        yield
    logger.remove()
    logger.add(sys.stderr)


@pytest.fixture
def as_root() -> Iterator[None]:
    with patch(GETEUID, return_value=0):
        yield


def _fake_monitor(outcome: MonitorOutcome | None = None, error: BaseException | None = None):  # type: ignore[no-untyped-def]
    monitor = MagicMock()
    monitor.state = MonitorState.POLLING
    monitor.run = AsyncMock(return_value=outcome, side_effect=error)
    return monitor


class TestParseDuration:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("0", 0.0),
            ("90", 90.0),
            ("2.5", 2.5),
            ("90s", 90.0),
            ("5m", 300.0),
            ("1.5h", 5400.0),
            ("1h30m", 5400.0),
            ("1m30s", 90.0),
            ("250ms", 0.25),
            (" 15m ", 900.0),
            ("-1s", -1.0),
        ],
    )
    def test_valid(self, text: str, expected: float) -> None:
        assert parse_duration(text) == pytest.approx(expected)

    @pytest.mark.parametrize("text", ["", "m", "5x", "5 m", "m5", "1h-30m", "inf", "nan", "5m!"])
    def test_invalid(self, text: str) -> None:
        with pytest.raises(ValueError, match="invalid duration"):
            parse_duration(text)


class TestRunCancellable:
    def test_returns_result(self) -> None:
        async def answer() -> int:
            return 42

        assert run_cancellable(answer()) == 42

    @pytest.mark.parametrize("sig", [signal.SIGTERM, signal.SIGINT])
    def test_signal_cancels_main_task(self, sig: signal.Signals) -> None:
        reached_end = False

        async def sleep_until_signalled() -> None:
            nonlocal reached_end
            asyncio.get_running_loop().call_later(0.2, os.kill, os.getpid(), sig)
            await asyncio.sleep(30)
            reached_end = True

        with pytest.raises(asyncio.CancelledError):
            run_cancellable(sleep_until_signalled())

        assert not reached_end


class TestSetupLogging:
    def test_default_has_single_handler(self) -> None:
        setup_logging(verbose=False)
        assert len(logger._core.handlers) == 1  # type: ignore[attr-defined]

    def test_log_file_adds_handler(self, tmp_path: Path) -> None:
        log_file = tmp_path / "watchdog.log"

        setup_logging(verbose=True, log_file=log_file)
        logger.debug("written to file")

        assert len(logger._core.handlers) == 2  # type: ignore[attr-defined]
        logger.remove()
        assert "written to file" in log_file.read_text()


class TestNetworkHealthMonitorCommand:
    def test_requires_root(self) -> None:
        with patch(GETEUID, return_value=501), patch(BUILD_MONITOR) as build:
            result = runner.invoke(app, ["watchdog", "network-health-monitor"])

        assert result.exit_code == 1
        assert "root privileges required" in result.output
        build.assert_not_called()

    def test_rejects_malformed_duration(self, as_root: None) -> None:
        with patch(BUILD_MONITOR) as build:
            result = runner.invoke(app, ["watchdog", "network-health-monitor", "--interval", "5x"])

        assert result.exit_code == 2
        build.assert_not_called()

    def test_rejects_short_timeout(self, as_root: None) -> None:
        with patch(BUILD_MONITOR) as build:
            result = runner.invoke(
                app, ["watchdog", "network-health-monitor", "--sysdiagnose-timeout", "1m"]
            )

        assert result.exit_code == 1
        assert "--sysdiagnose-timeout" in result.output
        build.assert_not_called()

    def test_rejects_negative_interval(self, as_root: None) -> None:
        with patch(BUILD_MONITOR) as build:
            result = runner.invoke(
                app, ["watchdog", "network-health-monitor", "--interval", "-1s"]
            )

        assert result.exit_code == 1
        assert "--interval" in result.output
        build.assert_not_called()

    def test_passes_parsed_config(self, as_root: None, tmp_path: Path) -> None:
        with patch(BUILD_MONITOR, return_value=_fake_monitor(MonitorOutcome.CAPTURED)) as build:
            result = runner.invoke(
                app,
                [
                    "watchdog",
                    "network-health-monitor",
                    "--interval",
                    "90s",
                    "--startup-delay",
                    "0",
                    "--output-base-dir",
                    str(tmp_path),
                    "--sysdiagnose-timeout",
                    "20m",
                ],
            )

        assert result.exit_code == 0, result.output
        assert "Sysdiagnose captured" in result.output
        config = build.call_args.args[0]
        assert config.interval_s == 90
        assert config.startup_delay_s == 0
        assert config.output_base_dir == tmp_path
        assert config.collection_timeout_s == 1200

    def test_defaults(self, as_root: None) -> None:
        with patch(BUILD_MONITOR, return_value=_fake_monitor(MonitorOutcome.CAPTURED)) as build:
            result = runner.invoke(app, ["watchdog", "network-health-monitor"])

        assert result.exit_code == 0, result.output
        config = build.call_args.args[0]
        assert config.interval_s == 300
        assert config.startup_delay_s == 300
        assert config.collection_timeout_s == 900
        assert config.output_base_dir == Path("/private/var/db/ec2-macos-utils/sysdiagnose")

    def test_already_captured(self, as_root: None) -> None:
        with patch(BUILD_MONITOR, return_value=_fake_monitor(MonitorOutcome.ALREADY_CAPTURED)):
            result = runner.invoke(app, ["watchdog", "network-health-monitor"])

        assert result.exit_code == 0
        assert "already captured" in result.output

    def test_cancellation_exits_nonzero(self, as_root: None) -> None:
        monitor = _fake_monitor(error=asyncio.CancelledError())
        with patch(BUILD_MONITOR, return_value=monitor):
            result = runner.invoke(app, ["watchdog", "network-health-monitor"])

        assert result.exit_code == 1
        assert "cancelled during polling" in result.output

    def test_fatal_error_exits_nonzero(self, as_root: None) -> None:
        monitor = _fake_monitor(error=PermissionDeniedError("permission denied"))
        with patch(BUILD_MONITOR, return_value=monitor):
            result = runner.invoke(app, ["watchdog", "network-health-monitor"])

        assert result.exit_code == 1
        assert "permission denied" in result.output


class TestCreateSysdiagnoseCommand:
    CREATE = "ec2_macos_watchdog.cli.commands.debug._create_sysdiagnose"

    def test_requires_root(self) -> None:
        with patch(GETEUID, return_value=501), patch(self.CREATE) as create:
            result = runner.invoke(app, ["debug", "create-sysdiagnose"])

        assert result.exit_code == 1
        assert "root privileges required" in result.output
        create.assert_not_called()

    def test_rejects_short_timeout(self, as_root: None) -> None:
        with patch(self.CREATE) as create:
            result = runner.invoke(app, ["debug", "create-sysdiagnose", "--timeout", "299s"])

        assert result.exit_code == 1
        assert "--timeout" in result.output
        create.assert_not_called()

    def test_reports_archive(self, as_root: None, tmp_path: Path) -> None:
        archive = PersistedArchive(path=tmp_path / "a.tar.gz", bytes_written=1500)
        create = AsyncMock(return_value=archive)
        with patch(self.CREATE, create):
            result = runner.invoke(
                app,
                ["debug", "create-sysdiagnose", "--output-dir", str(tmp_path), "--timeout", "10m"],
            )

        assert result.exit_code == 0, result.output
        output = " ".join(result.output.split())
        assert "Sysdiagnose creation completed" in output
        assert "1.5 kB" in output
        config = create.call_args.args[0]
        assert config.output_dir == tmp_path
        assert config.timeout_s == 600

    def test_timeout_message(self, as_root: None) -> None:
        create = AsyncMock(side_effect=CollectionTimeoutError(900))
        with patch(self.CREATE, create):
            result = runner.invoke(app, ["debug", "create-sysdiagnose"])

        assert result.exit_code == 1
        assert "creation timeout exceeded" in result.output


class TestCheckImdsCommand:
    PROBE = "ec2_macos_watchdog.cli.commands.check.ImdsConnectivityProbe"

    def test_passes(self) -> None:
        with patch(self.PROBE) as probe_class:
            probe_class.return_value.check = AsyncMock(return_value=None)
            result = runner.invoke(app, ["check", "imds"])

        assert result.exit_code == 0
        assert "IMDS connectivity check passed" in result.output

    def test_fails(self) -> None:
        with patch(self.PROBE) as probe_class:
            probe_class.return_value.check = AsyncMock(
                side_effect=ConnectivityError("IMDS returned non-200 status code: 500")
            )
            result = runner.invoke(app, ["check", "imds"])

        assert result.exit_code == 1
        assert "non-200 status code: 500" in result.output

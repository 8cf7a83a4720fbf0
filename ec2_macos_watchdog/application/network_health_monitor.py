import asyncio
from loguru import logger

from ec2_macos_watchdog.application.dto.monitor_config import MonitorConfig
from ec2_macos_watchdog.application.use_cases.collect_diagnostics import CollectDiagnostics
from ec2_macos_watchdog.domain.errors import ConnectivityError, WatchdogError
from ec2_macos_watchdog.domain.ports.archive_store_port import ArchiveStorePort
from ec2_macos_watchdog.domain.ports.identity_port import HostIdentityPort
from ec2_macos_watchdog.domain.ports.probe_port import ConnectivityProbePort
from ec2_macos_watchdog.domain.value_objects.archive import FALLBACK_HOST_IDENTITY
from ec2_macos_watchdog.domain.value_objects.monitor_state import MonitorOutcome, MonitorState


class NetworkHealthMonitor:
    """Probe IMDS periodically and capture one sysdiagnose on failure.

    States:
    idle -> startup_delay -> polling <-> collecting -> terminated

    At most one archive is captured per host. A capture found on disk at
    startup ends the run before any probe, and a successful capture ends
    the loop. A failed collection is logged and polling resumes, so the
    next probe failure retries it. Cancelling the task running ``run()``
    interrupts whichever wait is in progress.
    """

    def __init__(
        self,
        config: MonitorConfig,
        probe: ConnectivityProbePort,
        identity_resolver: HostIdentityPort,
        collect_diagnostics: CollectDiagnostics,
        archive_store: ArchiveStorePort,
    ) -> None:
        self.config = config
        self.probe = probe
        self.identity_resolver = identity_resolver
        self.collect_diagnostics = collect_diagnostics
        self.archive_store = archive_store

        self.state = MonitorState.IDLE
        self.host: str | None = None

    async def run(self) -> MonitorOutcome:
        try:
            return await self._run()
        except asyncio.CancelledError:
            logger.warning("Network health monitor cancelled during {}", self.state.value)
            raise

    async def _run(self) -> MonitorOutcome:
        host = self.host = await self._resolve_host()

        self.archive_store.ensure_base_dir()
        if self.archive_store.has_capture(host):
            logger.warning("Monitor already captured sysdiagnose for failure, stopping watchdog")
            self._transition(MonitorState.TERMINATED)
            return MonitorOutcome.ALREADY_CAPTURED

        self._transition(MonitorState.STARTUP_DELAY)
        logger.info("Waiting {}s before starting network checks", self.config.startup_delay_s)
        await asyncio.sleep(self.config.startup_delay_s)

        self._transition(MonitorState.POLLING)
        logger.info("Starting network health monitoring every {}s", self.config.interval_s)

        while True:
            await asyncio.sleep(self.config.interval_s)

            if await self._is_reachable():
                continue

            self._transition(MonitorState.COLLECTING)
            if await self._collect(host):
                self._transition(MonitorState.TERMINATED)
                logger.info("Sysdiagnose collected, stopping watchdog")
                return MonitorOutcome.CAPTURED
            self._transition(MonitorState.POLLING)

    async def _resolve_host(self) -> str:
        try:
            host = await self.identity_resolver.resolve()
        except WatchdogError as e:
            logger.warning(
                "Failed to resolve host identity, using '{}': {}", FALLBACK_HOST_IDENTITY, e
            )
            return FALLBACK_HOST_IDENTITY
        logger.debug("Resolved host identity {}", host)
        return host

    async def _is_reachable(self) -> bool:
        try:
            await self.probe.check()
        except ConnectivityError as e:
            logger.warning("IMDS check failed, collecting sysdiagnose: {}", e)
            return False
        return True

    async def _collect(self, host: str) -> bool:
        """Run one collection attempt; False means polling should resume."""
        try:
            output_dir = self.archive_store.ensure_host_dir(host)
            archive = await self.collect_diagnostics.execute(
                output_dir, self.config.collection_timeout_s
            )
        except WatchdogError as e:
            logger.error("Sysdiagnose collection failed: {}", e)
            return False

        logger.info("Sysdiagnose saved to {} ({} bytes)", archive.path, archive.bytes_written)
        return True

    def _transition(self, state: MonitorState) -> None:
        logger.debug("Monitor state {} -> {}", self.state.value, state.value)
        self.state = state

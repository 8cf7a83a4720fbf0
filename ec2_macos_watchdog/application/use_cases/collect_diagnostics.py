import asyncio
from datetime import UTC, datetime
from pathlib import Path

from loguru import logger

from ec2_macos_watchdog.domain.errors import CollectionTimeoutError
from ec2_macos_watchdog.domain.ports.archive_store_port import ArchiveStorePort
from ec2_macos_watchdog.domain.ports.collector_port import DiagnosticCollectorPort
from ec2_macos_watchdog.domain.value_objects.archive import PersistedArchive, build_archive_name


class CollectDiagnostics:
    def __init__(self, collector: DiagnosticCollectorPort, archive_store: ArchiveStorePort):
        self.collector = collector
        self.archive_store = archive_store

    async def execute(self, output_dir: Path, timeout_s: float) -> PersistedArchive:
        """Collect an archive within timeout_s and persist it to output_dir.

        Raises CollectionTimeoutError if the collection outlives its
        bound. Outer cancellation propagates unchanged.
        """
        archive_name = build_archive_name(datetime.now(UTC))
        logger.info("Starting sysdiagnose creation: {} into {}", archive_name, output_dir)

        try:
            async with asyncio.timeout(timeout_s):
                stream = await self.collector.collect(archive_name)
        except TimeoutError as e:
            raise CollectionTimeoutError(timeout_s) from e

        with stream:
            return await self.archive_store.persist(stream, output_dir, archive_name)

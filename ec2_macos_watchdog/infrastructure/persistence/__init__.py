from ec2_macos_watchdog.infrastructure.persistence.archive_store import ArchiveStore

__all__ = ["ArchiveStore"]

from pathlib import Path

from ec2_macos_watchdog.domain.value_objects.archive import ARCHIVE_GLOB, ARCHIVE_SUFFIX


class ArchivePathBuilder:
    def __init__(self, base_dir: Path) -> None:
        self.base_dir = base_dir

    def host_dir(self, host: str) -> Path:
        return self.base_dir / host

    def archive_path(self, output_dir: Path, archive_name: str) -> Path:
        return output_dir / f"{archive_name}{ARCHIVE_SUFFIX}"

    def existing_archives(self, host: str) -> list[Path]:
        return sorted(self.host_dir(host).glob(ARCHIVE_GLOB))

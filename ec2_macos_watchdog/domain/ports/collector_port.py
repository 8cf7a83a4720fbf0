from abc import ABC, abstractmethod
from typing import BinaryIO


class DiagnosticCollectorPort(ABC):
    """Port for producing a diagnostic archive."""

    @abstractmethod
    async def collect(self, archive_name: str) -> BinaryIO:
        """Collect an archive and return an open read handle to it.

        The returned handle is no longer reachable by path. The caller
        owns it and must close it.
        """

from abc import ABC, abstractmethod


class ConnectivityProbePort(ABC):
    """Port for a single pass/fail connectivity check."""

    @abstractmethod
    async def check(self) -> None:
        """Return if the service is reachable, raise ConnectivityError
        otherwise."""

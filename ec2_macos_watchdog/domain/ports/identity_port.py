from typing import Protocol


class HostIdentityPort(Protocol):
    async def resolve(self) -> str:
        """Return a stable identifier for this host."""
        ...

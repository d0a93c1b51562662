"""Cache protocol for the session cache handle (DIP)."""

from typing import Protocol


class CacheProtocol(Protocol):
    """Protocol for cache backends (e.g. Redis) that hold session state."""

    def is_available(self) -> bool:
        """Return True if cache is connected and usable."""
        ...

    async def delete_pattern(self, pattern: str) -> int:
        """Delete all keys matching a glob pattern; return how many were deleted."""
        ...

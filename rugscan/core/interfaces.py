"""Core interfaces for the risk scanner."""

from typing import Protocol, runtime_checkable

from .types import PairSnapshot, RecentScan


@runtime_checkable
class KeyValueStore(Protocol):
    """Durable string key-value store."""

    async def get(self, key: str) -> str | None:
        """Return the stored value or None."""
        ...

    async def set(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""
        ...


class PairSource(Protocol):
    """Market data source keyed by token mint."""

    async def fetch_pair(self, mint: str) -> PairSnapshot:
        """Return the most relevant pair for a mint.

        Raises:
            PairNotFoundError: If no live pair exists
            TransportError: If the upstream could not be reached
        """
        ...


class ScanHistory(Protocol):
    """Recent-scans history sink."""

    async def record(self, entry: RecentScan) -> list[RecentScan]:
        """Record a scan and return the updated list."""
        ...

    async def load(self) -> list[RecentScan]:
        """Load recent scans, most recent first."""
        ...

    async def clear(self) -> None:
        """Remove all recent scans."""
        ...

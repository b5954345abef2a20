"""Two-tier TTL cache for upstream pair responses."""

import json
import math
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

import structlog
from pydantic import ValidationError

from ..core.errors import MalformedCacheError
from ..core.interfaces import KeyValueStore
from ..core.types import CacheEntry, PairSnapshot

logger = structlog.get_logger(__name__)


class CacheStatus(StrEnum):
    """Outcome of a cache lookup."""

    MEMORY = "memory"
    DURABLE = "durable"
    MISS = "miss"
    EXPIRED = "expired"
    MALFORMED = "malformed"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class CacheLookup:
    """Structured cache lookup result."""

    status: CacheStatus
    snapshot: PairSnapshot | None = None
    error: Exception | None = None

    @property
    def hit(self) -> bool:
        return self.snapshot is not None


class PairCache:
    """Volatile in-process map in front of a durable key-value store.

    The durable store survives restarts; the volatile map is rebuilt lazily
    from it on read. Entries carry an absolute expiry and are only ever
    treated as absent once expired, never purged.
    """

    def __init__(
        self,
        store: KeyValueStore,
        ttl_seconds: float = 10.0,
        now_fn: Callable[[], float] | None = None,
        key_prefix: str = "dex-cache:",
    ) -> None:
        """Initialize pair cache.

        Args:
            store: Durable key-value store
            ttl_seconds: Time to live in seconds
            now_fn: Optional function returning epoch seconds (for testing)
            key_prefix: Prefix for durable keys
        """
        self.store = store
        self.ttl_seconds = ttl_seconds
        self.key_prefix = key_prefix
        self._now_fn = now_fn or time.time
        self._memory: dict[str, CacheEntry] = {}

    def init(self) -> None:
        """Start from an empty volatile tier."""
        self._memory = {}
        logger.debug("Pair cache initialized", ttl_seconds=self.ttl_seconds)

    def clear(self) -> None:
        """Drop the volatile tier. Durable entries age out on their own."""
        self._memory.clear()

    def _durable_key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    async def lookup(self, key: str) -> CacheLookup:
        """Look up a snapshot in the volatile tier, then the durable tier.

        Args:
            key: Token identifier

        Returns:
            CacheLookup describing where the snapshot came from, or why not
        """
        now = self._now_fn()

        entry = self._memory.get(key)
        if entry is not None and entry.expires_at > now:
            return CacheLookup(CacheStatus.MEMORY, entry.payload)

        try:
            raw = await self.store.get(self._durable_key(key))
        except Exception as e:
            return CacheLookup(CacheStatus.UNAVAILABLE, error=e)

        if raw is None:
            return CacheLookup(CacheStatus.MISS)

        try:
            record = json.loads(raw)
            expires_ms = float(record["expires"])
            if not math.isfinite(expires_ms):
                raise ValueError(f"non-finite expiry {record['expires']!r}")
            snapshot = PairSnapshot.model_validate(record["data"])
        except (
            json.JSONDecodeError,
            KeyError,
            TypeError,
            ValueError,
            OverflowError,
            ValidationError,
        ) as e:
            return CacheLookup(
                CacheStatus.MALFORMED, error=MalformedCacheError(key, str(e))
            )

        expires_at = expires_ms / 1000
        if expires_at <= now:
            return CacheLookup(CacheStatus.EXPIRED)

        self._memory[key] = CacheEntry(key=key, payload=snapshot, expires_at=expires_at)
        return CacheLookup(CacheStatus.DURABLE, snapshot)

    async def get(self, key: str) -> PairSnapshot | None:
        """Return a live cached snapshot or None."""
        result = await self.lookup(key)

        if result.status in (CacheStatus.MALFORMED, CacheStatus.UNAVAILABLE):
            logger.warning(
                "Cached pair unreadable, treating as absent",
                key=key,
                status=result.status.value,
                error=str(result.error),
            )
        elif result.hit:
            logger.debug("Cache hit for pair", key=key, tier=result.status.value)

        return result.snapshot

    async def put(self, key: str, snapshot: PairSnapshot) -> bool:
        """Write a snapshot through to both tiers.

        Args:
            key: Token identifier
            snapshot: Snapshot to cache

        Returns:
            True if the durable tier was written, False if only memory was
        """
        expires_at = self._now_fn() + self.ttl_seconds
        self._memory[key] = CacheEntry(key=key, payload=snapshot, expires_at=expires_at)

        payload = {
            "data": snapshot.model_dump(mode="json", by_alias=True),
            "expires": int(expires_at * 1000),
        }
        try:
            await self.store.set(self._durable_key(key), json.dumps(payload))
        except Exception as e:
            logger.warning("Failed to persist pair cache", key=key, error=str(e))
            return False

        return True

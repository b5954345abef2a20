"""Recent scans history."""

import json

import structlog
from pydantic import ValidationError

from ..core.interfaces import KeyValueStore, ScanHistory
from ..core.types import RecentScan

logger = structlog.get_logger(__name__)

RECENT_SCANS_KEY = "recentScans"


class RecentScans(ScanHistory):
    """Most-recent-first scan history, one entry per mint."""

    def __init__(
        self, store: KeyValueStore, limit: int = 8, key: str = RECENT_SCANS_KEY
    ) -> None:
        self.store = store
        self.limit = limit
        self.key = key

    async def load(self) -> list[RecentScan]:
        """Load recent scans; unreadable history loads as empty."""
        try:
            raw = await self.store.get(self.key)
        except Exception as e:
            logger.warning("Failed to read recent scans", error=str(e))
            return []

        if raw is None:
            return []

        try:
            items = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("Recent scans are not valid JSON", error=str(e))
            return []

        if not isinstance(items, list):
            return []

        scans = []
        for item in items:
            try:
                scans.append(RecentScan.model_validate(item))
            except ValidationError:
                logger.debug("Skipping malformed recent scan", item=item)
        return scans

    async def _save(self, scans: list[RecentScan]) -> None:
        value = json.dumps([scan.model_dump(mode="json") for scan in scans])
        try:
            await self.store.set(self.key, value)
        except Exception as e:
            logger.warning("Failed to save recent scans", error=str(e))

    async def record(self, entry: RecentScan) -> list[RecentScan]:
        """Put entry first, dropping older entries for the same mint."""
        scans = [scan for scan in await self.load() if scan.mint != entry.mint]
        scans.insert(0, entry)
        scans = scans[: self.limit]
        await self._save(scans)
        return scans

    async def clear(self) -> None:
        """Remove all recent scans."""
        await self._save([])

"""Durable key-value storage backed by SQLite."""

import aiosqlite
import structlog

from ..core.interfaces import KeyValueStore

logger = structlog.get_logger(__name__)


class SQLiteStore(KeyValueStore):
    """SQLite-based key-value store."""

    def __init__(self, db_path: str = "rugscan.sqlite") -> None:
        """Initialize SQLite store.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = db_path
        self._initialized = False

        logger.info("SQLite store initialized", db_path=db_path)

    async def initialize(self) -> None:
        """Initialize database tables."""
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("""
                CREATE TABLE IF NOT EXISTS state (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
            """)

            await db.commit()

        self._initialized = True
        logger.info("Database tables initialized")

    async def _ensure_initialized(self) -> None:
        if not self._initialized:
            await self.initialize()

    async def get(self, key: str) -> str | None:
        """Load value by key.

        Args:
            key: State key

        Returns:
            Stored value or None if not found
        """
        await self._ensure_initialized()

        async with aiosqlite.connect(self.db_path) as db:
            async with db.execute(
                """
                SELECT value FROM state WHERE key = ?
            """,
                (key,),
            ) as cursor:
                row = await cursor.fetchone()

        if row:
            value = row[0]
            logger.debug("State loaded", key=key, value_length=len(value))
            return value

        logger.debug("State not found", key=key)
        return None

    async def set(self, key: str, value: str) -> None:
        """Save value by key.

        Args:
            key: State key
            value: State value
        """
        await self._ensure_initialized()

        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                """
                INSERT INTO state (key, value)
                VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value
            """,
                (key, value),
            )

            await db.commit()

        logger.debug("State saved", key=key, value_length=len(value))

    async def close(self) -> None:
        """Close storage (cleanup if needed)."""
        logger.info("Storage closed")

    async def __aenter__(self):
        """Async context manager entry."""
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

"""Scan service and command-line entry point."""

import argparse
import asyncio
import json
import logging
import re
import sys
import time
from collections.abc import Callable

import structlog
from pydantic import BaseModel, ConfigDict, Field

from ..cache.pair_cache import PairCache
from ..config.settings import AppSettings, load_settings
from ..core.errors import InvalidMintError, ScanError
from ..core.interfaces import PairSource, ScanHistory
from ..core.types import RecentScan, ScoreResult
from ..data.dexscreener import DexScreenerClient
from ..format.display import (
    dexscreener_url,
    pumpfun_url,
    render_report,
    time_ago,
)
from ..persist.history import RecentScans
from ..persist.storage import SQLiteStore
from ..scoring.scorer import RiskScorer

logger = structlog.get_logger(__name__)

BASE58_MINT = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{32,44}$")


def validate_mint(raw: str | None) -> str:
    """Return the stripped mint or raise InvalidMintError."""
    mint = (raw or "").strip()
    if not BASE58_MINT.match(mint):
        raise InvalidMintError(InvalidMintError.user_message)
    return mint


def user_message(error: Exception) -> str:
    """Map a scan failure to the message shown to the user."""
    if isinstance(error, (ScanError, InvalidMintError)):
        return error.user_message
    return ScanError.user_message


class ScanReport(BaseModel):
    """A scored mint with its outbound links."""

    model_config = ConfigDict(ser_json_inf_nan="strings")

    mint: str = Field(description="Token mint address")
    result: ScoreResult = Field(description="Scoring outcome")

    @property
    def dexscreener_url(self) -> str:
        return dexscreener_url(self.mint)

    @property
    def pumpfun_url(self) -> str:
        return pumpfun_url(self.mint)


class ScanService:
    """Validates, fetches, scores and records one mint at a time."""

    def __init__(
        self,
        source: PairSource,
        scorer: RiskScorer,
        history: ScanHistory | None = None,
        now_fn: Callable[[], float] | None = None,
    ) -> None:
        """Initialize scan service.

        Args:
            source: Pair source (usually a cached DexScreener client)
            scorer: Risk scorer
            history: Optional recent-scans history
            now_fn: Optional function returning epoch seconds (for testing)
        """
        self.source = source
        self.scorer = scorer
        self.history = history
        self._now_fn = now_fn or time.time

    async def scan(self, raw_mint: str) -> ScanReport:
        """Scan a mint.

        Args:
            raw_mint: User-supplied mint address

        Returns:
            ScanReport for the mint

        Raises:
            InvalidMintError: If the input is not a base58 mint
            PairNotFoundError: If no live pair exists
            TransportError: If the upstream could not be reached
        """
        mint = validate_mint(raw_mint)
        snapshot = await self.source.fetch_pair(mint)
        result = self.scorer.score(snapshot)

        logger.info(
            "Mint scanned",
            token_mint=mint,
            label=result.label.value,
            score=result.score,
        )

        if self.history is not None:
            entry = RecentScan(
                mint=mint,
                label=result.label,
                score=result.score,
                ts=int(self._now_fn() * 1000),
            )
            try:
                await self.history.record(entry)
            except Exception as e:
                logger.warning("Failed to record scan", token_mint=mint, error=str(e))

        return ScanReport(mint=mint, result=result)


def build_service(settings: AppSettings) -> tuple[ScanService, DexScreenerClient]:
    """Assemble a scan service from settings.

    Returns:
        The service and the client, which the caller must close
    """
    store = SQLiteStore(db_path=settings.database_path)
    cache = PairCache(store, ttl_seconds=settings.cache_ttl_seconds)
    cache.init()

    client = DexScreenerClient(
        base_url=settings.dexscreener_base,
        cache=cache,
        timeout=settings.http_timeout_seconds,
    )
    history = RecentScans(store, limit=settings.recent_limit)
    scorer = RiskScorer(thresholds=settings.thresholds)

    logger.info(
        "Scan service assembled",
        database_path=settings.database_path,
        cache_ttl_seconds=settings.cache_ttl_seconds,
    )
    return ScanService(client, scorer, history), client


def _stderr_logger_factory(*args) -> structlog.PrintLogger:
    return structlog.PrintLogger(sys.stderr)


def configure_logging(verbose: bool = False) -> None:
    """Send log events to stderr so stdout carries only scan output."""
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if verbose else logging.WARNING
        ),
        logger_factory=_stderr_logger_factory,
    )


def _print_recent(scans: list[RecentScan]) -> None:
    if not scans:
        print("No recent scans.")
        return
    for scan in scans:
        print(
            f"{scan.mint}  {time_ago(scan.ts)}  {scan.label.value} ({scan.score})"
        )


async def main(argv: list[str] | None = None) -> int:
    """Main entry point for the scanner CLI."""
    parser = argparse.ArgumentParser(
        prog="rugscan", description="Heuristic risk check for Solana token pairs"
    )
    parser.add_argument("mints", nargs="*", help="Token mint addresses to scan")
    parser.add_argument("--config", help="YAML configuration file path")
    parser.add_argument(
        "--json", action="store_true", help="Print results as JSON lines"
    )
    parser.add_argument(
        "--recent", action="store_true", help="List recent scans and exit"
    )
    parser.add_argument(
        "--clear-recent", action="store_true", help="Clear recent scans and exit"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log debug output to stderr"
    )

    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    settings = load_settings(args.config) if args.config else AppSettings()
    service, client = build_service(settings)

    try:
        if args.clear_recent:
            await service.history.clear()
            print("Recent scans cleared.")
            return 0

        if args.recent:
            _print_recent(await service.history.load())
            return 0

        if not args.mints:
            parser.error("at least one mint is required")

        exit_code = 0
        for raw_mint in args.mints:
            try:
                report = await service.scan(raw_mint)
            except Exception as e:
                if not isinstance(e, (ScanError, InvalidMintError)):
                    logger.error("Unexpected scan error", mint=raw_mint, error=str(e))
                exit_code = 1
                if args.json:
                    print(json.dumps({"mint": raw_mint, "error": user_message(e)}))
                else:
                    print(f"⚠️ Error: {raw_mint}\n{user_message(e)}\n")
                continue

            if args.json:
                print(report.model_dump_json())
            else:
                print(render_report(report.mint, report.result, settings.thresholds))
                print()

        return exit_code

    finally:
        await client.close()


def run() -> None:
    """Console script entry point."""
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        sys.exit(130)


if __name__ == "__main__":
    run()

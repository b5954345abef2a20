"""DexScreener pair source with cache-then-fetch lookups."""

from typing import Any

import httpx
import structlog
from pydantic import ValidationError

from ..cache.pair_cache import PairCache
from ..core.errors import PairNotFoundError, TransportError
from ..core.interfaces import PairSource
from ..core.types import PairSnapshot

logger = structlog.get_logger(__name__)


def map_dexscreener_pair(data: dict[str, Any], mint: str) -> PairSnapshot:
    """Map a DexScreener tokens response to its first pair.

    Args:
        data: Raw API response data
        mint: Token mint the response was requested for

    Returns:
        PairSnapshot of the first (usually most liquid) pair

    Raises:
        PairNotFoundError: If the response carries no usable pair
    """
    pairs = data.get("pairs") if isinstance(data, dict) else None
    if not isinstance(pairs, list) or not pairs or not isinstance(pairs[0], dict):
        raise PairNotFoundError(mint)

    try:
        return PairSnapshot.model_validate(pairs[0])
    except ValidationError as e:
        logger.warning("Unusable pair record", token_mint=mint, error=str(e))
        raise PairNotFoundError(mint) from e


class DexScreenerClient(PairSource):
    """DexScreener API pair source.

    No retries: a failed fetch surfaces as TransportError and the caller
    decides whether to try again.
    """

    def __init__(
        self,
        base_url: str = "https://api.dexscreener.com",
        session: httpx.AsyncClient | None = None,
        cache: PairCache | None = None,
        timeout: float = 10.0,
    ) -> None:
        """Initialize DexScreener client.

        Args:
            base_url: DexScreener API base URL
            session: Optional httpx client session
            cache: Optional response cache
            timeout: Request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.session = session or httpx.AsyncClient()
        self.cache = cache
        self.timeout = timeout

    async def _make_request(self, endpoint: str) -> Any:
        """Make a GET request and return the decoded JSON body.

        Raises:
            TransportError: On network errors, non-2xx statuses or bad JSON
        """
        url = f"{self.base_url}/{endpoint.lstrip('/')}"

        try:
            response = await self.session.get(
                url, headers={"Cache-Control": "no-store"}, timeout=self.timeout
            )
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            logger.warning(
                "HTTP error in DexScreener request",
                endpoint=endpoint,
                status_code=e.response.status_code,
            )
            raise TransportError(
                f"DexScreener returned {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            logger.warning(
                "Network error in DexScreener request", endpoint=endpoint, error=str(e)
            )
            raise TransportError(f"DexScreener unreachable: {e}") from e
        except ValueError as e:
            logger.warning("Invalid JSON from DexScreener", endpoint=endpoint)
            raise TransportError("DexScreener returned invalid JSON") from e

    async def fetch_pair(self, mint: str) -> PairSnapshot:
        """Return the first pair for a mint, from cache when fresh.

        Args:
            mint: Token mint address

        Returns:
            Pair snapshot

        Raises:
            PairNotFoundError: If DexScreener lists no pair for the mint
            TransportError: If DexScreener could not be reached
        """
        if self.cache is not None:
            cached = await self.cache.get(mint)
            if cached is not None:
                return cached

        data = await self._make_request(f"latest/dex/tokens/{mint}")
        try:
            snapshot = map_dexscreener_pair(data, mint)
        except PairNotFoundError:
            logger.info("Pair not found", token_mint=mint)
            raise

        if self.cache is not None:
            await self.cache.put(mint, snapshot)

        logger.info(
            "Fetched pair",
            token_mint=mint,
            pair_address=snapshot.pair_address,
            dex_id=snapshot.dex_id,
        )
        return snapshot

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.session.aclose()

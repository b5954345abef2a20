"""Tests for the DexScreener pair source."""

import httpx
import pytest
import respx

from rugscan.cache.pair_cache import PairCache
from rugscan.core.errors import PairNotFoundError, TransportError
from rugscan.data.dexscreener import DexScreenerClient, map_dexscreener_pair
from rugscan.persist.storage import SQLiteStore

MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
TOKENS_URL = f"https://api.dexscreener.com/latest/dex/tokens/{MINT}"


@pytest.fixture
def tokens_response() -> dict:
    """Sample DexScreener tokens response."""
    return {
        "schemaVersion": "1.0.0",
        "pairs": [
            {
                "chainId": "solana",
                "dexId": "raydium",
                "pairAddress": "HJPjoWUrhoZzkNfRpHuieeFk9WcZWjwy6PBjZ81ngndJ",
                "baseToken": {"address": MINT, "symbol": "TEST"},
                "quoteToken": {
                    "address": "So11111111111111111111111111111111111111112",
                    "symbol": "SOL",
                },
                "priceNative": "0.0002",
                "priceUsd": "0.03",
                "liquidity": {"usd": 30000.5, "base": 500000, "quote": 100},
                "fdv": 300000,
                "volume": {"m5": 1500, "h1": 12000},
                "txns": {"m5": {"buys": 25, "sells": 10}},
                "pairCreatedAt": 1700000000000,
            },
            {"dexId": "orca", "pairAddress": "second"},
        ],
    }


class TestMapDexScreenerPair:
    """Test response mapping."""

    def test_first_pair_is_used(self, tokens_response):
        """Test the first (most liquid) pair is mapped."""
        snap = map_dexscreener_pair(tokens_response, MINT)

        assert snap.dex_id == "raydium"
        assert snap.liquidity.usd == 30000.5
        assert snap.txns.m5.buys == 25

    @pytest.mark.parametrize(
        "data",
        [
            {"pairs": []},
            {"pairs": None},
            {"schemaVersion": "1.0.0"},
            {"pairs": ["not a pair"]},
            [],
        ],
    )
    def test_no_pairs_is_not_found(self, data):
        """Test empty or missing pairs raise PairNotFoundError."""
        with pytest.raises(PairNotFoundError) as exc_info:
            map_dexscreener_pair(data, MINT)
        assert exc_info.value.mint == MINT


class TestDexScreenerClient:
    """Test DexScreener client fetches."""

    def test_init(self):
        """Test DexScreenerClient initialization."""
        client = DexScreenerClient(base_url="https://api.dexscreener.com/", timeout=5.0)

        assert client.base_url == "https://api.dexscreener.com"
        assert client.timeout == 5.0
        assert client.cache is None

    @pytest.mark.asyncio
    @respx.mock
    async def test_fetch_pair(self, tokens_response):
        """Test a successful fetch."""
        route = respx.get(TOKENS_URL).mock(
            return_value=httpx.Response(200, json=tokens_response)
        )
        client = DexScreenerClient()

        snap = await client.fetch_pair(MINT)

        assert route.called
        assert snap.pair_address == "HJPjoWUrhoZzkNfRpHuieeFk9WcZWjwy6PBjZ81ngndJ"
        assert snap.fdv == 300000.0
        await client.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_no_pair_raises_not_found(self):
        """Test an empty pair list raises PairNotFoundError."""
        respx.get(TOKENS_URL).mock(
            return_value=httpx.Response(200, json={"pairs": None})
        )
        client = DexScreenerClient()

        with pytest.raises(PairNotFoundError):
            await client.fetch_pair(MINT)
        await client.close()

    @pytest.mark.asyncio
    @respx.mock
    @pytest.mark.parametrize("status_code", [404, 429, 500, 503])
    async def test_http_error_raises_transport_error(self, status_code):
        """Test non-success statuses raise TransportError."""
        respx.get(TOKENS_URL).mock(return_value=httpx.Response(status_code))
        client = DexScreenerClient()

        with pytest.raises(TransportError) as exc_info:
            await client.fetch_pair(MINT)

        assert exc_info.value.status_code == status_code
        await client.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_network_error_raises_transport_error(self):
        """Test connection failures raise TransportError without retrying."""
        route = respx.get(TOKENS_URL).mock(
            side_effect=httpx.ConnectError("connection refused")
        )
        client = DexScreenerClient()

        with pytest.raises(TransportError) as exc_info:
            await client.fetch_pair(MINT)

        assert exc_info.value.status_code is None
        assert route.call_count == 1
        await client.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_invalid_json_raises_transport_error(self):
        """Test a non-JSON body raises TransportError."""
        respx.get(TOKENS_URL).mock(return_value=httpx.Response(200, text="<html>"))
        client = DexScreenerClient()

        with pytest.raises(TransportError):
            await client.fetch_pair(MINT)
        await client.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_cache_prevents_second_request(self, tokens_response, tmp_path):
        """Test a cached pair is served without hitting the API."""
        route = respx.get(TOKENS_URL).mock(
            return_value=httpx.Response(200, json=tokens_response)
        )
        cache = PairCache(SQLiteStore(db_path=str(tmp_path / "cache.sqlite")))
        cache.init()
        client = DexScreenerClient(cache=cache)

        first = await client.fetch_pair(MINT)
        second = await client.fetch_pair(MINT)

        assert first == second
        assert route.call_count == 1
        await client.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_not_found_is_not_cached(self, tmp_path):
        """Test a missing pair is looked up again next time."""
        route = respx.get(TOKENS_URL).mock(
            return_value=httpx.Response(200, json={"pairs": []})
        )
        cache = PairCache(SQLiteStore(db_path=str(tmp_path / "cache.sqlite")))
        client = DexScreenerClient(cache=cache)

        for _ in range(2):
            with pytest.raises(PairNotFoundError):
                await client.fetch_pair(MINT)

        assert route.call_count == 2
        await client.close()

"""Core data types for the risk scanner."""

import math
from enum import StrEnum
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field


def coerce_number(value: Any) -> float:
    """Coerce an upstream value to a finite float, 0.0 when unusable."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def _coerce_count(value: Any) -> int:
    return int(max(0.0, coerce_number(value)))


def _coerce_text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _coerce_mapping(value: Any) -> Any:
    # Nested records arrive as dicts, as models, or as junk (null, lists, ...)
    if isinstance(value, (dict, BaseModel)):
        return value
    return {}


def _coerce_timestamp(value: Any) -> float | None:
    number = coerce_number(value)
    return number if number > 0 else None


Number = Annotated[float, BeforeValidator(coerce_number)]
Count = Annotated[int, BeforeValidator(_coerce_count)]
Text = Annotated[str, BeforeValidator(_coerce_text)]
Timestamp = Annotated[float | None, BeforeValidator(_coerce_timestamp)]

_RECORD_CONFIG = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)


class TokenInfo(BaseModel):
    """Base token identity as reported by the pair record."""

    model_config = _RECORD_CONFIG

    address: Text = Field(default="", description="Token mint address")
    symbol: Text = Field(default="", description="Token symbol")


class QuoteToken(BaseModel):
    """Quote token identity and its USD price."""

    model_config = _RECORD_CONFIG

    address: Text = Field(default="", description="Quote token mint address")
    symbol: Text = Field(default="", description="Quote token symbol")
    price_usd: Number = Field(
        default=0.0, alias="priceUsd", description="Quote token price in USD"
    )


class PairLiquidity(BaseModel):
    """Pool liquidity in its three reported denominations."""

    model_config = _RECORD_CONFIG

    usd: Number = Field(default=0.0, description="Liquidity in USD")
    base: Number = Field(default=0.0, description="Base token amount in pool")
    quote: Number = Field(default=0.0, description="Quote token amount in pool")


class PairVolume(BaseModel):
    """Trailing USD volume windows."""

    model_config = _RECORD_CONFIG

    m5: Number = Field(default=0.0, description="5-minute volume in USD")
    h1: Number = Field(default=0.0, description="1-hour volume in USD")


class TxnCounts(BaseModel):
    """Buy/sell transaction counts for one window."""

    model_config = _RECORD_CONFIG

    buys: Count = Field(default=0, description="Buy transactions")
    sells: Count = Field(default=0, description="Sell transactions")


class PairTxns(BaseModel):
    """Transaction counts by window."""

    model_config = _RECORD_CONFIG

    m5: Annotated[TxnCounts, BeforeValidator(_coerce_mapping)] = Field(
        default_factory=TxnCounts, description="Trailing 5-minute counts"
    )


class PairSnapshot(BaseModel):
    """Market snapshot of one trading pair.

    Field aliases follow the DexScreener pair schema, so a raw ``pairs[0]``
    record validates directly. Missing or malformed numbers become 0 and a
    missing creation time becomes ``None``; nothing downstream has to guard
    against the raw payload again.
    """

    model_config = _RECORD_CONFIG

    chain_id: Text = Field(default="", alias="chainId", description="Chain id")
    dex_id: Text = Field(default="", alias="dexId", description="DEX identifier")
    pair_address: Text = Field(
        default="", alias="pairAddress", description="Pair (pool) address"
    )
    base_token: Annotated[TokenInfo, BeforeValidator(_coerce_mapping)] = Field(
        default_factory=TokenInfo, alias="baseToken", description="Base token"
    )
    quote_token: Annotated[QuoteToken, BeforeValidator(_coerce_mapping)] = Field(
        default_factory=QuoteToken, alias="quoteToken", description="Quote token"
    )
    price_native: Number = Field(
        default=0.0, alias="priceNative", description="Base price in quote token"
    )
    price_usd: Number = Field(
        default=0.0, alias="priceUsd", description="Base price in USD"
    )
    liquidity: Annotated[PairLiquidity, BeforeValidator(_coerce_mapping)] = Field(
        default_factory=PairLiquidity, description="Pool liquidity"
    )
    fdv: Number = Field(default=0.0, description="Fully-diluted valuation in USD")
    volume: Annotated[PairVolume, BeforeValidator(_coerce_mapping)] = Field(
        default_factory=PairVolume, description="Trailing volume"
    )
    txns: Annotated[PairTxns, BeforeValidator(_coerce_mapping)] = Field(
        default_factory=PairTxns, description="Transaction counts"
    )
    pair_created_at: Timestamp = Field(
        default=None,
        alias="pairCreatedAt",
        description="Pair creation time in epoch milliseconds",
    )

    @property
    def transactions_5m(self) -> int:
        """Total buys and sells over the trailing 5 minutes."""
        return self.txns.m5.buys + self.txns.m5.sells


class DisplayUnit(StrEnum):
    """Unit a liquidity figure is displayed in."""

    SOL = "SOL"
    USD = "USD"


class LiquidityEstimate(BaseModel):
    """Normalized liquidity used for scoring and display."""

    model_config = ConfigDict(frozen=True)

    sol_equivalent: float = Field(description="Liquidity in SOL-like units")
    display_amount: float = Field(description="Liquidity amount for display")
    display_unit: DisplayUnit = Field(description="Unit of display_amount")
    display_symbol: str = Field(description="Label shown next to the amount")


class RiskLabel(StrEnum):
    """Severity label derived from the total score."""

    SAFE = "Safe"
    RISKY = "Risky"
    RUG_VIBES = "Rug Vibes"


class Trigger(StrEnum):
    """Named risk conditions, in evaluation order."""

    THIN_LIQUIDITY = "thin-liquidity"
    FDV_LIQUIDITY_SKEWED = "fdv-liquidity-skewed"
    LOW_RECENT_ACTIVITY = "low-recent-activity"
    WEAK_5M_VOLUME = "weak-5m-volume"
    FRESH_LAUNCH = "fresh-launch"
    VOLUME_LIQUIDITY_IMBALANCE = "volume-liquidity-imbalance"
    SELL_PRESSURE = "sell-pressure"


class PairAnalysis(BaseModel):
    """Secondary metrics shown alongside the score."""

    model_config = ConfigDict(frozen=True, ser_json_inf_nan="strings")

    pair_age_hours: float = Field(description="Pair age in hours, inf if unknown")
    volume_to_liquidity_ratio_1h: float = Field(
        description="1-hour volume divided by USD liquidity"
    )
    volume_1h_usd: float = Field(description="1-hour volume in USD")
    buys_5m: int = Field(description="Buys over the last 5 minutes")
    sells_5m: int = Field(description="Sells over the last 5 minutes")
    sell_ratio_5m: float = Field(description="sells / (buys + sells), 0 if none")


class ScoreResult(BaseModel):
    """Outcome of scoring one pair snapshot."""

    model_config = ConfigDict(frozen=True, ser_json_inf_nan="strings")

    score: int = Field(ge=0, description="Sum of trigger weights")
    label: RiskLabel = Field(description="Severity label")
    triggers: tuple[Trigger, ...] = Field(description="Triggers in evaluation order")
    liquidity: LiquidityEstimate = Field(description="Normalized liquidity")
    fdv_to_liquidity_ratio: float = Field(
        description="FDV divided by USD liquidity, inf when liquidity is zero"
    )
    analysis: PairAnalysis = Field(description="Secondary metrics")
    liquidity_usd: float = Field(description="Reported USD liquidity")
    fdv: float = Field(description="Fully-diluted valuation in USD")
    volume_5m_usd: float = Field(description="5-minute volume in USD")
    transactions_5m: int = Field(description="5-minute transaction count")


class CacheEntry(BaseModel):
    """One cached pair snapshot with its absolute expiry."""

    key: str = Field(description="Token identifier")
    payload: PairSnapshot = Field(description="Cached snapshot")
    expires_at: float = Field(description="Expiry as epoch seconds")


class RecentScan(BaseModel):
    """History entry for a completed scan."""

    mint: str = Field(description="Token mint address")
    label: RiskLabel = Field(description="Label at scan time")
    score: int = Field(description="Score at scan time")
    ts: int = Field(description="Scan time in epoch milliseconds")

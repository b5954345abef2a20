"""Liquidity normalization into a SOL-equivalent unit."""

import math

from ..core.types import DisplayUnit, LiquidityEstimate, PairSnapshot

SOL_MINT = "So11111111111111111111111111111111111111112"
SOL_SYMBOLS = frozenset({"SOL", "WSOL"})

# Quote prices above this are taken as a real USD price rather than a memecoin
# quote asset priced near zero.
QUOTE_PRICE_AS_SOL_FLOOR = 10.0


def is_sol_quote(address: str, symbol: str) -> bool:
    """Return True if the quote asset is SOL or wrapped SOL."""
    if address and address == SOL_MINT:
        return True
    return bool(symbol) and symbol.upper() in SOL_SYMBOLS


def _positive_or_zero(value: float) -> float:
    return value if math.isfinite(value) and value > 0 else 0.0


def normalize_liquidity(
    snap: PairSnapshot, default_sol_price_usd: float = 150.0
) -> LiquidityEstimate:
    """Normalize a pair's liquidity for scoring and display.

    Upstream records report liquidity inconsistently: sometimes in USD,
    sometimes only as a quote-token amount. Each figure falls back through
    the others so that the scoring unit stays SOL-equivalent whichever one
    was reported.

    Args:
        snap: Pair snapshot
        default_sol_price_usd: SOL price used when the quote price is unusable

    Returns:
        LiquidityEstimate with all magnitudes finite and non-negative
    """
    quote = snap.quote_token
    sol_pool = is_sol_quote(quote.address, quote.symbol)
    quote_price_usd = quote.price_usd

    if (sol_pool and quote_price_usd > 0) or quote_price_usd > QUOTE_PRICE_AS_SOL_FLOOR:
        sol_price_usd = quote_price_usd
    else:
        sol_price_usd = default_sol_price_usd

    liq = snap.liquidity
    if liq.quote > 0:
        quote_amount = liq.quote
    elif liq.base > 0 and snap.price_native > 0:
        quote_amount = liq.base * snap.price_native
    else:
        quote_amount = 0.0

    usd_liquidity = liq.usd if liq.usd > 0 else 0.0
    if usd_liquidity <= 0 and quote_amount > 0 and quote_price_usd > 0:
        usd_liquidity = quote_amount * quote_price_usd
    if usd_liquidity <= 0 and liq.base > 0 and snap.price_usd > 0:
        usd_liquidity = liq.base * snap.price_usd

    if sol_pool and quote_amount > 0:
        sol_equivalent = quote_amount
    elif usd_liquidity > 0:
        sol_equivalent = usd_liquidity / sol_price_usd
    else:
        sol_equivalent = 0.0

    if sol_pool:
        display_unit = DisplayUnit.SOL
        display_amount = quote_amount if quote_amount > 0 else sol_equivalent
        display_symbol = "SOL"
    else:
        display_unit = DisplayUnit.USD
        display_amount = usd_liquidity
        display_symbol = quote.symbol.upper() or "USD"

    return LiquidityEstimate(
        sol_equivalent=_positive_or_zero(sol_equivalent),
        display_amount=_positive_or_zero(display_amount),
        display_unit=display_unit,
        display_symbol=display_symbol,
    )

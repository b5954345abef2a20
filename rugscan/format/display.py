"""Display formatting for scan results."""

import math
import time

from ..config.settings import ScoringThresholds
from ..core.types import DisplayUnit, RiskLabel, ScoreResult, Trigger

LABEL_EMOJI = {
    RiskLabel.RUG_VIBES: "\U0001F534",
    RiskLabel.RISKY: "\U0001F7E0",
    RiskLabel.SAFE: "\U0001F7E2",
}

NO_FLAGS = "No major red flags detected."


def format_usd_short(value: float) -> str:
    """Format a USD amount with a short-scale suffix."""
    if not math.isfinite(value) or value <= 0:
        return "--"
    if value >= 1_000_000_000:
        return f"${value / 1_000_000_000:.1f}b"
    if value >= 1_000_000:
        return f"${value / 1_000_000:.1f}m"
    if value >= 1_000:
        return f"${value / 1_000:.1f}k"
    return f"${value:.0f}"


def format_token_amount(value: float) -> str:
    """Format a token amount with a short-scale suffix."""
    if not math.isfinite(value) or value <= 0:
        return "--"
    if value >= 1_000_000:
        return f"{value / 1_000_000:.1f}m"
    if value >= 1_000:
        return f"{value / 1_000:.1f}k"
    return f"{value:.2f}"


def format_multiple(value: float) -> str:
    """Format a ratio as a multiple, capped at >1000x."""
    if math.isnan(value) or value <= 0:
        return "--"
    if value >= 1000:
        return ">1000x"
    if value >= 10:
        return f"{value:.0f}x"
    return f"{value:.1f}x"


def format_percent(value: float) -> str:
    """Format a fraction as a whole percentage."""
    if not math.isfinite(value):
        return "--"
    # JS-style rounding, halves go up
    return f"{math.floor(value * 100 + 0.5)}%"


def format_age(hours: float) -> str:
    """Format a pair age given in hours."""
    if not math.isfinite(hours):
        return "--"
    if hours < 1:
        return "<1h"
    if hours < 24:
        return f"{hours:.1f}h"
    return f"{hours / 24:.1f}d"


def format_buy_sell(buys: int, sells: int) -> str:
    """Summarize buys and sells with the sell share."""
    total = buys + sells
    if total <= 0:
        return "--"
    return f"{buys}/{sells} ({format_percent(sells / total)} sells)"


def time_ago(timestamp_ms: float, now_ms: float | None = None) -> str:
    """Describe an epoch-millisecond timestamp relative to now."""
    if now_ms is None:
        now_ms = time.time() * 1000
    seconds = int((now_ms - timestamp_ms) // 1000)
    if seconds < 60:
        return "just now"
    if seconds < 3600:
        return f"{seconds // 60}m ago"
    hours = seconds // 3600
    if hours < 24:
        return f"{hours}h ago"
    return f"{hours // 24}d ago"


def trigger_description(trigger: Trigger, thresholds: ScoringThresholds) -> str:
    """Describe one trigger, embedding its configured threshold."""
    descriptions = {
        Trigger.THIN_LIQUIDITY: f"thin liquidity (<{thresholds.min_liquidity_sol:g} SOL)",
        Trigger.FDV_LIQUIDITY_SKEWED: "FDV/liquidity skewed",
        Trigger.LOW_RECENT_ACTIVITY: "low recent activity",
        Trigger.WEAK_5M_VOLUME: "weak 5m volume",
        Trigger.FRESH_LAUNCH: f"fresh launch (<{thresholds.min_pair_age_hours:g}h old)",
        Trigger.VOLUME_LIQUIDITY_IMBALANCE: "1h volume vs liquidity imbalance",
        Trigger.SELL_PRESSURE: "sell pressure in last 5m",
    }
    return descriptions.get(trigger, str(trigger))


def describe_triggers(
    triggers: tuple[Trigger, ...] | list[Trigger],
    thresholds: ScoringThresholds | None = None,
) -> str:
    """Join trigger descriptions into one explanatory line."""
    if not triggers:
        return NO_FLAGS
    thresholds = thresholds or ScoringThresholds()
    return ", ".join(trigger_description(t, thresholds) for t in triggers)


def dexscreener_url(mint: str) -> str:
    """DexScreener page for a Solana mint."""
    return f"https://dexscreener.com/solana/{mint}"


def pumpfun_url(mint: str) -> str:
    """pump.fun page for a mint."""
    return f"https://pump.fun/{mint}"


def format_badge(label: RiskLabel) -> str:
    """Emoji badge followed by the label text."""
    return f"{LABEL_EMOJI[label]} {label.value}"


def format_liquidity(result: ScoreResult) -> tuple[str, str]:
    """Return the (label, value) pair for the liquidity stat."""
    liq = result.liquidity
    if liq.display_unit == DisplayUnit.USD:
        return f"LP ({liq.display_symbol})", format_usd_short(liq.display_amount)
    return "LP (SOL)", format_token_amount(liq.display_amount)


def render_report(
    mint: str,
    result: ScoreResult,
    thresholds: ScoringThresholds | None = None,
) -> str:
    """Render a plain-text report card for a scored pair."""
    liq_label, liq_value = format_liquidity(result)
    analysis = result.analysis

    rows = [
        (liq_label, liq_value),
        ("FDV", format_usd_short(result.fdv)),
        ("Vol (5m)", format_usd_short(result.volume_5m_usd)),
        ("Tx (5m)", str(result.transactions_5m)),
        ("Pair age", format_age(analysis.pair_age_hours)),
        ("FDV / Liquidity", format_multiple(result.fdv_to_liquidity_ratio)),
        ("1h volume vs LP", format_multiple(analysis.volume_to_liquidity_ratio_1h)),
        ("5m buys / sells", format_buy_sell(analysis.buys_5m, analysis.sells_5m)),
    ]
    width = max(len(name) for name, _ in rows)

    lines = [
        f"{format_badge(result.label)} (score {result.score})",
        describe_triggers(result.triggers, thresholds),
        "",
    ]
    lines.extend(f"  {name.ljust(width)}  {value}" for name, value in rows)
    lines.extend(
        [
            "",
            f"  {dexscreener_url(mint)}",
            f"  {pumpfun_url(mint)}",
        ]
    )
    return "\n".join(lines)

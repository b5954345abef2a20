"""Multi-factor risk scoring for pair snapshots."""

import math
import time
from collections.abc import Callable

import structlog

from ..config.settings import ScoringThresholds
from ..core.types import (
    PairAnalysis,
    PairSnapshot,
    RiskLabel,
    ScoreResult,
    Trigger,
)
from .liquidity import normalize_liquidity

logger = structlog.get_logger(__name__)

TRIGGER_WEIGHTS: dict[Trigger, int] = {
    Trigger.THIN_LIQUIDITY: 3,
    Trigger.FDV_LIQUIDITY_SKEWED: 2,
    Trigger.LOW_RECENT_ACTIVITY: 1,
    Trigger.WEAK_5M_VOLUME: 1,
    Trigger.FRESH_LAUNCH: 2,
    Trigger.VOLUME_LIQUIDITY_IMBALANCE: 1,
    Trigger.SELL_PRESSURE: 1,
}

RUG_VIBES_SCORE = 5
RISKY_SCORE = 3

MS_PER_HOUR = 3_600_000


def label_for_score(score: int) -> RiskLabel:
    """Map a total score to its severity label."""
    if score >= RUG_VIBES_SCORE:
        return RiskLabel.RUG_VIBES
    if score >= RISKY_SCORE:
        return RiskLabel.RISKY
    return RiskLabel.SAFE


def pair_age_hours(created_at_ms: float | None, now_ms: float) -> float:
    """Return pair age in hours, inf when the creation time is unusable."""
    if created_at_ms is None:
        return math.inf
    age_ms = now_ms - created_at_ms
    if age_ms <= 0:
        return math.inf
    return age_ms / MS_PER_HOUR


class RiskScorer:
    """Scores pair snapshots against configurable thresholds.

    The scorer holds no mutable state, so one instance can be shared by any
    number of concurrent callers.
    """

    def __init__(
        self,
        thresholds: ScoringThresholds | None = None,
        now_fn: Callable[[], float] | None = None,
    ) -> None:
        """Initialize risk scorer.

        Args:
            thresholds: Scoring thresholds (defaults if omitted)
            now_fn: Optional function returning epoch seconds (for testing)
        """
        self.thresholds = thresholds or ScoringThresholds()
        self._now_fn = now_fn or time.time

    def score(self, snap: PairSnapshot) -> ScoreResult:
        """Score a pair snapshot.

        Args:
            snap: Pair snapshot

        Returns:
            ScoreResult with triggers in evaluation order
        """
        t = self.thresholds
        liquidity = normalize_liquidity(snap, t.default_sol_price_usd)

        liq_usd = snap.liquidity.usd
        fdv = snap.fdv
        vol_5m = snap.volume.m5
        vol_1h = snap.volume.h1
        buys_5m = snap.txns.m5.buys
        sells_5m = snap.txns.m5.sells
        tx_5m = snap.transactions_5m

        fdv_to_liq = fdv / liq_usd if liq_usd > 0 else math.inf
        vol_to_liq = vol_1h / liq_usd if liq_usd > 0 else 0.0
        sell_ratio = sells_5m / tx_5m if tx_5m > 0 else 0.0
        age_hours = pair_age_hours(snap.pair_created_at, self._now_fn() * 1000)

        checks = [
            (Trigger.THIN_LIQUIDITY, liquidity.sol_equivalent < t.min_liquidity_sol),
            (Trigger.FDV_LIQUIDITY_SKEWED, fdv_to_liq > t.max_fdv_to_liquidity),
            (Trigger.LOW_RECENT_ACTIVITY, tx_5m < t.min_transactions_5m),
            (Trigger.WEAK_5M_VOLUME, vol_5m < t.min_volume_5m_usd),
            # inf age never compares below the threshold
            (Trigger.FRESH_LAUNCH, age_hours < t.min_pair_age_hours),
            (
                Trigger.VOLUME_LIQUIDITY_IMBALANCE,
                vol_to_liq > t.volume_liquidity_alert
                and vol_1h > t.min_volume_5m_usd,
            ),
            (
                Trigger.SELL_PRESSURE,
                tx_5m >= t.min_trades_for_pressure
                and sell_ratio > t.sell_pressure_ratio,
            ),
        ]

        score = 0
        triggers: list[Trigger] = []
        for trigger, hit in checks:
            if hit:
                score += TRIGGER_WEIGHTS[trigger]
                triggers.append(trigger)

        label = label_for_score(score)

        logger.debug(
            "Pair scored",
            pair_address=snap.pair_address,
            score=score,
            label=label.value,
            triggers=[trigger.value for trigger in triggers],
        )

        return ScoreResult(
            score=score,
            label=label,
            triggers=tuple(triggers),
            liquidity=liquidity,
            fdv_to_liquidity_ratio=fdv_to_liq,
            analysis=PairAnalysis(
                pair_age_hours=age_hours,
                volume_to_liquidity_ratio_1h=vol_to_liq,
                volume_1h_usd=vol_1h,
                buys_5m=buys_5m,
                sells_5m=sells_5m,
                sell_ratio_5m=sell_ratio,
            ),
            liquidity_usd=liq_usd,
            fdv=fdv,
            volume_5m_usd=vol_5m,
            transactions_5m=tx_5m,
        )

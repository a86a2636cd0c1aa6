"""Multi-timeframe confluence — pure functions, no I/O.

The higher timeframe supplies a directional bias and its most recent zones;
a lower-timeframe marker becomes an execution signal only when it agrees with
that bias and the lower timeframe's last close sits inside a matching zone.
"""

from typing import Optional, Sequence

from app.smc.models import (
    ConfluenceResult,
    ExecutionSignal,
    Marker,
    TimeframeAnalysis,
    Zone,
)


def derive_bias(htf: TimeframeAnalysis) -> str:
    """Return ``"bullish"``, ``"bearish"`` or ``"neutral"``.

    CHOCH and BOS carry equal weight.  When they disagree, bullish wins
    because it is evaluated first.
    """
    choch_dir = htf.choch.direction if htf.choch else None
    bos_dir = htf.bos.direction if htf.bos else None

    if choch_dir == "bullish" or bos_dir == "bullish":
        return "bullish"
    if choch_dir == "bearish" or bos_dir == "bearish":
        return "bearish"
    return "neutral"


def latest_zone(zones: Sequence[Zone], kind: str) -> Optional[Zone]:
    """Return the last-collected zone of *kind*, or ``None``.

    "Latest" means last in collection order, not nearest to current price.
    """
    for zone in reversed(zones):
        if zone.kind == kind:
            return zone
    return None


def _qualify(
    marker: Marker,
    trigger_price: float,
    candidates: list[tuple[Optional[Zone], str]],
) -> list[ExecutionSignal]:
    signals: list[ExecutionSignal] = []
    for zone, reason in candidates:
        if zone is not None and zone.contains(trigger_price):
            signals.append(
                ExecutionSignal(marker=marker, reason=reason, trigger_price=trigger_price)
            )
    return signals


def combine_timeframes(
    htf: TimeframeAnalysis,
    ltf: TimeframeAnalysis,
) -> ConfluenceResult:
    """Filter lower-timeframe markers through higher-timeframe context.

    Args:
        htf: Analysis of the higher timeframe (bias and zones).
        ltf: Analysis of the lower timeframe (markers and trigger price).

    Returns:
        ``ConfluenceResult``.  A marker inside both an FVG and an order
        block yields one execution signal per zone kind.  An empty signal
        list is a normal outcome.
    """
    bias = derive_bias(htf)
    if bias == "neutral" or not ltf.candles:
        return ConfluenceResult(higher_timeframe_bias=bias)

    bull_fvg = latest_zone(htf.fvgs, "FVG_bullish")
    bear_fvg = latest_zone(htf.fvgs, "FVG_bearish")
    bull_ob = latest_zone(htf.order_blocks, "OB_bullish")
    bear_ob = latest_zone(htf.order_blocks, "OB_bearish")

    # Close of the lower timeframe's last candle at the time of combining.
    trigger_price = ltf.candles[-1].close

    signals: list[ExecutionSignal] = []
    for marker in ltf.markers:
        if marker.side == "buy" and bias == "bullish":
            signals.extend(_qualify(marker, trigger_price, [
                (bull_fvg, "HTF bullish bias + LTF buy inside HTF bullish FVG"),
                (bull_ob, "HTF bullish bias + LTF buy inside HTF bullish order block"),
            ]))
        elif marker.side == "sell" and bias == "bearish":
            signals.extend(_qualify(marker, trigger_price, [
                (bear_fvg, "HTF bearish bias + LTF sell inside HTF bearish FVG"),
                (bear_ob, "HTF bearish bias + LTF sell inside HTF bearish order block"),
            ]))

    return ConfluenceResult(higher_timeframe_bias=bias, execution_signals=signals)

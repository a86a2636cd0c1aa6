"""Entry marker synthesis for a single timeframe — pure functions, no I/O."""

from typing import Optional, Sequence

from app.market.models import Candle
from app.smc.models import CharacterChange, LiquiditySweep, Marker

BUY_COLOR = "#00ff88"
SELL_COLOR = "#ff3366"


def buy_marker(time: int) -> Marker:
    return Marker(
        time=time,
        side="buy",
        position="belowBar",
        color=BUY_COLOR,
        shape="arrowUp",
        text="BUY",
    )


def sell_marker(time: int) -> Marker:
    return Marker(
        time=time,
        side="sell",
        position="aboveBar",
        color=SELL_COLOR,
        shape="arrowDown",
        text="SELL",
    )


def synthesize_markers(
    candles: Sequence[Candle],
    choch: Optional[CharacterChange],
    sweep: Optional[LiquiditySweep],
) -> list[Marker]:
    """Build entry markers from one timeframe's structural events.

    * buy when the CHOCH is bullish and liquidity was swept below;
    * sell when the CHOCH is bearish and liquidity was swept above.

    Markers are always stamped with the latest candle's time, whenever
    the underlying events occurred.
    """
    if not candles or choch is None or sweep is None:
        return []

    time = candles[-1].time
    markers: list[Marker] = []
    if choch.direction == "bullish" and sweep.direction == "low":
        markers.append(buy_marker(time))
    if choch.direction == "bearish" and sweep.direction == "high":
        markers.append(sell_marker(time))
    return markers

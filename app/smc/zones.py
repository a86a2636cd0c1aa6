"""Fair value gap and order block collection — pure functions.

Both collectors scan the same window at the tail of the sequence,
indices ``[max(2, n - depth), n)``, and return zones in chronological
order.  Zones are never retired once price trades back through them.
"""

from typing import Sequence

from app.market.models import Candle
from app.smc.models import Zone

DEFAULT_ZONE_DEPTH = 60


def _scan_start(n: int, depth: int) -> int:
    return max(2, n - depth)


def collect_fair_value_gaps(
    candles: Sequence[Candle],
    depth: int = DEFAULT_ZONE_DEPTH,
) -> list[Zone]:
    """Collect three-candle imbalances.

    For each index ``i`` the candle two bars back is compared with candle
    ``i``:

    * bullish gap when ``candles[i-2].high < candles[i].low``, zone
      ``[candles[i-2].high, candles[i].low]``;
    * bearish gap when ``candles[i-2].low > candles[i].high``, zone
      ``[candles[i].high, candles[i-2].low]``.

    Zones carry the time of candle ``i``.
    """
    zones: list[Zone] = []
    n = len(candles)
    for i in range(_scan_start(n, depth), n):
        first, third = candles[i - 2], candles[i]
        if first.high < third.low:
            zones.append(
                Zone(kind="FVG_bullish", low=first.high, high=third.low, time=third.time)
            )
        elif first.low > third.high:
            zones.append(
                Zone(kind="FVG_bearish", low=third.high, high=first.low, time=third.time)
            )
    return zones


def collect_order_blocks(
    candles: Sequence[Candle],
    depth: int = DEFAULT_ZONE_DEPTH,
) -> list[Zone]:
    """Collect order blocks from adjacent candle pairs.

    A bullish order block is a bearish candle immediately followed by a
    bullish candle closing above its high; the bearish candle's range
    becomes the zone.  Bearish order blocks mirror this.  Zones carry the
    time of the order-block candle itself.
    """
    zones: list[Zone] = []
    n = len(candles)
    for i in range(_scan_start(n, depth), n):
        prev, last = candles[i - 1], candles[i]
        prev_bearish = prev.close < prev.open
        prev_bullish = prev.close > prev.open
        last_bullish = last.close > last.open
        last_bearish = last.close < last.open

        if prev_bearish and last_bullish and last.close > prev.high:
            zones.append(
                Zone(kind="OB_bullish", low=prev.low, high=prev.high, time=prev.time)
            )
        elif prev_bullish and last_bearish and last.close < prev.low:
            zones.append(
                Zone(kind="OB_bearish", low=prev.low, high=prev.high, time=prev.time)
            )
    return zones

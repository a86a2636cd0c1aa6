"""Structural event detection on the latest candles — pure functions, no I/O.

Each detector looks only at the tail of an oldest-first candle sequence and
reports the single most recent event, or ``None``.  Short sequences never
raise; they simply produce no event.
"""

from typing import Optional, Sequence

from app.market.models import Candle
from app.smc.models import CharacterChange, LiquiditySweep, StructureBreak


def detect_bos(candles: Sequence[Candle]) -> Optional[StructureBreak]:
    """Detect a break of structure on the last three candles.

    With ``a, b, d`` the third-, second- and last candle:

    * bullish when ``d`` takes out ``a``'s high and ``b`` did not;
    * bearish when ``d`` takes out ``a``'s low and ``b`` did not.

    Bullish is checked first.  The event level is ``a``'s broken extreme.
    """
    if len(candles) < 3:
        return None

    a, b, d = candles[-3], candles[-2], candles[-1]

    if d.high > a.high and b.high <= a.high:
        return StructureBreak(direction="bullish", time=d.time, level=a.high)
    if d.low < a.low and b.low >= a.low:
        return StructureBreak(direction="bearish", time=d.time, level=a.low)
    return None


def detect_choch(candles: Sequence[Candle]) -> Optional[CharacterChange]:
    """Detect a change of character on the last four candles.

    Uses ``prev`` (fourth from last), ``swing`` (second from last) and
    ``last``.  The third-from-last candle plays no part.

    * bullish: ``swing`` dipped below ``prev``'s low and ``last`` closed the
      move by exceeding ``swing``'s high;
    * bearish: ``swing`` rose above ``prev``'s high and ``last`` broke
      below ``swing``'s low.
    """
    if len(candles) < 4:
        return None

    prev, swing, last = candles[-4], candles[-2], candles[-1]

    if last.high > swing.high and swing.low < prev.low:
        return CharacterChange(direction="bullish", time=last.time)
    if last.low < swing.low and swing.high > prev.high:
        return CharacterChange(direction="bearish", time=last.time)
    return None


def detect_liquidity_sweep(candles: Sequence[Candle]) -> Optional[LiquiditySweep]:
    """Detect a liquidity sweep on the last three of at least four candles.

    * ``"high"``: the last candle wicked above the third-from-last high but
      closed under the previous candle's close;
    * ``"low"``: the mirror on lows, closing above the previous close.
    """
    if len(candles) < 4:
        return None

    a, b, d = candles[-3], candles[-2], candles[-1]

    if d.high > a.high and d.close < b.close:
        return LiquiditySweep(direction="high", level=a.high, time=d.time)
    if d.low < a.low and d.close > b.close:
        return LiquiditySweep(direction="low", level=a.low, time=d.time)
    return None

"""Single-timeframe analysis — runs every detector over one candle sequence."""

from typing import Sequence

from app.market.models import Candle
from app.smc.markers import synthesize_markers
from app.smc.models import TimeframeAnalysis
from app.smc.structure import detect_bos, detect_choch, detect_liquidity_sweep
from app.smc.zones import DEFAULT_ZONE_DEPTH, collect_fair_value_gaps, collect_order_blocks


def analyze_candles(
    candles: Sequence[Candle],
    zone_depth: int = DEFAULT_ZONE_DEPTH,
) -> TimeframeAnalysis:
    """Detect structure, zones and markers on an oldest-first sequence.

    Pure: the same candles always produce an equal ``TimeframeAnalysis``.
    """
    candles = list(candles)
    bos = detect_bos(candles)
    choch = detect_choch(candles)
    sweep = detect_liquidity_sweep(candles)

    return TimeframeAnalysis(
        candles=candles,
        markers=synthesize_markers(candles, choch, sweep),
        bos=bos,
        choch=choch,
        sweep=sweep,
        fvgs=collect_fair_value_gaps(candles, zone_depth),
        order_blocks=collect_order_blocks(candles, zone_depth),
    )

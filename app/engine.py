"""Infinity Signals — signal engine (per-request orchestration).

Connects the candle aggregator, per-timeframe analysis and the confluence
combiner.  Each call fetches fresh candles for both timeframes concurrently,
analyses them independently, then combines the two results.
"""

import asyncio
import logging
import time
from typing import Optional

from app.config import Config
from app.market.aggregator import CandleAggregator
from app.market.providers import get_providers
from app.smc.analysis import analyze_candles
from app.smc.confluence import combine_timeframes
from app.smc.models import SignalReport, TimeframeAnalysis

logger = logging.getLogger("infinity")


def _data_source(higher_source: str, lower_source: str) -> str:
    if higher_source == lower_source:
        return higher_source
    return f"{higher_source}/{lower_source}"


class SignalEngine:
    """Builds one multi-timeframe ``SignalReport`` per call.

    Holds no per-request state; concurrent calls do not interfere.

    Args:
        config: Application configuration (defaults and zone depth).
        aggregator: A ``CandleAggregator`` (or compatible duck-type / mock).
            Built from ``config.providers`` when omitted.
    """

    def __init__(
        self,
        config: Config,
        aggregator: Optional[CandleAggregator] = None,
    ) -> None:
        self._config = config
        self._aggregator = aggregator or CandleAggregator(
            get_providers(config.providers)
        )

    async def _run_timeframe(
        self,
        symbol: str,
        interval: str,
        limit: int,
    ) -> tuple[TimeframeAnalysis, str]:
        candles, source = await self._aggregator.fetch(symbol, interval, limit)
        return analyze_candles(candles, self._config.zone_depth), source

    async def generate_report(
        self,
        symbol: Optional[str] = None,
        higher_interval: Optional[str] = None,
        lower_interval: Optional[str] = None,
        higher_limit: Optional[int] = None,
        lower_limit: Optional[int] = None,
    ) -> SignalReport:
        """Fetch, analyse and combine both timeframes for *symbol*.

        Omitted arguments fall back to the configured defaults.

        Raises:
            AllProvidersExhausted: when either timeframe cannot be fetched.
        """
        cfg = self._config
        symbol = (symbol or cfg.default_symbol).upper()
        higher_interval = higher_interval or cfg.higher_interval
        lower_interval = lower_interval or cfg.lower_interval

        (htf, htf_source), (ltf, ltf_source) = await asyncio.gather(
            self._run_timeframe(
                symbol, higher_interval, higher_limit or cfg.higher_limit,
            ),
            self._run_timeframe(
                symbol, lower_interval, lower_limit or cfg.lower_limit,
            ),
        )

        confluence = combine_timeframes(htf, ltf)

        logger.info(
            "%s %s/%s: bias %s, %d execution signal(s)",
            symbol, higher_interval, lower_interval,
            confluence.higher_timeframe_bias,
            len(confluence.execution_signals),
        )

        return SignalReport(
            symbol=symbol,
            higher_interval=higher_interval,
            lower_interval=lower_interval,
            data_source=_data_source(htf_source, ltf_source),
            higher_timeframe=htf,
            lower_timeframe=ltf,
            confluence=confluence,
            generated_at=int(time.time() * 1000),
        )

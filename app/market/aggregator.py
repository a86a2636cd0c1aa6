"""Candle source aggregator — sequential failover across data providers.

Providers are tried strictly in priority order.  The first one that yields
at least one candle wins and no further provider is contacted.  Transport
failures, non-success statuses, exchange error codes and empty results are
all soft failures that advance to the next provider.
"""

import logging
from typing import Optional, Sequence

import httpx

from app.market.models import Candle
from app.market.providers import CandleProvider

logger = logging.getLogger("infinity")


class ProviderError(Exception):
    """Base class for soft, recoverable-by-fallback provider failures."""

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider


class ProviderTransportError(ProviderError):
    """Network failure, non-success status, or unusable response body."""


class ProviderEmptyResult(ProviderError):
    """The response parsed cleanly but held no candles."""

    def __init__(self, provider: str) -> None:
        super().__init__(provider, "response contained no candles")


class AllProvidersExhausted(Exception):
    """Every configured provider failed for one fetch.

    ``last_error`` is the most recent soft failure only, not an aggregate.
    """

    def __init__(
        self,
        symbol: str,
        interval: str,
        last_error: Optional[ProviderError],
    ) -> None:
        detail = str(last_error) if last_error else "no providers configured"
        super().__init__(
            f"All data providers failed for {symbol} {interval} (last error: {detail})"
        )
        self.symbol = symbol
        self.interval = interval
        self.last_error = last_error


class CandleAggregator:
    """Fetches normalized candles from an ordered list of providers."""

    def __init__(self, providers: Sequence[CandleProvider]) -> None:
        self._providers = list(providers)

    @property
    def provider_names(self) -> list[str]:
        return [p.name for p in self._providers]

    async def _fetch_from(
        self,
        provider: CandleProvider,
        symbol: str,
        interval: str,
        limit: int,
    ) -> list[Candle]:
        """Run one provider request and map its body.

        Raises ``ProviderTransportError`` or ``ProviderEmptyResult``.
        """
        request = provider.build_request(symbol, interval, limit)
        try:
            async with httpx.AsyncClient() as client:
                resp = await client.get(request.url, params=request.params)
            resp.raise_for_status()
            candles = provider.parse_response(resp.json(), limit)
        except httpx.HTTPError as exc:
            raise ProviderTransportError(provider.name, str(exc)) from exc
        except (ValueError, KeyError, TypeError, IndexError, AttributeError) as exc:
            raise ProviderTransportError(
                provider.name, f"unusable response: {exc}"
            ) from exc

        if not candles:
            raise ProviderEmptyResult(provider.name)
        return candles

    async def fetch(
        self,
        symbol: str,
        interval: str,
        limit: int,
    ) -> tuple[list[Candle], str]:
        """Fetch candles for *symbol*/*interval* from the first working provider.

        Args:
            symbol: Exchange-style ticker, e.g. ``"BTCUSDT"``.
            interval: Service interval, e.g. ``"4h"``.
            limit: Number of candles to request.

        Returns:
            ``(candles, provider_name)`` with candles sorted oldest-first.

        Raises:
            AllProvidersExhausted: when no provider yields a candle.
        """
        last_error: Optional[ProviderError] = None

        for provider in self._providers:
            try:
                candles = await self._fetch_from(provider, symbol, interval, limit)
            except ProviderError as exc:
                logger.warning(
                    "Provider %s failed for %s %s: %s",
                    provider.name, symbol, interval, exc,
                )
                last_error = exc
                continue

            logger.info(
                "Fetched %d %s %s candles from %s",
                len(candles), symbol, interval, provider.name,
            )
            return sorted(candles, key=lambda c: c.time), provider.name

        logger.error("All providers exhausted for %s %s", symbol, interval)
        raise AllProvidersExhausted(symbol, interval, last_error)

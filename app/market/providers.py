"""Candle data providers — request builders and response mappers.

Each provider is a ``CandleProvider`` record pairing a request builder with a
response mapper.  The exchange-specific interval and symbol tables live here
as plain data; the builders translate through them and the mappers turn raw
JSON into ``Candle`` objects.  No I/O happens in this module.
"""

from dataclasses import dataclass
from typing import Any, Callable

from app.market.models import Candle, ProviderRequest

# Quote assets recognised when a provider wants ``BASE-QUOTE`` symbols.
# Longest suffixes first so ``FDUSD`` wins over ``USD``.
_QUOTE_ASSETS: tuple[str, ...] = (
    "FDUSD", "USDT", "USDC", "BUSD", "TUSD", "BTC", "ETH", "BNB", "EUR", "USD",
)


@dataclass(frozen=True)
class CandleProvider:
    """A named data source and its request/response translation."""

    name: str
    build_request: Callable[[str, str, int], ProviderRequest]
    parse_response: Callable[[Any, int], list[Candle]]


def _translate(table: dict[str, str], interval: str) -> str:
    """Map *interval* through *table*; unknown intervals pass through."""
    return table.get(interval, interval)


def dashed_symbol(symbol: str) -> str:
    """Convert ``BTCUSDT`` to ``BTC-USDT``.

    Symbols that already contain a dash, or whose quote asset is not
    recognised, are returned unchanged.
    """
    if "-" in symbol:
        return symbol
    for quote in _QUOTE_ASSETS:
        if symbol.endswith(quote) and len(symbol) > len(quote):
            return f"{symbol[:-len(quote)]}-{quote}"
    return symbol


def _row_to_candle(time_s: int, o, h, l, c) -> Candle:
    return Candle(
        time=int(time_s),
        open=float(o),
        high=float(h),
        low=float(l),
        close=float(c),
    )


# ── Binance ──────────────────────────────────────────────────────────────

BINANCE_URL = "https://api.binance.com/api/v3/klines"

# Binance already speaks the service vocabulary.
BINANCE_INTERVALS: dict[str, str] = {}


def build_binance_request(symbol: str, interval: str, limit: int) -> ProviderRequest:
    return ProviderRequest(
        url=BINANCE_URL,
        params={
            "symbol": symbol,
            "interval": _translate(BINANCE_INTERVALS, interval),
            "limit": limit,
        },
    )


def parse_binance_response(payload: Any, limit: int) -> list[Candle]:
    """Map Binance kline arrays ``[openTime ms, o, h, l, c, ...]``."""
    return [
        _row_to_candle(int(row[0]) // 1000, row[1], row[2], row[3], row[4])
        for row in payload
    ]


# ── Bybit ────────────────────────────────────────────────────────────────

BYBIT_URL = "https://api.bybit.com/v5/market/kline"

BYBIT_INTERVALS: dict[str, str] = {
    "1m": "1",
    "5m": "5",
    "15m": "15",
    "30m": "30",
    "1h": "60",
    "4h": "240",
    "1d": "D",
    "1w": "W",
    "1M": "M",
}


def build_bybit_request(symbol: str, interval: str, limit: int) -> ProviderRequest:
    return ProviderRequest(
        url=BYBIT_URL,
        params={
            "category": "spot",
            "symbol": symbol,
            "interval": _translate(BYBIT_INTERVALS, interval),
            "limit": limit,
        },
    )


def parse_bybit_response(payload: Any, limit: int) -> list[Candle]:
    """Map Bybit v5 ``result.list`` rows (newest first).

    A non-zero ``retCode`` is an exchange-side error even on HTTP 200.
    """
    if payload.get("retCode") != 0:
        raise ValueError(
            f"Bybit error {payload.get('retCode')}: {payload.get('retMsg', '')}"
        )
    return [
        _row_to_candle(int(row[0]) // 1000, row[1], row[2], row[3], row[4])
        for row in payload["result"]["list"]
    ]


# ── OKX ──────────────────────────────────────────────────────────────────

OKX_URL = "https://www.okx.com/api/v5/market/candles"

OKX_INTERVALS: dict[str, str] = {
    "1h": "1H",
    "4h": "4H",
    "1d": "1D",
    "1w": "1W",
    "1M": "1M",
}


def build_okx_request(symbol: str, interval: str, limit: int) -> ProviderRequest:
    return ProviderRequest(
        url=OKX_URL,
        params={
            "instId": dashed_symbol(symbol),
            "bar": _translate(OKX_INTERVALS, interval),
            "limit": limit,
        },
    )


def parse_okx_response(payload: Any, limit: int) -> list[Candle]:
    """Map OKX ``data`` rows ``[ts ms, o, h, l, c, ...]`` (newest first)."""
    if payload.get("code") != "0":
        raise ValueError(f"OKX error {payload.get('code')}: {payload.get('msg', '')}")
    return [
        _row_to_candle(int(row[0]) // 1000, row[1], row[2], row[3], row[4])
        for row in payload["data"]
    ]


# ── KuCoin ───────────────────────────────────────────────────────────────

KUCOIN_URL = "https://api.kucoin.com/api/v1/market/candles"

# KuCoin has no monthly bar; "1M" passes through and the exchange rejects it.
KUCOIN_INTERVALS: dict[str, str] = {
    "1m": "1min",
    "5m": "5min",
    "15m": "15min",
    "30m": "30min",
    "1h": "1hour",
    "4h": "4hour",
    "1d": "1day",
    "1w": "1week",
}


def build_kucoin_request(symbol: str, interval: str, limit: int) -> ProviderRequest:
    # No limit parameter; the mapper truncates instead.
    return ProviderRequest(
        url=KUCOIN_URL,
        params={
            "symbol": dashed_symbol(symbol),
            "type": _translate(KUCOIN_INTERVALS, interval),
        },
    )


def parse_kucoin_response(payload: Any, limit: int) -> list[Candle]:
    """Map KuCoin rows ``[ts s, open, close, high, low, ...]`` (newest first).

    Only the *limit* most recent rows are kept.
    """
    if payload.get("code") != "200000":
        raise ValueError(
            f"KuCoin error {payload.get('code')}: {payload.get('msg', '')}"
        )
    return [
        _row_to_candle(row[0], row[1], row[3], row[4], row[2])
        for row in payload["data"][:limit]
    ]


# ── Registry ─────────────────────────────────────────────────────────────

PROVIDER_REGISTRY: dict[str, CandleProvider] = {
    "binance": CandleProvider("binance", build_binance_request, parse_binance_response),
    "bybit": CandleProvider("bybit", build_bybit_request, parse_bybit_response),
    "okx": CandleProvider("okx", build_okx_request, parse_okx_response),
    "kucoin": CandleProvider("kucoin", build_kucoin_request, parse_kucoin_response),
}


def get_providers(names) -> list[CandleProvider]:
    """Look up providers by registry key, preserving the given order.

    Raises ``KeyError`` if a provider name is not registered.
    """
    providers: list[CandleProvider] = []
    for name in names:
        if name not in PROVIDER_REGISTRY:
            raise KeyError(
                f"Unknown provider '{name}'. "
                f"Available: {', '.join(PROVIDER_REGISTRY.keys())}"
            )
        providers.append(PROVIDER_REGISTRY[name])
    return providers

"""Market data models — the normalized candle shape shared by every provider."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Candle:
    """A single candlestick bar.

    ``time`` is the bar open time in whole seconds since the Unix epoch.
    """

    time: int
    open: float
    high: float
    low: float
    close: float


@dataclass(frozen=True)
class ProviderRequest:
    """An outgoing provider call: endpoint plus query parameters."""

    url: str
    params: dict = field(default_factory=dict)

"""Market-structure data models — typed representations of analysis outputs."""

from dataclasses import dataclass, field
from typing import Optional

from app.market.models import Candle


@dataclass(frozen=True)
class StructureBreak:
    """Break of structure: the latest candle broke the swing at ``level``."""

    direction: str  # "bullish" or "bearish"
    time: int
    level: float


@dataclass(frozen=True)
class CharacterChange:
    """Change of character on the latest candle."""

    direction: str  # "bullish" or "bearish"
    time: int


@dataclass(frozen=True)
class LiquiditySweep:
    """Wick beyond a prior extreme that closed back inside."""

    direction: str  # "high" or "low"
    level: float
    time: int


@dataclass(frozen=True)
class Zone:
    """A price zone (fair value gap or order block) bounded by low/high."""

    kind: str  # "FVG_bullish", "FVG_bearish", "OB_bullish", "OB_bearish"
    low: float
    high: float
    time: int

    def contains(self, price: float) -> bool:
        """Inclusive on both bounds."""
        return self.low <= price <= self.high


@dataclass(frozen=True)
class Marker:
    """A chart marker suggesting an entry on the latest candle."""

    time: int
    side: str  # "buy" or "sell"
    position: str  # "belowBar" or "aboveBar"
    color: str
    shape: str
    text: str


@dataclass(frozen=True)
class ExecutionSignal:
    """A lower-timeframe marker confirmed by higher-timeframe context."""

    marker: Marker
    reason: str
    trigger_price: float


@dataclass(frozen=True)
class TimeframeAnalysis:
    """Everything detected on one timeframe's candle sequence."""

    candles: list[Candle]
    markers: list[Marker] = field(default_factory=list)
    bos: Optional[StructureBreak] = None
    choch: Optional[CharacterChange] = None
    sweep: Optional[LiquiditySweep] = None
    fvgs: list[Zone] = field(default_factory=list)
    order_blocks: list[Zone] = field(default_factory=list)


@dataclass(frozen=True)
class ConfluenceResult:
    """Higher-timeframe bias plus the execution-worthy lower-timeframe markers."""

    higher_timeframe_bias: str  # "bullish", "bearish" or "neutral"
    execution_signals: list[ExecutionSignal] = field(default_factory=list)


@dataclass(frozen=True)
class SignalReport:
    """The complete multi-timeframe response for one symbol."""

    symbol: str
    higher_interval: str
    lower_interval: str
    data_source: str
    higher_timeframe: TimeframeAnalysis
    lower_timeframe: TimeframeAnalysis
    confluence: ConfluenceResult
    generated_at: int  # epoch milliseconds

"""Internal API routers — /signals and /backtest endpoints.

No business logic. Delegates to the ``SignalEngine`` and serialises its
report.
"""

import logging
from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from app.config import SUPPORTED_INTERVALS, load_config
from app.engine import SignalEngine
from app.market.aggregator import AllProvidersExhausted

logger = logging.getLogger("infinity")
router = APIRouter()

_engine: Optional[SignalEngine] = None  # Set via configure_routers()


def configure_routers(engine: Optional[SignalEngine] = None) -> None:
    """Inject dependencies from the application startup.

    Args:
        engine: A ``SignalEngine`` instance (or duck-type for tests).
            ``None`` resets to a lazily built default.
    """
    global _engine  # noqa: PLW0603
    _engine = engine


def _get_engine() -> SignalEngine:
    global _engine  # noqa: PLW0603
    if _engine is None:
        _engine = SignalEngine(load_config())
    return _engine


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


# ── Endpoints ────────────────────────────────────────────────────────────


@router.get("/signals")
async def get_signals(
    symbol: Optional[str] = Query(default=None, min_length=1),
    higher: Optional[str] = Query(default=None),
    lower: Optional[str] = Query(default=None),
    higher_limit: Optional[int] = Query(default=None, ge=1, le=1000),
    lower_limit: Optional[int] = Query(default=None, ge=1, le=1000),
):
    """Return the multi-timeframe structure analysis and confluence verdict."""
    for name, interval in (("higher", higher), ("lower", lower)):
        if interval is not None and interval not in SUPPORTED_INTERVALS:
            return _error(
                400,
                f"Unsupported {name} interval '{interval}'. "
                f"Supported: {', '.join(SUPPORTED_INTERVALS)}",
            )

    try:
        report = await _get_engine().generate_report(
            symbol=symbol,
            higher_interval=higher,
            lower_interval=lower,
            higher_limit=higher_limit,
            lower_limit=lower_limit,
        )
    except AllProvidersExhausted as exc:
        logger.error("Signal request failed: %s", exc)
        return _error(500, str(exc))

    return asdict(report)


@router.get("/backtest")
async def get_backtest():
    """Placeholder: backtesting is not offered by this service."""
    return {
        "status": "not_implemented",
        "message": "Backtesting is not available; signals are computed live.",
        "trades": [],
    }

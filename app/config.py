"""Infinity Signals — application configuration.

Loads .env variables into a typed config object.
Validates provider names, limits and default intervals on startup.
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from app.market.providers import PROVIDER_REGISTRY

SUPPORTED_INTERVALS: tuple[str, ...] = (
    "1m", "5m", "15m", "30m", "1h", "4h", "1d", "1w", "1M",
)

_DEFAULT_PROVIDERS = "binance,bybit,okx,kucoin"


@dataclass(frozen=True)
class Config:
    """Typed configuration loaded from environment variables."""

    providers: tuple[str, ...]  # priority order, first is tried first
    default_symbol: str
    higher_interval: str
    lower_interval: str
    higher_limit: int
    lower_limit: int
    zone_depth: int
    cors_origins: tuple[str, ...]
    log_level: str
    port: int


def _split_csv(raw: str) -> tuple[str, ...]:
    return tuple(part.strip() for part in raw.split(",") if part.strip())


def _positive_int(name: str, default: str) -> int:
    raw = os.environ.get(name, default)
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


def _interval(name: str, default: str) -> str:
    value = os.environ.get(name, default)
    if value not in SUPPORTED_INTERVALS:
        raise ValueError(
            f"{name} must be one of {', '.join(SUPPORTED_INTERVALS)}, got {value!r}"
        )
    return value


def load_config(env_path: str | None = None) -> Config:
    """Load configuration from environment variables.

    Every variable has a default.  Raises ``ValueError`` with a message
    naming the offending variable when a value is invalid.
    """
    load_dotenv(dotenv_path=env_path)

    providers = _split_csv(os.environ.get("DATA_PROVIDERS", _DEFAULT_PROVIDERS))
    unknown = [p for p in providers if p not in PROVIDER_REGISTRY]
    if unknown:
        raise ValueError(
            f"DATA_PROVIDERS contains unknown provider(s): {', '.join(unknown)}"
        )
    if not providers:
        raise ValueError("DATA_PROVIDERS must name at least one provider")

    return Config(
        providers=providers,
        default_symbol=os.environ.get("DEFAULT_SYMBOL", "BTCUSDT").upper(),
        higher_interval=_interval("HIGHER_INTERVAL", "4h"),
        lower_interval=_interval("LOWER_INTERVAL", "15m"),
        higher_limit=_positive_int("HIGHER_LIMIT", "200"),
        lower_limit=_positive_int("LOWER_LIMIT", "300"),
        zone_depth=_positive_int("ZONE_DEPTH", "60"),
        cors_origins=_split_csv(os.environ.get("CORS_ORIGINS", "*")),
        log_level=os.environ.get("LOG_LEVEL", "INFO"),
        port=_positive_int("PORT", "4000"),
    )

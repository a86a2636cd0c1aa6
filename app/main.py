"""Infinity Signals — application entry point.

Boots the FastAPI server and provides the CLI entry point for serving the
API or running a one-off scan.
"""

import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from app.api.routers import router
from app.config import SUPPORTED_INTERVALS, load_config

logger = logging.getLogger("infinity")

_config = load_config()

app = FastAPI(title="Infinity Signals API", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(_config.cors_origins),
    allow_methods=["GET"],
    allow_headers=["*"],
)
app.include_router(router)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log method, path, status and elapsed time for every request."""
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(
        "%s %s -> %d (%.1f ms)",
        request.method, request.url.path, response.status_code, elapsed_ms,
    )
    return response


@app.get("/health")
async def health():
    """Liveness probe."""
    return {"status": "ok"}


# ── CLI ──────────────────────────────────────────────────────────────────


def _build_parser():
    """Build the CLI argument parser."""
    import argparse

    parser = argparse.ArgumentParser(description="Infinity Signals SMC engine")
    parser.add_argument(
        "--mode",
        choices=["serve", "scan"],
        default="serve",
        help="Run the API server or print one report (default: serve)",
    )
    parser.add_argument("--host", default="0.0.0.0", help="Bind address (serve)")
    parser.add_argument("--port", type=int, help="Bind port (serve, default: PORT)")
    parser.add_argument("--symbol", help="Ticker to scan, e.g. BTCUSDT")
    parser.add_argument(
        "--higher",
        choices=SUPPORTED_INTERVALS,
        help="Higher timeframe interval (scan)",
    )
    parser.add_argument(
        "--lower",
        choices=SUPPORTED_INTERVALS,
        help="Lower timeframe interval (scan)",
    )
    return parser


def _run_cli() -> None:
    """Parse CLI arguments and dispatch to the appropriate mode."""
    args = _build_parser().parse_args()

    config = load_config()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    if args.mode == "scan":
        _run_scan(config, args.symbol, args.higher, args.lower)
    else:
        _run_server(config, args.host, args.port or config.port)


def _run_server(config, host: str, port: int) -> None:
    """Serve the API with uvicorn."""
    import uvicorn

    from app.api.routers import configure_routers
    from app.engine import SignalEngine

    configure_routers(engine=SignalEngine(config))
    logger.info(
        "Serving on http://%s:%d with providers %s",
        host, port, ", ".join(config.providers),
    )
    uvicorn.run(app, host=host, port=port, log_level=config.log_level.lower())


def _run_scan(config, symbol, higher, lower) -> None:
    """Compute one report and print it as JSON."""
    import asyncio
    import json
    import sys
    from dataclasses import asdict

    from app.engine import SignalEngine
    from app.market.aggregator import AllProvidersExhausted

    engine = SignalEngine(config)
    try:
        report = asyncio.run(
            engine.generate_report(
                symbol=symbol, higher_interval=higher, lower_interval=lower,
            )
        )
    except AllProvidersExhausted as exc:
        logger.error("Scan failed: %s", exc)
        sys.exit(1)

    print(json.dumps(asdict(report), indent=2))


if __name__ == "__main__":
    _run_cli()

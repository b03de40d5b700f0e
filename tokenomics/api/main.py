"""FastAPI application for the tokenomics engine.

Serves a single in-memory engine for simulation. Engine errors map to
4xx responses carrying the error's stable code; a conservation violation is
an internal fault and maps to 500.
"""

import logging
import os

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from tokenomics import __version__
from tokenomics.api.endpoints import router
from tokenomics.errors import (
    BucketLocked,
    ConservationViolation,
    EngineError,
    InsufficientBalance,
    InsufficientLiquidity,
    Overflow,
    SlippageExceeded,
    Unauthorized,
)

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("TOKENOMICS_HOST", "0.0.0.0")
PORT = int(os.environ.get("TOKENOMICS_PORT", "8000"))
DEBUG = os.environ.get("TOKENOMICS_DEBUG", "false").lower() in ("true", "1", "yes")
LOG_LEVEL = os.environ.get("TOKENOMICS_LOG_LEVEL", "INFO").upper()

logger = structlog.get_logger()

# Errors not listed here are client errors (400)
STATUS_BY_ERROR: dict[type[EngineError], int] = {
    Unauthorized: 403,
    BucketLocked: 403,
    InsufficientBalance: 409,
    InsufficientLiquidity: 409,
    SlippageExceeded: 409,
    Overflow: 422,
    ConservationViolation: 500,
}


def status_for(error: EngineError) -> int:
    """HTTP status for an engine error (most specific class wins)."""
    for cls in type(error).__mro__:
        if cls in STATUS_BY_ERROR:
            return STATUS_BY_ERROR[cls]
    return 400


def configure_logging(level: str = LOG_LEVEL) -> None:
    """Configure structlog for console output at ``level``."""
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level, logging.INFO)),
    )


app = FastAPI(
    title="Tokenomics Engine",
    description="Bonding-curve mint, constant-product pool and treasury-owned liquidity",
    version=__version__,
)


@app.exception_handler(EngineError)
async def engine_error_handler(_request: Request, exc: EngineError) -> JSONResponse:
    """Turn a rejected engine operation into a JSON error body."""
    status = status_for(exc)
    if status >= 500:
        logger.error("engine_fault", code=exc.code, detail=str(exc))
    else:
        logger.info("operation_rejected", code=exc.code, detail=str(exc))
    return JSONResponse(status_code=status, content={"code": exc.code, "detail": str(exc)})


app.include_router(router)


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


def run() -> None:
    """Run the engine API server.

    Configuration via environment variables:
    - TOKENOMICS_HOST: Host to bind to (default: 0.0.0.0)
    - TOKENOMICS_PORT: Port to bind to (default: 8000)
    - TOKENOMICS_DEBUG: Enable debug/reload mode (default: false)
    - TOKENOMICS_LOG_LEVEL: Log level (default: INFO)
    - TOKENOMICS_CONFIG: Path to a JSON engine configuration
    - TOKENOMICS_AUTHORITY: Identity allowed to unwind treasury buckets
    """
    configure_logging(LOG_LEVEL)
    uvicorn.run(
        "tokenomics.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()

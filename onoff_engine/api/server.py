"""
FastAPI Server for the OnOff Engine.

Receives OneLogin lifecycle event webhooks and runs them through the
dispatch pipeline. The endpoint always acknowledges a parseable batch,
however many of its events failed; failures are visible in the logs only.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from .. import __version__
from ..config import EngineConfig, load_config
from ..errors import ConfigurationError, StructuralError
from ..workflows import EventDispatcher, build_dispatcher

logger = logging.getLogger(__name__)

ACK_BODY = {"status": "ok"}

# Global components (initialized on startup)
engine_config: Optional[EngineConfig] = None
dispatcher: Optional[EventDispatcher] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    global engine_config

    logger.info("Loading OnOff Engine configuration")
    engine_config = load_config()
    logging.getLogger("onoff_engine").setLevel(engine_config.logging_level)

    yield

    logger.info("Shutting down OnOff Engine API server")


app = FastAPI(
    title="OnOff Engine API",
    description="Identity lifecycle webhook receiver that syncs GitHub team membership",
    version=__version__,
    lifespan=lifespan
)


def get_dispatcher() -> EventDispatcher:
    """Build the dispatcher on first use and reuse it afterwards."""
    global dispatcher, engine_config

    if dispatcher is None:
        if engine_config is None:
            engine_config = load_config()
        dispatcher = build_dispatcher(engine_config)
        logger.info(f"Dispatch pipeline ready (mock_mode={engine_config.mock_mode})")
    return dispatcher


def server_error(message: str) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": message})


@app.get("/")
async def root():
    """Root endpoint."""
    return {"message": "OnOff Engine API", "version": __version__, "status": "running"}


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "components": {
            "config": engine_config is not None,
            "dispatcher": dispatcher is not None,
        },
        "mock_mode": engine_config.mock_mode if engine_config else None,
    }


@app.post("/events")
async def receive_events(request: Request):
    """
    Process a batch of OneLogin lifecycle events.

    Returns a fixed acknowledgment once the batch parses, or a 500 if the
    payload is malformed or the pipeline cannot be configured.
    """
    body = await request.body()

    try:
        pipeline = get_dispatcher()
    except ConfigurationError as e:
        logger.error(f"Cannot process events: {e}")
        return server_error(str(e))

    try:
        report = await run_in_threadpool(pipeline.handle_batch, body)
    except StructuralError as e:
        logger.error(f"Rejected event batch: {e}")
        return server_error(str(e))

    logger.info(f"Acknowledged batch of {report.total} events")
    return ACK_BODY


def start_server(host: str = "0.0.0.0", port: int = 8000, reload: bool = False):
    """Start the FastAPI server."""
    uvicorn.run(
        "onoff_engine.api.server:app",
        host=host,
        port=port,
        reload=reload,
        log_level="info"
    )


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    start_server()

"""MedSync API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map MedSyncError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - One sync engine per app: built and started in lifespan, shut down on exit
      so no settle or simulator callback outlives the process

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Engine and analyst on app.state, not module globals: tests swap them per case
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from medsync.api.error_handlers import register_error_handlers
from medsync.api.routes import analysis, health, network, sync
from medsync.config import get_settings
from medsync.infrastructure.anthropic_client import ResilientAnthropicClient
from medsync.infrastructure.observability import setup_logging
from medsync.infrastructure.seed_loader import load_network
from medsync.services.network_analyst import NetworkAnalyst
from medsync.services.sync_engine import InventorySyncEngine

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    network = load_network(settings.seed_file, settings.history_capacity)
    engine = InventorySyncEngine.from_settings(settings, network)
    engine.start()
    app.state.engine = engine
    app.state.analyst = NetworkAnalyst(
        ResilientAnthropicClient(
            api_key=settings.anthropic_api_key,
            max_retries=settings.anthropic_max_retries,
            base_delay_ms=settings.anthropic_base_delay_ms,
            max_delay_ms=settings.anthropic_max_delay_ms,
            timeout_seconds=settings.anthropic_timeout_seconds,
        ),
        model=settings.analysis_model,
        max_tokens=settings.analysis_max_tokens,
        timeout_seconds=settings.anthropic_timeout_seconds,
    )
    logger.info("MedSync API started")
    yield
    engine.shutdown()
    logger.info("MedSync API shutting down")


app = FastAPI(title="MedSync API", version="1.0.0", lifespan=lifespan)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

app.include_router(health.router)
app.include_router(network.router)
app.include_router(sync.router)
app.include_router(analysis.router)

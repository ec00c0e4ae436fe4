"""regcounter API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map RegCounterError → structured JSON responses
    - Engine initialized (load or rebuild) before the app accepts requests;
      a missing log folder aborts startup
    - On shutdown the scheduler stops first, then the table is persisted

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Initialization runs in a worker thread: a full rebuild reads every log
      file and must not block the event loop
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from starlette.concurrency import run_in_threadpool

from regcounter.api.error_handlers import register_error_handlers
from regcounter.api.routes import health, registrations
from regcounter.config import get_settings
from regcounter.infrastructure.daily_scheduler import DailyUpdateScheduler
from regcounter.infrastructure.observability import setup_logging
from regcounter.services.engine_provider import init_engine

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    engine = await run_in_threadpool(init_engine, settings)

    scheduler = None
    if settings.scheduler_enabled:
        scheduler = DailyUpdateScheduler(engine, at=settings.daily_update_time)
        scheduler.start()
    logger.info("regcounter API started")
    yield
    logger.info("regcounter API shutting down")
    if scheduler is not None:
        await run_in_threadpool(scheduler.stop)
    await run_in_threadpool(engine.shutdown)


app = FastAPI(title="regcounter API", version="1.0.0", lifespan=lifespan)

# Routes
app.include_router(health.router)
app.include_router(registrations.router)

register_error_handlers(app)

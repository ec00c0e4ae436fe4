"""Health & Readiness Probes — liveness and readiness endpoints for container orchestration.

Invariants:
    - GET /api/v1/health/ always returns 200 if process is up (liveness)
    - GET /api/v1/health/ready returns 503 unless the engine is READY (readiness)
    - Readiness reads the lifecycle state without the table lock, so it answers
      immediately even while a rebuild or daily update holds the table

Design Decisions:
    - Separate liveness/readiness: a long startup rebuild keeps the process alive
      but out of the load balancer
"""

import logging

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from regcounter.core.domain_types import EngineState
from regcounter.services import engine_provider

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    """Basic liveness probe. Returns 200 if the process is up."""
    return {
        "status": "healthy",
        "service": "regcounter",
        "version": "1.0.0",
    }


@router.get("/ready")
async def readiness_check():
    """Readiness probe: the engine must have loaded or rebuilt its table."""
    engine = engine_provider.engine
    state = engine.state if engine else EngineState.UNINITIALIZED
    if state is not EngineState.READY:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "state": state.value},
        )
    return {"status": "ready", "state": state.value}

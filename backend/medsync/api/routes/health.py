"""Health & Readiness Probes — liveness and readiness endpoints for container orchestration.

Invariants:
    - GET /health/ always returns 200 if process is up (liveness)
    - GET /health/ready returns 503 until the sync engine is running (readiness)
"""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from medsync.api.dependencies import get_engine
from medsync.services.sync_engine import InventorySyncEngine

router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    """Basic liveness probe. Returns 200 if the process is up."""
    return {
        "status": "healthy",
        "service": "medsync-api",
        "version": "1.0.0",
    }


@router.get("/ready")
async def readiness_check(engine: InventorySyncEngine = Depends(get_engine)):
    """Readiness probe — the engine must be bound to the loop and not shut down."""
    if not engine.is_running:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "reason": "engine_not_running"},
        )
    return {
        "status": "ready",
        "checks": {
            "engine": "running",
            "facilities": len(engine.network.facilities),
        },
    }

"""Sync Routes — connectivity and context toggles, queue status, activity log.

Invariants:
    - Toggles are externally driven; nothing here probes the real network
    - GET /logs returns newest first
"""

from fastapi import APIRouter, Depends, Query

from medsync.api.dependencies import get_engine
from medsync.core.domain_types import LogSeverity
from medsync.schemas.inventory import (
    ConnectivityUpdate, ContextUpdate, SyncStatusResponse,
)
from medsync.services.sync_engine import InventorySyncEngine

router = APIRouter(prefix="/api/v1/sync", tags=["sync"])


def _status(engine: InventorySyncEngine) -> SyncStatusResponse:
    return SyncStatusResponse(
        connectivity=engine.connectivity,
        context=engine.context,
        pending_count=engine.pending_count,
        sync_scheduled=engine.sync_scheduled,
        simulator_active=engine.simulator_active,
    )


@router.get("/status", response_model=SyncStatusResponse)
async def get_status(engine: InventorySyncEngine = Depends(get_engine)):
    return _status(engine)


@router.put("/connectivity", response_model=SyncStatusResponse)
async def put_connectivity(
    body: ConnectivityUpdate, engine: InventorySyncEngine = Depends(get_engine),
):
    engine.set_connectivity(body.online)
    return _status(engine)


@router.put("/context", response_model=SyncStatusResponse)
async def put_context(
    body: ContextUpdate, engine: InventorySyncEngine = Depends(get_engine),
):
    engine.set_context(body.context)
    return _status(engine)


@router.get("/logs")
async def get_logs(
    limit: int | None = Query(None, ge=1, le=1000),
    severity: LogSeverity | None = Query(None),
    engine: InventorySyncEngine = Depends(get_engine),
):
    if severity is not None:
        entries = engine.logs.by_severity(severity)[:limit]
    else:
        entries = engine.logs.entries(limit)
    return {"logs": [e.to_dict() for e in entries]}

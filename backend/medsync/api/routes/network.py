"""Network Routes — tree snapshot, aggregates, and inventory mutations.

Invariants:
    - Reads return JSON snapshots of the engine's current tree
    - Mutations delegate to the engine; unknown ids yield applied=False (no-op),
      only GET lookups raise ResourceNotFoundError (404)
    - GET /census is sorted by date (aggregate_census itself is unordered)
"""

from fastapi import APIRouter, Depends

from medsync.api.dependencies import get_engine
from medsync.core.census import aggregate_item_trend, sorted_census
from medsync.core.domain_types import SupplyCategory
from medsync.core.errors import ErrorContext, ResourceNotFoundError
from medsync.core.network_snapshot import facility_to_snapshot, network_to_snapshot
from medsync.schemas.inventory import (
    CensusUpsert, MutationResponse, SpecialistDelta, StockDelta,
)
from medsync.services.sync_engine import InventorySyncEngine

router = APIRouter(prefix="/api/v1/network", tags=["network"])

_ITEM_PATH = "/facilities/{facility_id}/departments/{department_id}/items/{item_id}"


@router.get("")
async def get_network(engine: InventorySyncEngine = Depends(get_engine)):
    return network_to_snapshot(engine.network)


@router.get("/facilities/{facility_id}")
async def get_facility(
    facility_id: str, engine: InventorySyncEngine = Depends(get_engine),
):
    facility = engine.network.find_facility(facility_id)
    if facility is None:
        raise ResourceNotFoundError(
            "Facility", facility_id, ErrorContext(facility_id=facility_id),
        )
    return facility_to_snapshot(facility)


@router.get("/census")
async def get_census(engine: InventorySyncEngine = Depends(get_engine)):
    """Network-wide patient census per date, chronological."""
    return {
        "series": [
            {"date": date, "count": count}
            for date, count in sorted_census(engine.network)
        ],
    }


@router.get("/trends/{category}")
async def get_trend(
    category: SupplyCategory, engine: InventorySyncEngine = Depends(get_engine),
):
    points = aggregate_item_trend(engine.network, category)
    return {
        "category": category.value,
        "series": [
            {
                "timestamp": p.timestamp.isoformat(),
                "value": p.value,
                "kind": p.kind.value,
            }
            for p in points
        ],
    }


@router.post(f"{_ITEM_PATH}/delta", response_model=MutationResponse)
async def post_stock_delta(
    facility_id: str, department_id: str, item_id: str, body: StockDelta,
    engine: InventorySyncEngine = Depends(get_engine),
):
    quantity = engine.apply_delta(facility_id, department_id, item_id, body.delta)
    return MutationResponse(applied=quantity is not None, value=quantity)


@router.post(f"{_ITEM_PATH}/restock", response_model=MutationResponse)
async def post_restock(
    facility_id: str, department_id: str, item_id: str,
    engine: InventorySyncEngine = Depends(get_engine),
):
    quantity = engine.restock_to_capacity(facility_id, department_id, item_id)
    return MutationResponse(applied=quantity is not None, value=quantity)


@router.post(
    "/facilities/{facility_id}/departments/{department_id}/specialists",
    response_model=MutationResponse,
)
async def post_specialist_delta(
    facility_id: str, department_id: str, body: SpecialistDelta,
    engine: InventorySyncEngine = Depends(get_engine),
):
    count = engine.update_specialist_count(facility_id, department_id, body.delta)
    return MutationResponse(applied=count is not None, value=count)


@router.post("/facilities/{facility_id}/census", response_model=MutationResponse)
async def post_census(
    facility_id: str, body: CensusUpsert,
    engine: InventorySyncEngine = Depends(get_engine),
):
    applied = engine.upsert_census(facility_id, body.count, body.date)
    return MutationResponse(applied=applied, value=body.count if applied else None)

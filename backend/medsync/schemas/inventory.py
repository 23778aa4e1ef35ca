"""Inventory Schemas — request/response models for the inventory and sync routes.

Invariants:
    - StockDelta / SpecialistDelta accept any integer; clamping happens in the store
    - CensusUpsert.count >= 0; date is an ISO calendar date or omitted (today)
"""

from pydantic import BaseModel, Field

from medsync.core.domain_types import Connectivity, OperatingContext
from medsync.schemas.seed import ISO_DATE_PATTERN


class StockDelta(BaseModel):
    delta: int


class SpecialistDelta(BaseModel):
    delta: int


class CensusUpsert(BaseModel):
    count: int = Field(ge=0)
    date: str | None = Field(None, pattern=ISO_DATE_PATTERN)


class ConnectivityUpdate(BaseModel):
    online: bool


class ContextUpdate(BaseModel):
    context: OperatingContext


class MutationResponse(BaseModel):
    """applied=False means an id did not resolve (the write was a no-op)."""
    applied: bool
    value: int | None = None


class SyncStatusResponse(BaseModel):
    connectivity: Connectivity
    context: OperatingContext
    pending_count: int
    sync_scheduled: bool
    simulator_active: bool


class AnalysisResponse(BaseModel):
    analysis: str

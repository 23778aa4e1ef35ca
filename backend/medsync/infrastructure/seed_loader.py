"""Seed Loader — builds the initial Network from bootstrap data.

Invariants:
    - Seed data is validated by NetworkSeed before any record is built
    - History backfill must already be chronological; it is truncated to capacity
    - Any validation failure surfaces as SeedDataError (never a half-built network)
"""

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from medsync.core.domain_types import (
    DepartmentId, FacilityId, HISTORY_CAPACITY, ItemId,
)
from medsync.core.errors import ErrorContext, SeedDataError
from medsync.core.history_buffer import backfill
from medsync.core.network_model import (
    CensusRecord, Coordinates, Department, Facility, HistoryPoint, Item, Network,
)
from medsync.schemas.seed import (
    DepartmentSeed, FacilitySeed, ItemSeed, NetworkSeed,
)

logger = logging.getLogger(__name__)


def _build_item(seed: ItemSeed, capacity: int) -> Item:
    points = [
        HistoryPoint(timestamp=p.timestamp, value=p.value, kind=p.kind)
        for p in seed.history
    ]
    try:
        history = backfill(points, capacity)
    except ValueError as e:
        raise SeedDataError(
            str(e), ErrorContext(item_id=seed.id),
        ) from e
    return Item(
        id=ItemId(seed.id),
        category=seed.category,
        quantity=seed.quantity,
        daily_usage_rate=seed.daily_usage_rate,
        history=history,
    )


def _build_department(seed: DepartmentSeed, capacity: int) -> Department:
    return Department(
        id=DepartmentId(seed.id),
        name=seed.name,
        specialist_title=seed.specialist_title,
        specialist_count=seed.specialist_count,
        inventory=tuple(_build_item(i, capacity) for i in seed.inventory),
    )


def _build_facility(seed: FacilitySeed, capacity: int) -> Facility:
    return Facility(
        id=FacilityId(seed.id),
        name=seed.name,
        max_capacity=seed.max_capacity,
        coordinates=Coordinates(seed.coordinates.x, seed.coordinates.y),
        census_series=tuple(
            CensusRecord(date=c.date, count=c.count) for c in seed.census_series
        ),
        departments=tuple(
            _build_department(d, capacity) for d in seed.departments
        ),
    )


def network_from_seed(
    data: dict, history_capacity: int = HISTORY_CAPACITY,
) -> Network:
    """Validate raw seed data and build the Network tree."""
    try:
        seed = NetworkSeed.model_validate(data)
    except ValidationError as e:
        raise SeedDataError(
            f"{e.error_count()} validation error(s)",
            ErrorContext(debug_info={"errors": e.errors(include_url=False)}),
        ) from e
    return Network(
        facilities=tuple(
            _build_facility(f, history_capacity) for f in seed.facilities
        ),
    )


def load_network(
    path: str | None, history_capacity: int = HISTORY_CAPACITY,
) -> Network:
    """Read a JSON seed file. No path -> empty network."""
    if not path:
        logger.warning("No seed file configured, starting with an empty network")
        return Network()
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise SeedDataError(f"cannot read {path}: {e}") from e
    network = network_from_seed(raw, history_capacity)
    logger.info(f"Loaded {len(network.facilities)} facilities from {path}")
    return network

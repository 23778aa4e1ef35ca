"""State Store — pure copy-on-write transitions over the Network tree.

Invariants:
    - Every transition is PURE: (network, request) -> result with a new root, no IO
    - quantity / specialist_count clamp at zero (ClampedInput is never an error)
    - Unknown facility/department/item id -> the SAME network object is returned and
      the result value is None (UnresolvedReference is a silent no-op)
    - Only the root-to-leaf path is rebuilt; sibling subtrees are shared by identity
    - upsert_census keeps one record per date and is idempotent

Design Decisions:
    - Result dataclasses over tuples: callers read .network / .quantity by name
    - Clock is a parameter (now), not read here: deterministic tests
"""

from dataclasses import dataclass, replace
from datetime import datetime

from medsync.core.domain_types import HISTORY_CAPACITY, HistoryKind
from medsync.core.history_buffer import append_point
from medsync.core.network_model import (
    CensusRecord, Department, Facility, HistoryPoint, Item, Network,
)


@dataclass(frozen=True)
class DeltaResult:
    network: Network
    quantity: int | None  # None when any id did not resolve


@dataclass(frozen=True)
class SpecialistResult:
    network: Network
    count: int | None


@dataclass(frozen=True)
class CensusResult:
    network: Network
    applied: bool


def _replace_at(items: tuple, index: int, new) -> tuple:
    return (*items[:index], new, *items[index + 1:])


def _index_of(records: tuple, record_id: str) -> int | None:
    return next(
        (i for i, r in enumerate(records) if r.id == record_id), None,
    )


def _with_facility(network: Network, index: int, facility: Facility) -> Network:
    return replace(
        network, facilities=_replace_at(network.facilities, index, facility),
    )


def _with_department(
    facility: Facility, index: int, department: Department,
) -> Facility:
    return replace(
        facility,
        departments=_replace_at(facility.departments, index, department),
    )


def apply_delta(
    network: Network,
    facility_id: str,
    department_id: str,
    item_id: str,
    delta: int,
    now: datetime,
    history_capacity: int = HISTORY_CAPACITY,
) -> DeltaResult:
    """Add delta to an item's quantity (floor 0) and record a history point."""
    f_idx = _index_of(network.facilities, facility_id)
    if f_idx is None:
        return DeltaResult(network, None)
    facility = network.facilities[f_idx]
    d_idx = _index_of(facility.departments, department_id)
    if d_idx is None:
        return DeltaResult(network, None)
    department = facility.departments[d_idx]
    i_idx = _index_of(department.inventory, item_id)
    if i_idx is None:
        return DeltaResult(network, None)
    item: Item = department.inventory[i_idx]

    new_quantity = max(0, item.quantity + delta)
    point = HistoryPoint(
        timestamp=now,
        value=new_quantity,
        kind=HistoryKind.RESTOCK if delta > 0 else HistoryKind.USAGE,
    )
    new_item = replace(
        item,
        quantity=new_quantity,
        history=append_point(item.history, point, history_capacity),
    )
    new_department = replace(
        department,
        inventory=_replace_at(department.inventory, i_idx, new_item),
    )
    new_facility = _with_department(facility, d_idx, new_department)
    return DeltaResult(_with_facility(network, f_idx, new_facility), new_quantity)


def update_specialist_count(
    network: Network, facility_id: str, department_id: str, delta: int,
) -> SpecialistResult:
    """Add delta to a department's specialist count (floor 0). No history."""
    f_idx = _index_of(network.facilities, facility_id)
    if f_idx is None:
        return SpecialistResult(network, None)
    facility = network.facilities[f_idx]
    d_idx = _index_of(facility.departments, department_id)
    if d_idx is None:
        return SpecialistResult(network, None)
    department = facility.departments[d_idx]

    new_count = max(0, department.specialist_count + delta)
    new_department = replace(department, specialist_count=new_count)
    new_facility = _with_department(facility, d_idx, new_department)
    return SpecialistResult(_with_facility(network, f_idx, new_facility), new_count)


def upsert_census(
    network: Network, facility_id: str, date: str, count: int,
) -> CensusResult:
    """Replace the census count for date, or append a new record."""
    f_idx = _index_of(network.facilities, facility_id)
    if f_idx is None:
        return CensusResult(network, False)
    facility = network.facilities[f_idx]

    record = CensusRecord(date=date, count=count)
    existing = next(
        (i for i, c in enumerate(facility.census_series) if c.date == date),
        None,
    )
    if existing is None:
        series = (*facility.census_series, record)
    else:
        series = _replace_at(facility.census_series, existing, record)
    new_facility = replace(facility, census_series=series)
    return CensusResult(_with_facility(network, f_idx, new_facility), True)

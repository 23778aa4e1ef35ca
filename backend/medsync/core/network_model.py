"""Network Model — immutable entity tree: Network → Facility → Department → Item.

Invariants:
    - Every record is frozen; writes produce new records (see state_store.py)
    - Facility.census_series holds at most one record per date
    - Item.history is ordered by non-decreasing timestamp, length <= HISTORY_CAPACITY
    - quantity >= 0, specialist_count >= 0, daily_usage_rate > 0

Design Decisions:
    - frozen dataclasses + tuples over dicts: snapshots handed to readers stay valid
      after later writes, and untouched subtrees can be shared by identity
    - Lookups are linear scans: networks hold a handful of facilities, order is
      presentation order and must be preserved
"""

from dataclasses import dataclass
from datetime import datetime

from medsync.core.domain_types import (
    DepartmentId, FacilityId, HistoryKind, ItemId, SupplyCategory,
)


@dataclass(frozen=True)
class HistoryPoint:
    timestamp: datetime
    value: int
    kind: HistoryKind


@dataclass(frozen=True)
class CensusRecord:
    date: str  # ISO calendar date, YYYY-MM-DD
    count: int


@dataclass(frozen=True)
class Coordinates:
    x: float
    y: float


@dataclass(frozen=True)
class Item:
    id: ItemId
    category: SupplyCategory
    quantity: int
    daily_usage_rate: float
    history: tuple[HistoryPoint, ...] = ()

    @property
    def runway_days(self) -> float:
        """Days of supply left at the current usage rate."""
        return self.quantity / self.daily_usage_rate


@dataclass(frozen=True)
class Department:
    id: DepartmentId
    name: str
    specialist_title: str
    specialist_count: int
    inventory: tuple[Item, ...] = ()

    def find_item(self, item_id: str) -> Item | None:
        return next((i for i in self.inventory if i.id == item_id), None)


@dataclass(frozen=True)
class Facility:
    id: FacilityId
    name: str
    max_capacity: int
    coordinates: Coordinates
    census_series: tuple[CensusRecord, ...] = ()
    departments: tuple[Department, ...] = ()

    def find_department(self, department_id: str) -> Department | None:
        return next(
            (d for d in self.departments if d.id == department_id), None,
        )

    def census_for(self, date: str) -> CensusRecord | None:
        return next((c for c in self.census_series if c.date == date), None)


@dataclass(frozen=True)
class Network:
    """Root of the entity tree."""
    facilities: tuple[Facility, ...] = ()

    def find_facility(self, facility_id: str) -> Facility | None:
        return next(
            (f for f in self.facilities if f.id == facility_id), None,
        )

    def resolve_item(
        self, facility_id: str, department_id: str, item_id: str,
    ) -> tuple[Facility, Department, Item] | None:
        """Resolve a full path, or None if any id is unknown."""
        facility = self.find_facility(facility_id)
        if facility is None:
            return None
        department = facility.find_department(department_id)
        if department is None:
            return None
        item = department.find_item(item_id)
        if item is None:
            return None
        return facility, department, item

"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - FacilityId, DepartmentId, ItemId are scoped to their parent (d1 exists in every facility)
    - Quantities and specialist counts are never negative (clamped by the state store)
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders (snapshots and API responses)
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

FacilityId = NewType("FacilityId", str)
DepartmentId = NewType("DepartmentId", str)
ItemId = NewType("ItemId", str)


# ─── Enums ───────────────────────────────────────────────────────

class SupplyCategory(str, Enum):
    """Tracked supply types. Values are the display names used in log messages."""
    FLUIDS = "IV Fluids"
    OXYGEN = "Oxygen"
    ANALGESICS = "Analgesics"
    ANESTHESIA = "Anesthesia"
    ANTIBIOTICS = "Antibiotics"
    INSULIN = "Insulin"


class HistoryKind(str, Enum):
    """What produced a history point."""
    USAGE = "usage"
    RESTOCK = "restock"
    MANUAL = "manual"


class LogSeverity(str, Enum):
    """Activity log severity — drives presentation colouring."""
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    CRITICAL = "critical"


class Connectivity(str, Enum):
    ONLINE = "online"
    OFFLINE = "offline"


class OperatingContext(str, Enum):
    """FIELD = frontline data entry; OVERSIGHT = aggregate monitoring (simulator runs)."""
    FIELD = "field"
    OVERSIGHT = "oversight"


class StockStatus(str, Enum):
    OK = "ok"
    LOW = "low"
    CRITICAL = "critical"


# ─── Constants ───────────────────────────────────────────────────

HISTORY_CAPACITY: int = 20
CRITICAL_RUNWAY_DAYS: float = 2.0
LOW_RUNWAY_DAYS: float = 5.0
SYSTEM_FACILITY_NAME: str = "System"

# Max stock per category as a multiple of facility patient capacity
STOCK_RATIOS: dict[SupplyCategory, float] = {
    SupplyCategory.INSULIN: 0.5,
    SupplyCategory.ANTIBIOTICS: 1.0,
    SupplyCategory.ANESTHESIA: 0.2,
    SupplyCategory.OXYGEN: 0.8,
    SupplyCategory.FLUIDS: 2.0,
    SupplyCategory.ANALGESICS: 1.5,
}

"""Seed Schemas — Pydantic models validating bootstrap network data.

Invariants:
    - quantity >= 0, specialist_count >= 0, daily_usage_rate > 0
    - census dates are ISO calendar dates and unique per facility
    - history timestamps carry a timezone (the engine clock is UTC-aware)
    - ids unique within their parent (facility ids across the network)
"""

from pydantic import AwareDatetime, BaseModel, Field, field_validator

from medsync.core.domain_types import HistoryKind, SupplyCategory

ISO_DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


def _require_unique_ids(records: list, label: str) -> list:
    ids = [r.id for r in records]
    if len(ids) != len(set(ids)):
        raise ValueError(f"duplicate {label} id")
    return records


class HistoryPointSeed(BaseModel):
    timestamp: AwareDatetime
    value: int = Field(ge=0)
    kind: HistoryKind = HistoryKind.USAGE


class ItemSeed(BaseModel):
    id: str = Field(min_length=1)
    category: SupplyCategory
    quantity: int = Field(ge=0)
    daily_usage_rate: float = Field(gt=0)
    history: list[HistoryPointSeed] = Field(default_factory=list)


class DepartmentSeed(BaseModel):
    id: str = Field(min_length=1)
    name: str
    specialist_title: str
    specialist_count: int = Field(0, ge=0)
    inventory: list[ItemSeed] = Field(default_factory=list)

    @field_validator("inventory")
    @classmethod
    def unique_item_ids(cls, v: list[ItemSeed]) -> list[ItemSeed]:
        return _require_unique_ids(v, "item")


class CensusSeed(BaseModel):
    date: str = Field(pattern=ISO_DATE_PATTERN)
    count: int = Field(ge=0)


class CoordinatesSeed(BaseModel):
    x: float = 0.0
    y: float = 0.0


class FacilitySeed(BaseModel):
    id: str = Field(min_length=1)
    name: str
    max_capacity: int = Field(ge=0)
    coordinates: CoordinatesSeed = Field(default_factory=CoordinatesSeed)
    census_series: list[CensusSeed] = Field(default_factory=list)
    departments: list[DepartmentSeed] = Field(default_factory=list)

    @field_validator("census_series")
    @classmethod
    def unique_census_dates(cls, v: list[CensusSeed]) -> list[CensusSeed]:
        dates = [c.date for c in v]
        if len(dates) != len(set(dates)):
            raise ValueError("duplicate census date")
        return v

    @field_validator("departments")
    @classmethod
    def unique_department_ids(cls, v: list[DepartmentSeed]) -> list[DepartmentSeed]:
        return _require_unique_ids(v, "department")


class NetworkSeed(BaseModel):
    facilities: list[FacilitySeed] = Field(default_factory=list)

    @field_validator("facilities")
    @classmethod
    def unique_facility_ids(cls, v: list[FacilitySeed]) -> list[FacilitySeed]:
        return _require_unique_ids(v, "facility")

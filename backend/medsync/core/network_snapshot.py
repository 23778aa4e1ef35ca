"""Network Snapshot — JSON-safe serialization of the Network tree.

Invariants:
    - network_to_snapshot produces a JSON-safe dict (no Enums, no datetimes)
    - Every item carries its computed runway_days and status
    - analysis_payload never divides by zero (usage rate 0 treated as 1)

Design Decisions:
    - Serialization lives beside the model, not in the API layer: the analyst and the
      routes share one representation
"""

from medsync.core.network_model import (
    Department, Facility, HistoryPoint, Item, Network,
)
from medsync.core.stock_status import classify_item


def _point_to_dict(point: HistoryPoint) -> dict:
    return {
        "timestamp": point.timestamp.isoformat(),
        "value": point.value,
        "kind": point.kind.value,
    }


def item_to_snapshot(item: Item) -> dict:
    return {
        "id": item.id,
        "category": item.category.value,
        "quantity": item.quantity,
        "daily_usage_rate": item.daily_usage_rate,
        "runway_days": round(item.runway_days, 3),
        "status": classify_item(item).value,
        "history": [_point_to_dict(p) for p in item.history],
    }


def _department_to_snapshot(department: Department) -> dict:
    return {
        "id": department.id,
        "name": department.name,
        "specialist_title": department.specialist_title,
        "specialist_count": department.specialist_count,
        "inventory": [item_to_snapshot(i) for i in department.inventory],
    }


def facility_to_snapshot(facility: Facility) -> dict:
    return {
        "id": facility.id,
        "name": facility.name,
        "max_capacity": facility.max_capacity,
        "coordinates": {
            "x": facility.coordinates.x, "y": facility.coordinates.y,
        },
        "census_series": [
            {"date": c.date, "count": c.count}
            for c in facility.census_series
        ],
        "departments": [
            _department_to_snapshot(d) for d in facility.departments
        ],
    }


def network_to_snapshot(network: Network) -> dict:
    """Serialize the whole tree. Pure, no IO."""
    return {
        "facilities": [facility_to_snapshot(f) for f in network.facilities],
    }


def analysis_payload(network: Network) -> list[dict]:
    """Condensed view sent to the analysis collaborator."""
    return [
        {
            "name": f.name,
            "capacity": f.max_capacity,
            "departments": [
                {
                    "name": d.name,
                    "specialists": f"{d.specialist_count} {d.specialist_title}",
                    "supplies": [
                        {
                            "item": i.category.value,
                            "stock": i.quantity,
                            "days_supply": f"{i.quantity / (i.daily_usage_rate or 1):.1f}",
                        }
                        for i in d.inventory
                    ],
                }
                for d in f.departments
            ],
        }
        for f in network.facilities
    ]

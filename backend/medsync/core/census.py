"""Census Aggregator — network-wide reporting over census and item history.

Invariants:
    - aggregate_census output is keyed by date in first-seen order, NOT sorted
    - A facility without a record for a date contributes 0 to that date
    - aggregate_item_trend is empty when no item of the category exists

Design Decisions:
    - Trend sums by history index, not by timestamp: assumes facilities record
      roughly aligned histories; the first matching item in network order supplies
      timestamps and kinds for the aggregate points
    - Per department only the first item of a category counts (one slot per category)
"""

from medsync.core.domain_types import SupplyCategory
from medsync.core.network_model import HistoryPoint, Item, Network


def aggregate_census(network: Network) -> dict[str, int]:
    """Sum census counts per date across all facilities."""
    totals: dict[str, int] = {}
    for facility in network.facilities:
        for record in facility.census_series:
            totals[record.date] = totals.get(record.date, 0) + record.count
    return totals


def census_total_for_date(network: Network, date: str) -> int:
    total = 0
    for facility in network.facilities:
        record = facility.census_for(date)
        if record is not None:
            total += record.count
    return total


def sorted_census(network: Network) -> list[tuple[str, int]]:
    """Chronological view of aggregate_census (ISO dates sort lexically)."""
    return sorted(aggregate_census(network).items())


def _items_of_category(
    network: Network, category: SupplyCategory,
) -> list[Item]:
    matches = []
    for facility in network.facilities:
        for department in facility.departments:
            item = next(
                (i for i in department.inventory if i.category == category),
                None,
            )
            if item is not None:
                matches.append(item)
    return matches


def aggregate_item_trend(
    network: Network, category: SupplyCategory,
) -> list[HistoryPoint]:
    """Network-wide stock trend for one supply category."""
    items = _items_of_category(network, category)
    if not items:
        return []
    sample = items[0]
    trend = []
    for index, point in enumerate(sample.history):
        total = sum(
            item.history[index].value
            for item in items
            if index < len(item.history)
        )
        trend.append(
            HistoryPoint(timestamp=point.timestamp, value=total, kind=point.kind),
        )
    return trend

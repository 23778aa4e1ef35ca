"""Stock Status — runway classification and capacity-derived restock targets.

Invariants:
    - runway < CRITICAL_RUNWAY_DAYS (2.0) -> CRITICAL
    - runway < LOW_RUNWAY_DAYS (5.0) -> LOW, otherwise OK
    - restock_delta is never negative
"""

import math

from medsync.core.domain_types import (
    CRITICAL_RUNWAY_DAYS, LOW_RUNWAY_DAYS, STOCK_RATIOS,
    StockStatus, SupplyCategory,
)
from medsync.core.network_model import Item


def runway_days(quantity: int, daily_usage_rate: float) -> float:
    return quantity / daily_usage_rate


def is_critical(quantity: int, daily_usage_rate: float) -> bool:
    return runway_days(quantity, daily_usage_rate) < CRITICAL_RUNWAY_DAYS


def classify_runway(quantity: int, daily_usage_rate: float) -> StockStatus:
    runway = runway_days(quantity, daily_usage_rate)
    if runway < CRITICAL_RUNWAY_DAYS:
        return StockStatus.CRITICAL
    if runway < LOW_RUNWAY_DAYS:
        return StockStatus.LOW
    return StockStatus.OK


def classify_item(item: Item) -> StockStatus:
    return classify_runway(item.quantity, item.daily_usage_rate)


def max_stock(max_capacity: int, category: SupplyCategory) -> int:
    """Stock ceiling for a category, scaled by facility patient capacity."""
    return math.floor(max_capacity * STOCK_RATIOS.get(category, 1.0))


def restock_delta(item: Item, max_capacity: int) -> int:
    """Units needed to bring item up to its ceiling (0 if already there)."""
    return max(0, max_stock(max_capacity, item.category) - item.quantity)

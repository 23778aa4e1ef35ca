"""History Ring Buffer — bounded, append-only per-item quantity log.

Invariants:
    - Appends only at the tail; the oldest point is evicted first
    - Length never exceeds capacity
    - Timestamps are non-decreasing (a late point is stamped with the tail's timestamp)

Design Decisions:
    - Tuples in, tuple out: pure function, the caller rebuilds the Item
"""

from medsync.core.domain_types import HISTORY_CAPACITY
from medsync.core.network_model import HistoryPoint


def append_point(
    history: tuple[HistoryPoint, ...],
    point: HistoryPoint,
    capacity: int = HISTORY_CAPACITY,
) -> tuple[HistoryPoint, ...]:
    """Return history with point appended, trimmed to the last `capacity` entries."""
    if capacity <= 0:
        return ()
    if history and point.timestamp < history[-1].timestamp:
        point = HistoryPoint(
            timestamp=history[-1].timestamp, value=point.value, kind=point.kind,
        )
    return (*history, point)[-capacity:]


def backfill(
    points: list[HistoryPoint], capacity: int = HISTORY_CAPACITY,
) -> tuple[HistoryPoint, ...]:
    """Build a history from pre-sorted bootstrap points (keeps the most recent).

    Raises ValueError if the points are not in chronological order.
    """
    for earlier, later in zip(points, points[1:]):
        if later.timestamp < earlier.timestamp:
            raise ValueError("history backfill must be sorted by timestamp")
    if capacity <= 0:
        return ()
    return tuple(points[-capacity:])

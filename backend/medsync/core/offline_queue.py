"""Offline Queue — FIFO capture of mutations made while OFFLINE in FIELD context.

Invariants:
    - Arrival order is preserved; no reordering, deduplication, or coalescing
    - drain() returns every pending mutation and leaves the queue empty in one step
    - Drained mutations are discarded, never archived

Design Decisions:
    - Pure dataclass, no IO and no timers: the sync engine owns the settle delay
"""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import uuid4


@dataclass(frozen=True)
class PendingMutation:
    id: str
    facility_id: str
    department_id: str
    item_id: str
    delta: int
    timestamp: datetime


@dataclass
class OfflineQueue:
    """Pending mutations captured during a disconnected window."""

    pending: list[PendingMutation] = field(default_factory=list)

    @property
    def pending_count(self) -> int:
        return len(self.pending)

    @property
    def is_empty(self) -> bool:
        return not self.pending

    def capture(
        self,
        facility_id: str,
        department_id: str,
        item_id: str,
        delta: int,
        timestamp: datetime,
    ) -> PendingMutation:
        """Mirror a mutation into the queue."""
        mutation = PendingMutation(
            id=uuid4().hex,
            facility_id=facility_id,
            department_id=department_id,
            item_id=item_id,
            delta=delta,
            timestamp=timestamp,
        )
        self.pending.append(mutation)
        return mutation

    def drain(self) -> list[PendingMutation]:
        """Return queued mutations and clear the queue."""
        drained = self.pending
        self.pending = []
        return drained

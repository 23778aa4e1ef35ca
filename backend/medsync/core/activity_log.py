"""Activity Log — most-recent-first record of mutations and alerts.

Invariants:
    - add() inserts at the head; entries() iterates newest first
    - Append-only: no cap, no deduplication, no removal

Design Decisions:
    - deque.appendleft: O(1) head insert
    - Unbounded; entries live as long as the engine
"""

from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone
from itertools import islice
from uuid import uuid4

from medsync.core.domain_types import LogSeverity


@dataclass(frozen=True)
class LogEntry:
    id: str
    timestamp: datetime
    message: str
    severity: LogSeverity
    facility_name: str

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "message": self.message,
            "severity": self.severity.value,
            "facility_name": self.facility_name,
        }


class ActivityLog:
    """Ordered log consumed by presentation."""

    def __init__(self) -> None:
        self._entries: deque[LogEntry] = deque()

    def __len__(self) -> int:
        return len(self._entries)

    def add(
        self,
        message: str,
        severity: LogSeverity,
        facility_name: str,
        timestamp: datetime | None = None,
    ) -> LogEntry:
        entry = LogEntry(
            id=uuid4().hex,
            timestamp=timestamp or datetime.now(timezone.utc),
            message=message,
            severity=severity,
            facility_name=facility_name,
        )
        self._entries.appendleft(entry)
        return entry

    def entries(self, limit: int | None = None) -> list[LogEntry]:
        """Newest first; limit=None returns everything."""
        if limit is None:
            return list(self._entries)
        return list(islice(self._entries, limit))

    def by_severity(self, severity: LogSeverity) -> list[LogEntry]:
        return [e for e in self._entries if e.severity == severity]

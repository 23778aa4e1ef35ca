"""Inventory Sync Engine — the store handle: tree, offline queue, log, and both timers.

Invariants:
    - Every write funnels through the pure state_store transitions (single entry point)
    - OFFLINE ∧ FIELD stock mutations apply optimistically AND are mirrored to the queue
    - Reconnect with a non-empty queue arms ONE settle timer; on fire it logs
      "Synced N offline records." (N read at fire time) and drains the queue
    - Going offline before the settle fires cancels it; the next reconnect re-arms it
    - The simulator interval runs only in OVERSIGHT context, only after start()
    - shutdown() cancels both timers synchronously; no callback fires afterwards
    - Mutations never raise for valid-shaped input (clamp, or no-op on unknown ids)

Design Decisions:
    - One engine per app (stored on app.state), no module-level singleton: tests build
      isolated engines with their own RNG, clock, and delays
    - Timers use loop.call_later via DeferredCallback: single event loop, no locks
    - Simulator depletion bypasses the activity-log "Dispensed" entry; only the
      critical alert is logged for it
"""

import asyncio
import logging
import random
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone

from medsync.core import state_store
from medsync.core.activity_log import ActivityLog
from medsync.core.consumption import DEPLETION_DELTA, plan_depletion
from medsync.core.domain_types import (
    HISTORY_CAPACITY, SYSTEM_FACILITY_NAME, Connectivity, LogSeverity,
    OperatingContext,
)
from medsync.core.errors import EngineClosedError
from medsync.core.network_model import Network
from medsync.core.offline_queue import OfflineQueue
from medsync.core.stock_status import is_critical, restock_delta
from medsync.services.deferred import DeferredCallback

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class SimulatorTick:
    """Outcome of a tick that depleted an item."""
    facility_id: str
    department_id: str
    item_id: str
    quantity: int
    critical: bool


class InventorySyncEngine:
    """Single-writer inventory store with deferred offline sync."""

    def __init__(
        self,
        network: Network | None = None,
        *,
        history_capacity: int = HISTORY_CAPACITY,
        settle_delay_seconds: float = 1.5,
        simulator_interval_seconds: float = 3.0,
        depletion_probability: float = 0.3,
        context: OperatingContext = OperatingContext.OVERSIGHT,
        online: bool = True,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._network = network or Network()
        self.history_capacity = history_capacity
        self.settle_delay_seconds = settle_delay_seconds
        self.simulator_interval_seconds = simulator_interval_seconds
        self.depletion_probability = depletion_probability
        self._context = context
        self._online = online
        self._rng = rng or random.Random()  # nosec B311
        self._clock = clock

        self._queue = OfflineQueue()
        self._log = ActivityLog()
        self._settle = DeferredCallback("settle")
        self._simulator = DeferredCallback("simulator")
        self._loop: asyncio.AbstractEventLoop | None = None
        self._closed = False

    @classmethod
    def from_settings(cls, settings, network: Network) -> "InventorySyncEngine":
        seed = settings.simulator_seed
        return cls(
            network,
            history_capacity=settings.history_capacity,
            settle_delay_seconds=settings.settle_delay_seconds,
            simulator_interval_seconds=settings.simulator_interval_seconds,
            depletion_probability=settings.simulator_depletion_probability,
            context=settings.initial_context,
            rng=random.Random(seed),  # nosec B311
        )

    # --- Read access -------------------------------------------------------------

    @property
    def network(self) -> Network:
        """Current tree snapshot. Later writes never mutate it."""
        return self._network

    @property
    def logs(self) -> ActivityLog:
        return self._log

    @property
    def pending_count(self) -> int:
        return self._queue.pending_count

    @property
    def is_online(self) -> bool:
        return self._online

    @property
    def connectivity(self) -> Connectivity:
        return Connectivity.ONLINE if self._online else Connectivity.OFFLINE

    @property
    def context(self) -> OperatingContext:
        return self._context

    @property
    def is_running(self) -> bool:
        return self._loop is not None and not self._closed

    @property
    def sync_scheduled(self) -> bool:
        return self._settle.armed

    @property
    def simulator_active(self) -> bool:
        return self._simulator.armed

    @property
    def _captures_offline(self) -> bool:
        return not self._online and self._context == OperatingContext.FIELD

    # --- Lifecycle ---------------------------------------------------------------

    def start(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        """Bind to the event loop and arm whatever the current state calls for."""
        if self._closed:
            raise EngineClosedError("start")
        self._loop = loop or asyncio.get_running_loop()
        if self._context == OperatingContext.OVERSIGHT:
            self._arm_simulator()
        if self._online and not self._queue.is_empty:
            self._arm_settle()
        logger.info(
            "Sync engine started",
            extra={"pending_count": self._queue.pending_count},
        )

    def shutdown(self) -> None:
        """Cancel both timers. Idempotent."""
        self._settle.cancel()
        self._simulator.cancel()
        if not self._closed:
            self._closed = True
            logger.info(
                "Sync engine shut down",
                extra={"pending_count": self._queue.pending_count},
            )

    # --- Mutations ---------------------------------------------------------------

    def apply_delta(
        self, facility_id: str, department_id: str, item_id: str, delta: int,
    ) -> int | None:
        """Apply a stock change. Returns the new quantity, None for unknown ids."""
        now = self._clock()
        resolved = self._network.resolve_item(facility_id, department_id, item_id)
        quantity = self._write_delta(
            facility_id, department_id, item_id, delta, now,
        )

        if self._captures_offline:
            self._queue.capture(facility_id, department_id, item_id, delta, now)
            logger.info(
                "Queued offline mutation",
                extra={
                    "facility_id": facility_id, "item_id": item_id,
                    "delta": delta, "pending_count": self._queue.pending_count,
                },
            )
        elif resolved is not None:
            facility, department, item = resolved
            message = "Restocked" if delta > 0 else "Dispensed"
            severity = LogSeverity.WARNING if delta < 0 else LogSeverity.SUCCESS
            self._log.add(
                f"{message} {item.category.value} in {department.name}",
                severity, facility.name, now,
            )
        return quantity

    def restock_to_capacity(
        self, facility_id: str, department_id: str, item_id: str,
    ) -> int | None:
        """Top an item up to its capacity-derived ceiling."""
        resolved = self._network.resolve_item(facility_id, department_id, item_id)
        if resolved is None:
            self._warn_unresolved(facility_id, department_id, item_id)
            return None
        facility, _, item = resolved
        delta = restock_delta(item, facility.max_capacity)
        if delta <= 0:
            return item.quantity
        return self.apply_delta(facility_id, department_id, item_id, delta)

    def update_specialist_count(
        self, facility_id: str, department_id: str, delta: int,
    ) -> int | None:
        result = state_store.update_specialist_count(
            self._network, facility_id, department_id, delta,
        )
        if result.count is None:
            self._warn_unresolved(facility_id, department_id)
        self._network = result.network
        return result.count

    def upsert_census(
        self, facility_id: str, count: int, date: str | None = None,
    ) -> bool:
        """Set the patient count for date (default: today, UTC)."""
        now = self._clock()
        day = date or now.date().isoformat()
        result = state_store.upsert_census(self._network, facility_id, day, count)
        self._network = result.network
        if not result.applied:
            self._warn_unresolved(facility_id)
            return False
        facility = self._network.find_facility(facility_id)
        self._log.add(
            f"Patient census updated: {count}", LogSeverity.INFO,
            facility.name, now,
        )
        return True

    # --- Connectivity & context --------------------------------------------------

    def set_connectivity(self, online: bool) -> None:
        if online == self._online:
            return
        self._online = online
        if not online:
            self._settle.cancel()
            logger.info("Connectivity lost", extra={
                "pending_count": self._queue.pending_count,
            })
            return
        logger.info("Connectivity restored", extra={
            "pending_count": self._queue.pending_count,
        })
        if not self._queue.is_empty:
            self._arm_settle()

    def set_context(self, context: OperatingContext) -> None:
        if context == self._context:
            return
        self._context = context
        if context == OperatingContext.OVERSIGHT:
            self._arm_simulator()
        else:
            self._simulator.cancel()
        logger.info(f"Operating context set to {context.value}")

    # --- Simulator ---------------------------------------------------------------

    def run_simulator_tick(self) -> SimulatorTick | None:
        """One consumption step. Returns None when nothing was depleted."""
        target = plan_depletion(
            self._network, self._rng, self.depletion_probability,
        )
        if target is None:
            return None
        facility, department, item = target.facility, target.department, target.item
        quantity = self._write_delta(
            facility.id, department.id, item.id, DEPLETION_DELTA, self._clock(),
        )
        critical = is_critical(quantity, item.daily_usage_rate)
        if critical:
            self._log.add(
                f"CRITICAL LOW: {item.category.value} in {department.name}",
                LogSeverity.CRITICAL, facility.name, self._clock(),
            )
        return SimulatorTick(
            facility.id, department.id, item.id, quantity, critical,
        )

    # --- Internals ---------------------------------------------------------------

    def _write_delta(
        self, facility_id: str, department_id: str, item_id: str,
        delta: int, now: datetime,
    ) -> int | None:
        result = state_store.apply_delta(
            self._network, facility_id, department_id, item_id, delta, now,
            self.history_capacity,
        )
        if result.quantity is None:
            self._warn_unresolved(facility_id, department_id, item_id)
        self._network = result.network
        return result.quantity

    def _warn_unresolved(
        self, facility_id: str, department_id: str | None = None,
        item_id: str | None = None,
    ) -> None:
        logger.warning("Unresolved reference, mutation ignored", extra={
            "facility_id": facility_id,
            "department_id": department_id,
            "item_id": item_id,
        })

    def _arm_settle(self) -> None:
        if self._loop is None or self._closed or self._settle.armed:
            return
        self._settle.arm(self._loop, self.settle_delay_seconds, self._on_settle)

    def _on_settle(self) -> None:
        if self._closed or not self._online:
            return
        drained = self._queue.drain()
        if not drained:
            return
        self._log.add(
            f"Synced {len(drained)} offline records.", LogSeverity.INFO,
            SYSTEM_FACILITY_NAME, self._clock(),
        )
        logger.info(
            "Offline queue flushed", extra={"pending_count": len(drained)},
        )

    def _arm_simulator(self) -> None:
        if self._loop is None or self._closed:
            return
        self._simulator.arm(
            self._loop, self.simulator_interval_seconds, self._on_simulator_tick,
        )

    def _on_simulator_tick(self) -> None:
        if self._closed or self._context != OperatingContext.OVERSIGHT:
            return
        self.run_simulator_tick()
        self._arm_simulator()

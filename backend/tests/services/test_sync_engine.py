"""Sync Engine tests — optimistic offline capture, settle timer, activity logging.

Invariants:
    - OFFLINE ∧ FIELD mutations apply at once and are queued; nothing is logged for them
    - Reconnect logs exactly one "Synced N offline records." and empties the queue
    - Going offline before the settle delay cancels the pending sync
    - Online mutations log Restocked/Dispensed; unknown ids log nothing
"""

import asyncio

import pytest

from medsync.core.domain_types import LogSeverity, OperatingContext, StockStatus
from medsync.core.errors import EngineClosedError
from medsync.core.stock_status import classify_item, is_critical

from tests.network_builders import make_network
from tests.services.engine_factory import SETTLE_DELAY, build_engine


def _messages(engine):
    return [e.message for e in engine.logs.entries()]


async def _wait_settle():
    await asyncio.sleep(SETTLE_DELAY * 5)


# --- Offline capture and sync --------------------------------------------------

async def test_offline_field_mutations_apply_immediately(engine):
    engine.set_connectivity(False)
    quantity = engine.apply_delta("h1", "d1", "i1", -10)
    assert quantity == 290
    assert engine.network.resolve_item("h1", "d1", "i1")[2].quantity == 290
    assert engine.pending_count == 1


async def test_offline_field_mutations_not_logged(engine):
    engine.set_connectivity(False)
    engine.apply_delta("h1", "d1", "i1", -1)
    assert len(engine.logs) == 0


async def test_reconnect_syncs_three_records_once(engine):
    engine.set_connectivity(False)
    for _ in range(3):
        engine.apply_delta("h1", "d1", "i1", -1)
    assert engine.pending_count == 3

    engine.set_connectivity(True)
    assert engine.sync_scheduled
    await _wait_settle()

    info = engine.logs.by_severity(LogSeverity.INFO)
    assert [e.message for e in info] == ["Synced 3 offline records."]
    assert info[0].facility_name == "System"
    assert engine.pending_count == 0
    assert not engine.sync_scheduled


async def test_queue_kept_until_settle_fires(engine):
    engine.set_connectivity(False)
    engine.apply_delta("h1", "d1", "i1", -1)
    engine.set_connectivity(True)
    assert engine.pending_count == 1
    assert len(engine.logs) == 0


async def test_flip_offline_before_settle_cancels_sync(engine):
    engine.set_connectivity(False)
    engine.apply_delta("h1", "d1", "i1", -1)
    engine.set_connectivity(True)
    engine.set_connectivity(False)
    assert not engine.sync_scheduled

    await _wait_settle()
    assert len(engine.logs) == 0
    assert engine.pending_count == 1


async def test_rescheduled_sync_reports_current_queue_size(engine):
    engine.set_connectivity(False)
    engine.apply_delta("h1", "d1", "i1", -1)
    engine.set_connectivity(True)
    engine.set_connectivity(False)
    engine.apply_delta("h1", "d1", "i2", -1)
    engine.set_connectivity(True)

    await _wait_settle()
    assert _messages(engine) == ["Synced 2 offline records."]


async def test_reconnect_with_empty_queue_schedules_nothing(engine):
    engine.set_connectivity(False)
    engine.set_connectivity(True)
    assert not engine.sync_scheduled
    await _wait_settle()
    assert len(engine.logs) == 0


async def test_repeated_online_does_not_double_sync(engine):
    engine.set_connectivity(False)
    engine.apply_delta("h1", "d1", "i1", -1)
    engine.set_connectivity(True)
    engine.set_connectivity(True)
    await _wait_settle()
    assert len(engine.logs.by_severity(LogSeverity.INFO)) == 1


async def test_offline_in_oversight_context_is_not_queued():
    eng = build_engine(context=OperatingContext.OVERSIGHT, depletion_probability=0.0)
    eng.start()
    try:
        eng.set_connectivity(False)
        eng.apply_delta("h1", "d1", "i1", -1)
        assert eng.pending_count == 0
        assert _messages(eng) == ["Dispensed IV Fluids in Trauma & Emergency"]
    finally:
        eng.shutdown()


async def test_queue_mirrors_requests_without_coalescing(engine):
    engine.set_connectivity(False)
    engine.apply_delta("h1", "d1", "i1", -1)
    engine.apply_delta("h1", "d1", "i1", 4)
    engine.apply_delta("h1", "d1", "i1", -1)
    assert engine.pending_count == 3
    assert engine.network.resolve_item("h1", "d1", "i1")[2].quantity == 302


async def test_shutdown_cancels_pending_sync(engine):
    engine.set_connectivity(False)
    engine.apply_delta("h1", "d1", "i1", -1)
    engine.set_connectivity(True)
    engine.shutdown()
    await _wait_settle()
    assert len(engine.logs) == 0


async def test_queue_captured_before_start_syncs_on_start():
    eng = build_engine(online=False)
    eng.apply_delta("h1", "d1", "i1", -1)
    eng.set_connectivity(True)
    assert not eng.sync_scheduled
    eng.start()
    try:
        assert eng.sync_scheduled
        await _wait_settle()
        assert _messages(eng) == ["Synced 1 offline records."]
    finally:
        eng.shutdown()


# --- Online logging ---------------------------------------------------------------

async def test_online_dispense_logs_warning(engine):
    engine.apply_delta("h2", "d1", "i1", -3)
    entry = engine.logs.entries()[0]
    assert entry.message == "Dispensed IV Fluids in Trauma & Emergency"
    assert entry.severity == LogSeverity.WARNING
    assert entry.facility_name == "Al-Shifa Hospital"


async def test_online_restock_logs_success(engine):
    engine.apply_delta("h1", "d2", "i4", 10)
    entry = engine.logs.entries()[0]
    assert entry.message == "Restocked Anesthesia in Critical Care Unit"
    assert entry.severity == LogSeverity.SUCCESS


async def test_logs_follow_call_order(engine):
    engine.apply_delta("h1", "d1", "i1", -1)
    engine.apply_delta("h1", "d1", "i1", 1)
    assert _messages(engine) == [
        "Restocked IV Fluids in Trauma & Emergency",
        "Dispensed IV Fluids in Trauma & Emergency",
    ]


# --- Unresolved references (pinned: silent no-op) -----------------------------

async def test_unknown_item_is_noop(engine):
    before = engine.network
    assert engine.apply_delta("h1", "d1", "nope", -1) is None
    assert engine.network is before
    assert len(engine.logs) == 0


async def test_unknown_item_offline_is_still_queued(engine):
    engine.set_connectivity(False)
    before = engine.network
    assert engine.apply_delta("h9", "d1", "i1", -1) is None
    assert engine.network is before
    assert engine.pending_count == 1


async def test_unknown_specialist_department_is_noop(engine):
    assert engine.update_specialist_count("h1", "d9", 1) is None


async def test_unknown_census_facility_is_noop(engine):
    assert engine.upsert_census("h9", 10, "2024-01-01") is False
    assert len(engine.logs) == 0


# --- Specialists, census, restock ----------------------------------------------

async def test_specialist_count_clamped(engine):
    assert engine.update_specialist_count("h1", "d1", -100) == 0
    assert engine.update_specialist_count("h1", "d1", 2) == 2


async def test_census_upsert_replaces_same_date(engine):
    engine.upsert_census("h2", 150, "2024-01-05")
    engine.upsert_census("h2", 200, "2024-01-05")
    records = [
        c for c in engine.network.find_facility("h2").census_series
        if c.date == "2024-01-05"
    ]
    assert [c.count for c in records] == [200]
    assert _messages(engine)[0] == "Patient census updated: 200"


async def test_census_defaults_to_clock_date(engine):
    engine.upsert_census("h1", 42)
    facility = engine.network.find_facility("h1")
    assert facility.census_for("2024-01-01").count == 42


async def test_restock_to_capacity(engine):
    # h1 capacity 600, Oxygen ratio 0.8 -> ceiling 480
    assert engine.restock_to_capacity("h1", "d1", "i2") == 480
    assert engine.logs.entries()[0].severity == LogSeverity.SUCCESS


async def test_restock_at_capacity_is_unchanged(engine):
    engine.restock_to_capacity("h1", "d1", "i2")
    before = engine.network
    assert engine.restock_to_capacity("h1", "d1", "i2") == 480
    assert engine.network is before


async def test_restock_offline_field_is_queued(engine):
    engine.set_connectivity(False)
    engine.restock_to_capacity("h1", "d1", "i2")
    assert engine.pending_count == 1
    assert engine._queue.pending[0].delta == 420


async def test_restock_unknown_item(engine):
    assert engine.restock_to_capacity("h1", "d1", "zz") is None


# --- Scenario ----------------------------------------------------------------------

async def test_scenario_bulk_dispense_turns_critical():
    eng = build_engine(make_network())
    for _ in range(5):
        eng.apply_delta("h1", "d1", "i1", -1)
    item = eng.network.resolve_item("h1", "d1", "i1")[2]
    assert item.quantity == 55
    assert not is_critical(item.quantity, item.daily_usage_rate)

    eng.apply_delta("h1", "d1", "i1", -50)
    item = eng.network.resolve_item("h1", "d1", "i1")[2]
    assert item.quantity == 5
    assert classify_item(item) == StockStatus.CRITICAL


async def test_history_after_many_mutations(engine):
    for _ in range(25):
        engine.apply_delta("h1", "d1", "i1", -1)
    history = engine.network.resolve_item("h1", "d1", "i1")[2].history
    assert len(history) == 20
    assert [p.value for p in history] == list(range(294, 274, -1))
    assert all(a.timestamp <= b.timestamp for a, b in zip(history, history[1:]))


# --- Lifecycle ----------------------------------------------------------------------

async def test_start_after_shutdown_raises(engine):
    engine.shutdown()
    with pytest.raises(EngineClosedError):
        engine.start()


async def test_shutdown_is_idempotent(engine):
    engine.shutdown()
    engine.shutdown()
    assert not engine.is_running


async def test_mutations_still_apply_after_shutdown(engine):
    engine.shutdown()
    assert engine.apply_delta("h1", "d1", "i1", -1) == 299


async def test_zero_delta_logged_as_dispensed_success(engine):
    engine.apply_delta("h1", "d1", "i1", 0)
    entry = engine.logs.entries()[0]
    assert entry.message == "Dispensed IV Fluids in Trauma & Emergency"
    assert entry.severity == LogSeverity.SUCCESS

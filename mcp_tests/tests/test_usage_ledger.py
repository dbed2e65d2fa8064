import json
import logging
from datetime import datetime, timedelta

import pytest

import core.usage_ledger as ledger_mod
from core.usage_ledger import USAGE_LOG_KEY, UsageLedger


@pytest.fixture
def clock(monkeypatch):
    # Local noon keeps "yesterday" unambiguous regardless of DST
    t = {"now": datetime(2026, 10, 17, 12, 0, 0).timestamp()}
    monkeypatch.setattr(ledger_mod.time, "time", lambda: t["now"])
    return t


def test_log_usage_appends_and_persists(store, clock):
    ledger = UsageLedger(store)

    rec = ledger.log_usage("directions", True, False)

    assert rec.timestamp == clock["now"]
    assert len(ledger) == 1
    persisted = json.loads(store.get(USAGE_LOG_KEY))
    assert persisted == [
        {"timestamp": clock["now"], "endpoint": "directions", "success": True, "cached": False}
    ]


def test_today_usage_aggregates(store, clock):
    ledger = UsageLedger(store)

    ledger.log_usage("directions", True, False)
    ledger.log_usage("directions", True, True)
    ledger.log_usage("geocode", False, False)

    today = ledger.get_today_usage()
    assert today.total == 3
    assert today.cached == 1
    assert today.api_calls == 2
    assert today.by_endpoint == {"directions": 2, "geocode": 1}


def test_today_usage_excludes_records_before_local_midnight(store, clock):
    ledger = UsageLedger(store)

    clock["now"] -= timedelta(days=1).total_seconds()
    ledger.log_usage("directions", True, False)

    clock["now"] += timedelta(days=1).total_seconds()
    ledger.log_usage("geocode", True, False)

    today = ledger.get_today_usage()
    assert today.total == 1
    assert today.by_endpoint == {"geocode": 1}


def test_cache_hits_do_not_consume_quota(store, clock):
    ledger = UsageLedger(store, daily_limit=2)

    for _ in range(10):
        ledger.log_usage("directions", True, True)
    assert ledger.is_within_rate_limit() is True
    assert ledger.remaining_quota() == 2

    ledger.log_usage("directions", True, False)
    ledger.log_usage("directions", True, False)
    assert ledger.is_within_rate_limit() is False
    assert ledger.remaining_quota() == 0


def test_rate_limit_explicit_limit_overrides_default(store, clock):
    ledger = UsageLedger(store)
    ledger.log_usage("directions", True, False)

    assert ledger.is_within_rate_limit(1) is False
    assert ledger.is_within_rate_limit() is True


def test_ledger_caps_at_most_recent_1000(store, clock):
    ledger = UsageLedger(store)

    for i in range(1500):
        ledger.log_usage(f"e{i}", True, False)

    assert len(ledger) == 1000
    endpoints = [r.endpoint for r in ledger.records()]
    assert endpoints == [f"e{i}" for i in range(500, 1500)]

    persisted = json.loads(store.get(USAGE_LOG_KEY))
    assert len(persisted) == 1000
    assert persisted[0]["endpoint"] == "e500"
    assert persisted[-1]["endpoint"] == "e1499"


def test_ledger_reloads_from_store(store, clock):
    first = UsageLedger(store)
    first.log_usage("directions", True, False)
    first.log_usage("geocode", True, True)

    second = UsageLedger(store)
    assert second.records() == first.records()
    assert second.get_today_usage().api_calls == 1


@pytest.mark.parametrize("raw", ["{not json", '{"a": 1}', "42"])
def test_corrupt_storage_loads_as_empty(store, clock, raw):
    store.set(USAGE_LOG_KEY, raw)

    ledger = UsageLedger(store)
    assert len(ledger) == 0


def test_malformed_items_are_skipped(store, clock):
    store.set(
        USAGE_LOG_KEY,
        json.dumps([{"endpoint": "x"}, {"timestamp": 1.0, "endpoint": "ok", "success": True, "cached": False}]),
    )

    ledger = UsageLedger(store)
    assert [r.endpoint for r in ledger.records()] == ["ok"]


def test_persist_failure_is_logged_and_swallowed(failing_store, clock, caplog):
    ledger = UsageLedger(failing_store)

    with caplog.at_level(logging.WARNING, logger="core.usage_ledger"):
        ledger.log_usage("directions", True, False)

    assert len(ledger) == 1
    assert ledger.get_today_usage().api_calls == 1
    assert "Failed to save usage log" in caplog.text


def test_clear_wipes_memory_and_storage(store, clock):
    ledger = UsageLedger(store)
    ledger.log_usage("directions", True, False)

    ledger.clear()

    assert len(ledger) == 0
    assert store.get(USAGE_LOG_KEY) is None

"""Append-only ledger of provider call attempts.

Every gateway request (cache hit, real call or failure) appends one
UsageRecord. The ledger keeps only the most recent `max_records` entries
and rewrites its persisted copy on each append. Daily aggregates are
derived on demand, never stored.

Day boundary: local midnight of the host clock. Only non-cached records
count against the daily quota; cache hits are free.
"""

from __future__ import annotations

import json
import logging
import time
from collections import deque
from datetime import datetime
from typing import Deque, Dict, List, Optional

from core.errors import StorageError
from core.interfaces import KeyValueStore
from core.models import UsageRecord, UsageSummary

logger = logging.getLogger(__name__)

USAGE_LOG_KEY = "api_usage_log"


def _start_of_local_day(now: float) -> float:
    midnight = datetime.fromtimestamp(now).replace(hour=0, minute=0, second=0, microsecond=0)
    return midnight.timestamp()


class UsageLedger:
    def __init__(
        self,
        store: KeyValueStore,
        *,
        max_records: int = 1000,
        daily_limit: int = 2000,
    ) -> None:
        self._store = store
        self._max_records = max(1, int(max_records))
        self._daily_limit = int(daily_limit)
        self._records: Deque[UsageRecord] = deque(self._load(), maxlen=self._max_records)

    @property
    def daily_limit(self) -> int:
        return self._daily_limit

    def log_usage(self, endpoint: str, success: bool, cached: bool) -> UsageRecord:
        record = UsageRecord(
            timestamp=time.time(),
            endpoint=endpoint,
            success=bool(success),
            cached=bool(cached),
        )
        # deque(maxlen) drops the oldest record on overflow
        self._records.append(record)
        self._save()
        return record

    def get_today_usage(self) -> UsageSummary:
        day_start = _start_of_local_day(time.time())

        total = 0
        cached = 0
        by_endpoint: Dict[str, int] = {}
        for record in self._records:
            if record.timestamp < day_start:
                continue
            total += 1
            by_endpoint[record.endpoint] = by_endpoint.get(record.endpoint, 0) + 1
            if record.cached:
                cached += 1

        return UsageSummary(
            total=total,
            cached=cached,
            api_calls=total - cached,
            by_endpoint=by_endpoint,
        )

    def is_within_rate_limit(self, limit: Optional[int] = None) -> bool:
        ceiling = self._daily_limit if limit is None else int(limit)
        return self.get_today_usage().api_calls < ceiling

    def remaining_quota(self, limit: Optional[int] = None) -> int:
        ceiling = self._daily_limit if limit is None else int(limit)
        return max(0, ceiling - self.get_today_usage().api_calls)

    def records(self) -> List[UsageRecord]:
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def clear(self) -> None:
        self._records.clear()
        try:
            self._store.remove(USAGE_LOG_KEY)
        except StorageError as exc:
            logger.warning("Failed to clear persisted usage log: %s", exc)

    # --- persistence ---

    def _save(self) -> None:
        payload = json.dumps(
            [
                {"timestamp": r.timestamp, "endpoint": r.endpoint, "success": r.success, "cached": r.cached}
                for r in self._records
            ]
        )
        try:
            self._store.set(USAGE_LOG_KEY, payload)
        except StorageError as exc:
            # In-memory ledger stays authoritative for this process
            logger.warning("Failed to save usage log: %s", exc)

    def _load(self) -> List[UsageRecord]:
        try:
            raw = self._store.get(USAGE_LOG_KEY)
        except StorageError as exc:
            logger.warning("Failed to read usage log: %s", exc)
            return []
        if not raw:
            return []

        try:
            items = json.loads(raw)
            if not isinstance(items, list):
                raise ValueError("usage log is not a list")
        except ValueError as exc:
            logger.warning("Discarding unreadable usage log: %s", exc)
            return []

        records: List[UsageRecord] = []
        for item in items:
            try:
                records.append(
                    UsageRecord(
                        timestamp=float(item["timestamp"]),
                        endpoint=str(item["endpoint"]),
                        success=bool(item["success"]),
                        cached=bool(item["cached"]),
                    )
                )
            except (KeyError, TypeError, ValueError):
                logger.debug("Skipping malformed usage record: %r", item)
        return records[-self._max_records:]

"""Entitlement resolution: user -> tier -> features and usage ceilings.

Membership precedence (first match wins):
  1. test-tier override (developer only)
  2. membership persisted for the user
  3. allow-listed test identities -> "test"
  4. "free"

Per-user usage counters roll over lazily: whenever usage is read or
incremented, a stored month stamp that differs from the current UTC month
resets the monthly counter first. There is no background job, so every
mutation path goes through `_roll_over`.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Mapping, Optional, Tuple, cast

from core.errors import StorageError, ValidationError
from core.interfaces import KeyValueStore, OverrideProvider
from core.models import (
    UNLIMITED,
    FeatureValue,
    Limit,
    MembershipLimits,
    MembershipTier,
    UsageLimitCheck,
    UserUsage,
)
from entitlements.tiers import FEATURE_NAMES, TIER_LIMITS

logger = logging.getLogger(__name__)

TEST_USERS: Tuple[str, ...] = (
    "test@example.com",
    "dev@example.com",
    "admin@example.com",
)

_LIMIT_FIELDS = {
    "savedTrips": "max_saved_trips",
    "waypointsPerTrip": "max_waypoints_per_trip",
    "routeCalculations": "monthly_route_calculations",
    "offlineTrips": "max_offline_trips",
}

_USAGE_FIELDS = {
    "routeCalculations": "route_calculations",
    "savedTrips": "saved_trips",
    "offlineTrips": "offline_trips",
}

# Tiers a stored membership may hold; "test" comes only from the allow-list
# or the test-tier override
ASSIGNABLE_TIERS: Tuple[str, ...] = ("free", "basic", "advanced", "expert")

# Counters that reset when the month changes; the rest are standing totals
_MONTHLY_FIELDS = ("route_calculations",)


def _membership_key(user_id: str) -> str:
    return f"membership_{user_id}"


def _usage_key(user_id: str) -> str:
    return f"usage_{user_id}"


def _now_utc() -> datetime:
    return datetime.fromtimestamp(time.time(), tz=timezone.utc)


def _current_month() -> str:
    return _now_utc().strftime("%Y-%m")


class EntitlementResolver:
    def __init__(
        self,
        store: KeyValueStore,
        overrides: OverrideProvider,
        *,
        test_users: Tuple[str, ...] = TEST_USERS,
        tiers: Mapping[str, MembershipLimits] = TIER_LIMITS,
    ) -> None:
        self._store = store
        self._overrides = overrides
        self._test_users = frozenset(test_users)
        self._tiers = tiers

    # --- membership ---

    def get_user_membership(self, user_id: Optional[str]) -> MembershipTier:
        if not user_id:
            return "free"

        test_tier = self._overrides.get_test_tier()
        if test_tier is not None:
            return test_tier

        try:
            stored = self._store.get(_membership_key(user_id))
        except StorageError as exc:
            logger.error("Error reading membership for %s: %s", user_id, exc)
            stored = None
        if stored in ASSIGNABLE_TIERS:
            return cast(MembershipTier, stored)

        if user_id in self._test_users:
            return "test"

        return "free"

    def set_user_membership(self, user_id: str, tier: str) -> None:
        if not user_id:
            raise ValidationError("user_id is required")
        if tier not in ASSIGNABLE_TIERS:
            raise ValidationError(f"Membership tier cannot be assigned: {tier!r}")
        self._store.set(_membership_key(user_id), tier)

    def is_test_user(self, user_id: Optional[str]) -> bool:
        return bool(user_id) and user_id in self._test_users

    def get_membership_limits(self, tier: MembershipTier) -> MembershipLimits:
        return self._tiers[tier]

    def get_user_features(self, user_id: Optional[str]) -> Mapping[str, FeatureValue]:
        return self._tiers[self.get_user_membership(user_id)].features

    # --- features ---

    def is_feature_enabled(self, feature_name: str, user_id: Optional[str]) -> bool:
        if feature_name not in FEATURE_NAMES:
            raise ValidationError(f"Unknown feature: {feature_name!r}")

        override = self._overrides.get_feature_override(feature_name)
        if override is not None:
            return override

        return bool(self.get_user_features(user_id)[feature_name])

    # --- usage ceilings ---

    def check_usage_limit(
        self,
        user_id: Optional[str],
        limit_type: str,
        current_value: int,
    ) -> UsageLimitCheck:
        """Gate the NEXT creation action; never revokes existing content."""
        field_name = _LIMIT_FIELDS.get(limit_type)
        if field_name is None:
            raise ValidationError(f"Unknown limit type: {limit_type!r}")

        limits = self._tiers[self.get_user_membership(user_id)]
        limit: Limit = getattr(limits, field_name)

        if limit == UNLIMITED:
            return UsageLimitCheck(allowed=True, limit=UNLIMITED, remaining=UNLIMITED)

        ceiling = int(limit)
        return UsageLimitCheck(
            allowed=current_value < ceiling,
            limit=ceiling,
            remaining=max(0, ceiling - current_value),
        )

    # --- per-user usage ---

    def get_user_usage(self, user_id: str) -> UserUsage:
        usage = self._load_usage(user_id)
        self._roll_over(usage)
        return usage

    def increment_usage_count(self, user_id: str, usage_type: str, amount: int = 1) -> UserUsage:
        field_name = _USAGE_FIELDS.get(usage_type)
        if field_name is None:
            raise ValidationError(f"Unknown usage type: {usage_type!r}")
        if not user_id:
            raise ValidationError("user_id is required")

        usage = self.get_user_usage(user_id)
        setattr(usage, field_name, getattr(usage, field_name) + int(amount))
        self._save_usage(usage)
        return usage

    def reset_monthly_limits(self, user_id: str) -> UserUsage:
        usage = self._load_usage(user_id)
        for name in _MONTHLY_FIELDS:
            setattr(usage, name, 0)
        usage.current_month = _current_month()
        usage.last_reset = _now_utc().isoformat()
        self._save_usage(usage)
        return usage

    def _roll_over(self, usage: UserUsage) -> bool:
        month = _current_month()
        if usage.current_month == month:
            return False
        usage.current_month = month
        for name in _MONTHLY_FIELDS:
            setattr(usage, name, 0)
        usage.last_reset = _now_utc().isoformat()
        return True

    def _default_usage(self, user_id: str) -> UserUsage:
        return UserUsage(
            user_id=user_id,
            tier=self.get_user_membership(user_id),
            current_month=_current_month(),
            last_reset=_now_utc().isoformat(),
        )

    def _load_usage(self, user_id: str) -> UserUsage:
        try:
            raw = self._store.get(_usage_key(user_id))
        except StorageError as exc:
            logger.error("Error reading usage for %s: %s", user_id, exc)
            raw = None
        if not raw:
            return self._default_usage(user_id)

        try:
            data = json.loads(raw)
            usage = UserUsage(
                user_id=user_id,
                tier=self.get_user_membership(user_id),
                current_month=str(data["current_month"]),
                route_calculations=int(data.get("route_calculations", 0)),
                saved_trips=int(data.get("saved_trips", 0)),
                offline_trips=int(data.get("offline_trips", 0)),
                last_reset=str(data.get("last_reset", "")),
            )
        except (ValueError, TypeError, KeyError, AttributeError) as exc:
            logger.warning("Discarding unreadable usage for %s: %s", user_id, exc)
            return self._default_usage(user_id)
        return usage

    def _save_usage(self, usage: UserUsage) -> None:
        try:
            self._store.set(_usage_key(usage.user_id), json.dumps(asdict(usage)))
        except StorageError as exc:
            logger.error("Error saving usage for %s: %s", usage.user_id, exc)


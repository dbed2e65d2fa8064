"""Developer overrides backed by a KeyValueStore.

Two escape hatches for non-production testing:
- a single test-tier override (`dev_test_tier`) that beats every other
  membership source, held in-process and mirrored to storage;
- per-feature boolean overrides (`feature_<name>`) that beat the tier table.
"""

from __future__ import annotations

import logging
from typing import Optional, cast

from core.errors import StorageError, ValidationError
from core.interfaces import KeyValueStore
from core.models import MEMBERSHIP_TIERS, MembershipTier
from entitlements.tiers import FEATURE_NAMES

logger = logging.getLogger(__name__)

TEST_TIER_KEY = "dev_test_tier"
FEATURE_OVERRIDE_PREFIX = "feature_"


def _feature_key(feature_name: str) -> str:
    return f"{FEATURE_OVERRIDE_PREFIX}{feature_name}"


def _require_feature(feature_name: str) -> None:
    if feature_name not in FEATURE_NAMES:
        raise ValidationError(f"Unknown feature: {feature_name!r}")


class StoreOverrideProvider:
    def __init__(self, store: KeyValueStore) -> None:
        self._store = store
        self._test_tier: Optional[MembershipTier] = None

    # --- test tier ---

    def set_test_tier(self, tier: str) -> None:
        if tier not in MEMBERSHIP_TIERS:
            raise ValidationError(f"Unknown membership tier: {tier!r}")
        self._test_tier = cast(MembershipTier, tier)
        self._store.set(TEST_TIER_KEY, tier)
        logger.info("Test tier override set to %s", tier)

    def get_test_tier(self) -> Optional[MembershipTier]:
        if self._test_tier is not None:
            return self._test_tier

        try:
            stored = self._store.get(TEST_TIER_KEY)
        except StorageError as exc:
            logger.warning("Failed to read test tier override: %s", exc)
            return None
        if stored in MEMBERSHIP_TIERS:
            self._test_tier = cast(MembershipTier, stored)
            return self._test_tier
        return None

    def clear_test_tier(self) -> None:
        self._test_tier = None
        self._store.remove(TEST_TIER_KEY)
        logger.info("Test tier override cleared")

    # --- feature overrides ---

    def set_feature_override(self, feature_name: str, enabled: bool) -> None:
        _require_feature(feature_name)
        self._store.set(_feature_key(feature_name), "true" if enabled else "false")

    def get_feature_override(self, feature_name: str) -> Optional[bool]:
        try:
            raw = self._store.get(_feature_key(feature_name))
        except StorageError as exc:
            logger.warning("Failed to read override for %s: %s", feature_name, exc)
            return None
        if raw == "true":
            return True
        if raw == "false":
            return False
        return None

    def clear_feature_overrides(self) -> None:
        for name in sorted(FEATURE_NAMES):
            self._store.remove(_feature_key(name))

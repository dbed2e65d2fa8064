"""Core protocol and interface definitions.

Defines the KeyValueStore protocol used for durable state (usage ledger,
memberships, per-user usage) and the OverrideProvider protocol through
which developer overrides reach the entitlement resolver.
"""

from __future__ import annotations

from typing import Optional, Protocol

from core.models import MembershipTier


class KeyValueStore(Protocol):
    """Contract for any string key-value backend (memory, JSON file, ...)."""
    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def remove(self, key: str) -> None:
        ...


class OverrideProvider(Protocol):
    """Developer-controlled escape hatches that take precedence over tier data."""
    def get_test_tier(self) -> Optional[MembershipTier]:
        ...

    def get_feature_override(self, feature_name: str) -> Optional[bool]:
        ...

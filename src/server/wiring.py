"""Composition root: builds the long-lived governor objects once.

Cache, ledger and resolver are owned here and passed by reference to the
gateway, route service and tools.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from clients.ors_client import OpenRouteServiceClient
from config import (
    CACHE_MAXSIZE,
    DAILY_API_QUOTA,
    GEOCODE_CACHE_TTL,
    GEOCODE_COUNTRY,
    HTTP_VERIFY,
    ORS_API_KEY,
    ORS_BASE_URL,
    ORS_TIMEOUT,
    ROUTE_CACHE_TTL,
    STATE_FILE,
    USAGE_LOG_MAX_RECORDS,
)
from core.cache import TTLCache
from core.interfaces import KeyValueStore
from core.usage_ledger import UsageLedger
from entitlements.overrides import StoreOverrideProvider
from entitlements.resolver import EntitlementResolver
from routing.gateway import QuotaAwareGateway
from routing.route_service import RouteService
from storage.json_file_store import JsonFileStore


@dataclass(frozen=True)
class Services:
    store: KeyValueStore
    cache: TTLCache[Any]
    ledger: UsageLedger
    overrides: StoreOverrideProvider
    resolver: EntitlementResolver
    gateway: QuotaAwareGateway
    route_service: RouteService


def build_services(
    *,
    store: Optional[KeyValueStore] = None,
    state_file: Path = STATE_FILE,
    client: Optional[OpenRouteServiceClient] = None,
    api_key: str = ORS_API_KEY,
    daily_quota: int = DAILY_API_QUOTA,
) -> Services:
    kv = store if store is not None else JsonFileStore(state_file)

    cache: TTLCache[Any] = TTLCache(ttl_seconds=ROUTE_CACHE_TTL, maxsize=CACHE_MAXSIZE)
    ledger = UsageLedger(kv, max_records=USAGE_LOG_MAX_RECORDS, daily_limit=daily_quota)
    overrides = StoreOverrideProvider(kv)
    resolver = EntitlementResolver(kv, overrides)

    ors = client or OpenRouteServiceClient(
        api_key=api_key,
        base_url=ORS_BASE_URL,
        timeout=ORS_TIMEOUT,
        verify=HTTP_VERIFY,
    )
    gateway = QuotaAwareGateway(
        client=ors,
        cache=cache,
        ledger=ledger,
        route_ttl=ROUTE_CACHE_TTL,
        geocode_ttl=GEOCODE_CACHE_TTL,
    )
    route_service = RouteService(
        gateway=gateway,
        resolver=resolver,
        geocode_country=GEOCODE_COUNTRY,
    )

    return Services(
        store=kv,
        cache=cache,
        ledger=ledger,
        overrides=overrides,
        resolver=resolver,
        gateway=gateway,
        route_service=route_service,
    )

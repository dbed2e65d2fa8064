"""Quota-aware gateway in front of the metered routing provider.

Per request (directions or geocode):

  cache check -> hit: return cached
              -> miss: configured? -> no: None
                                   -> yes: within daily quota? -> no: None (no network)
                                                               -> yes: remote call
  remote call -> 401 / 429 / empty result: None
              -> other failure: raise ExternalServiceError
              -> result: cache, return

Every request appends exactly one ledger record (cache hit, real success
or failure), including requests rejected for invalid input. This is also
the single place where the provider's [lng, lat] pairs are translated to
and from LatLng.

The quota check is advisory: concurrent callers may both pass it.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from clients.ors_client import OpenRouteServiceClient
from core.cache import TTLCache
from core.cache_keys import geocode_cache_key, route_cache_key
from core.errors import AuthorizationError, ExternalServiceError, QuotaExceededError, ValidationError
from core.models import ROUTING_PROFILES, DirectionsRoute, GeocodeResult, LatLng, UsageSummary
from core.usage_ledger import UsageLedger
from routing.geo import decode_polyline

logger = logging.getLogger(__name__)

DIRECTIONS_ENDPOINT = "directions"
GEOCODE_ENDPOINT = "geocode"

ROUTE_TTL_SECONDS = 60 * 60 * 24
GEOCODE_TTL_SECONDS = 60 * 60 * 24 * 30


def _to_lnglat(waypoints: Sequence[LatLng]) -> List[Tuple[float, float]]:
    return [(w.lng, w.lat) for w in waypoints]


def _from_lnglat(pair: Sequence[Any]) -> LatLng:
    return LatLng(lat=float(pair[1]), lng=float(pair[0]))


def _parse_geometry(raw: Any, *, elevation: bool) -> Tuple[LatLng, ...]:
    if raw is None:
        return ()
    if isinstance(raw, str):
        return tuple(decode_polyline(raw, with_elevation=elevation))
    if isinstance(raw, Mapping):
        return tuple(_from_lnglat(c) for c in raw.get("coordinates") or [])
    raise ValueError(f"unsupported geometry type: {type(raw).__name__}")


def _parse_route(route: Mapping[str, Any], *, elevation: bool) -> DirectionsRoute:
    summary = route.get("summary") or {}
    steps = [
        dict(step)
        for segment in route.get("segments") or []
        for step in segment.get("steps") or []
    ]
    return DirectionsRoute(
        distance_m=float(summary.get("distance", 0.0)),
        duration_s=float(summary.get("duration", 0.0)),
        geometry=_parse_geometry(route.get("geometry"), elevation=elevation),
        steps=tuple(steps),
    )


class QuotaAwareGateway:
    def __init__(
        self,
        *,
        client: OpenRouteServiceClient,
        cache: TTLCache[Any],
        ledger: UsageLedger,
        route_ttl: float = ROUTE_TTL_SECONDS,
        geocode_ttl: float = GEOCODE_TTL_SECONDS,
    ) -> None:
        self._client = client
        self._cache = cache
        self._ledger = ledger
        self._route_ttl = float(route_ttl)
        self._geocode_ttl = float(geocode_ttl)

    def is_configured(self) -> bool:
        return self._client.is_configured()

    async def get_directions(
        self,
        waypoints: Sequence[LatLng],
        profile: str = "driving-car",
        *,
        include_instructions: bool = True,
        include_geometry: bool = True,
        include_elevation: bool = False,
    ) -> Optional[DirectionsRoute]:
        """Return the provider's first route, or None when it cannot be had."""
        if profile not in ROUTING_PROFILES:
            self._ledger.log_usage(DIRECTIONS_ENDPOINT, False, False)
            raise ValidationError(f"Unsupported routing profile: {profile!r}")
        if len(waypoints) < 2:
            self._ledger.log_usage(DIRECTIONS_ENDPOINT, False, False)
            raise ValidationError("At least two waypoints are required")

        cache_key = route_cache_key(waypoints, profile)
        cached = self._cache.get(cache_key)
        if cached is not None:
            self._ledger.log_usage(DIRECTIONS_ENDPOINT, True, True)
            return cached

        if not self._may_call_remote(DIRECTIONS_ENDPOINT):
            return None

        try:
            payload = await self._client.directions(
                _to_lnglat(waypoints),
                profile=profile,
                instructions=include_instructions,
                geometry=include_geometry,
                elevation=include_elevation,
            )
            routes = payload.get("routes") or []
            if not routes:
                logger.warning("OpenRouteService: no routes found")
                self._ledger.log_usage(DIRECTIONS_ENDPOINT, False, False)
                return None
            route = _parse_route(routes[0], elevation=include_elevation)
        except (AuthorizationError, QuotaExceededError) as e:
            logger.warning("Directions request refused: %s", e)
            self._ledger.log_usage(DIRECTIONS_ENDPOINT, False, False)
            return None
        except ExternalServiceError:
            self._ledger.log_usage(DIRECTIONS_ENDPOINT, False, False)
            raise
        except (KeyError, IndexError, TypeError, ValueError, AttributeError) as e:
            self._ledger.log_usage(DIRECTIONS_ENDPOINT, False, False)
            raise ExternalServiceError(f"Malformed directions response: {e}") from e

        self._cache.set(cache_key, route, self._route_ttl)
        self._ledger.log_usage(DIRECTIONS_ENDPOINT, True, False)
        return route

    async def geocode(
        self,
        query: str,
        *,
        country: Optional[str] = None,
        limit: int = 1,
    ) -> Optional[GeocodeResult]:
        """Resolve free text to the provider's first match, or None."""
        text = (query or "").strip()
        if not text:
            self._ledger.log_usage(GEOCODE_ENDPOINT, False, False)
            raise ValidationError("Address is empty")

        cache_key = geocode_cache_key(text, country)
        cached = self._cache.get(cache_key)
        if cached is not None:
            self._ledger.log_usage(GEOCODE_ENDPOINT, True, True)
            return cached

        if not self._may_call_remote(GEOCODE_ENDPOINT):
            return None

        try:
            payload = await self._client.geocode_search(text, size=limit, country=country)
            features = payload.get("features") or []
            if not features:
                self._ledger.log_usage(GEOCODE_ENDPOINT, False, False)
                return None
            feature = features[0]
            point = _from_lnglat(feature["geometry"]["coordinates"])
            result = GeocodeResult(
                lat=point.lat,
                lng=point.lng,
                label=str((feature.get("properties") or {}).get("label", text)),
            )
        except (AuthorizationError, QuotaExceededError) as e:
            logger.warning("Geocode request refused: %s", e)
            self._ledger.log_usage(GEOCODE_ENDPOINT, False, False)
            return None
        except ExternalServiceError:
            self._ledger.log_usage(GEOCODE_ENDPOINT, False, False)
            raise
        except (KeyError, IndexError, TypeError, ValueError, AttributeError) as e:
            self._ledger.log_usage(GEOCODE_ENDPOINT, False, False)
            raise ExternalServiceError(f"Malformed geocode response: {e}") from e

        self._cache.set(cache_key, result, self._geocode_ttl)
        self._ledger.log_usage(GEOCODE_ENDPOINT, True, False)
        return result

    def get_usage_stats(self) -> UsageSummary:
        return self._ledger.get_today_usage()

    def get_remaining_quota(self, daily_limit: Optional[int] = None) -> int:
        return self._ledger.remaining_quota(daily_limit)

    def cache_stats(self) -> Dict[str, object]:
        return self._cache.stats()

    def _may_call_remote(self, endpoint: str) -> bool:
        if not self._client.is_configured():
            logger.warning("OpenRouteService API key not configured")
            self._ledger.log_usage(endpoint, False, False)
            return False
        if not self._ledger.is_within_rate_limit():
            logger.warning("OpenRouteService daily quota reached")
            self._ledger.log_usage(endpoint, False, False)
            return False
        return True

"""Dataclasses and type aliases shared across the governor.

Includes coordinate and route models (LatLng, DirectionsRoute,
GeocodeResult, RouteEstimate), usage-ledger records and the membership
models used by the entitlement resolver.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Mapping, Optional, Tuple, Union

from core.errors import ValidationError


MembershipTier = Literal["free", "basic", "advanced", "expert", "test"]
MEMBERSHIP_TIERS: Tuple[str, ...] = ("free", "basic", "advanced", "expert", "test")

RoutingProfile = Literal["driving-car", "driving-hgv"]
ROUTING_PROFILES: Tuple[str, ...] = ("driving-car", "driving-hgv")

UNLIMITED = "unlimited"
Limit = Union[int, Literal["unlimited"]]
FeatureValue = Union[bool, int, str, Tuple[str, ...]]

LimitType = Literal["savedTrips", "waypointsPerTrip", "routeCalculations", "offlineTrips"]
UsageType = Literal["routeCalculations", "savedTrips", "offlineTrips"]


@dataclass(frozen=True)
class LatLng:
    """A point in the internal {lat, lng} convention."""

    lat: float
    lng: float

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "LatLng":
        try:
            lat = float(raw["lat"])
            lng = float(raw["lng"])
        except (KeyError, TypeError, ValueError) as e:
            raise ValidationError(f"Invalid waypoint: {raw!r}") from e
        if not -90.0 <= lat <= 90.0 or not -180.0 <= lng <= 180.0:
            raise ValidationError(f"Waypoint out of range: lat={lat}, lng={lng}")
        return cls(lat=lat, lng=lng)


@dataclass(frozen=True)
class DirectionsRoute:
    """First route returned by the provider, already translated to LatLng."""

    distance_m: float
    duration_s: float
    geometry: Tuple[LatLng, ...] = ()
    steps: Tuple[Dict[str, Any], ...] = ()


@dataclass(frozen=True)
class GeocodeResult:
    lat: float
    lng: float
    label: str


@dataclass(frozen=True)
class RouteEstimate:
    """Outcome of a route calculation.

    `source == "estimate"` marks the local haversine approximation, which
    never carries geometry or instructions.
    """

    distance_km: float
    duration_h: float
    source: Literal["remote", "estimate"]
    geometry: Optional[List[LatLng]] = None
    instructions: Optional[List[Dict[str, Any]]] = None


@dataclass(frozen=True)
class UsageRecord:
    timestamp: float  # epoch seconds
    endpoint: str
    success: bool
    cached: bool


@dataclass(frozen=True)
class UsageSummary:
    total: int
    cached: int
    api_calls: int
    by_endpoint: Dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class MembershipLimits:
    max_saved_trips: Limit
    max_waypoints_per_trip: Limit
    monthly_route_calculations: Limit
    max_offline_trips: Limit
    features: Mapping[str, FeatureValue]


@dataclass
class UserUsage:
    user_id: str
    tier: MembershipTier
    current_month: str  # YYYY-MM (UTC)
    route_calculations: int = 0
    saved_trips: int = 0
    offline_trips: int = 0
    last_reset: str = ""


@dataclass(frozen=True)
class UsageLimitCheck:
    allowed: bool
    limit: Limit
    remaining: Limit

"""OpenRouteService HTTP client.

Thin async wrapper around two ORS endpoints: directions (POST) and
geocode search (GET). It speaks the provider's wire convention
([lng, lat] pairs) and maps HTTP outcomes to typed errors; caching, quota
and coordinate translation live in `routing.gateway`.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

import httpx

from core.errors import AuthorizationError, ExternalServiceError, QuotaExceededError


class OpenRouteServiceClient:
    DIRECTIONS_PATH = "/v2/directions"
    GEOCODE_PATH = "/geocode/search"

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str = "https://api.openrouteservice.org",
        timeout: float = 20.0,
        verify: bool = True,
    ) -> None:
        self._api_key = (api_key or "").strip()
        self._base_url = (base_url or "").rstrip("/")
        self._timeout = float(timeout)
        self._verify = bool(verify)

    def is_configured(self) -> bool:
        return bool(self._api_key)

    async def directions(
        self,
        coordinates: Sequence[Tuple[float, float]],
        *,
        profile: str = "driving-car",
        instructions: bool = True,
        geometry: bool = True,
        elevation: bool = False,
    ) -> Dict[str, Any]:
        """POST a directions request; `coordinates` are [lng, lat] pairs."""
        body: Dict[str, Any] = {
            "coordinates": [[lng, lat] for lng, lat in coordinates],
            "units": "m",
            "language": "en",
            "geometry": geometry,
            "instructions": instructions,
            "elevation": elevation,
        }
        if elevation:
            body["extra_info"] = ["surface"]

        async with self._create_client() as client:
            resp = await self._send(
                client,
                "POST",
                f"{self.DIRECTIONS_PATH}/{profile}",
                json=body,
                headers={"Content-Type": "application/json"},
            )
            return self._json(resp, context="directions")

    async def geocode_search(
        self,
        text: str,
        *,
        size: int = 1,
        country: Optional[str] = None,
    ) -> Dict[str, Any]:
        params: Dict[str, Any] = {"text": text, "size": str(max(1, int(size)))}
        if country:
            params["boundary.country"] = country

        async with self._create_client() as client:
            resp = await self._send(client, "GET", self.GEOCODE_PATH, params=params)
            return self._json(resp, context="geocode")

    # --- HTTP helpers ---

    def _create_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            headers={
                "Authorization": self._api_key,
                "Accept": "application/json",
                "User-Agent": "route-governor-mcp",
            },
            timeout=self._timeout,
            verify=self._verify,
        )

    async def _send(
        self,
        client: httpx.AsyncClient,
        method: str,
        url: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        json: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> httpx.Response:
        try:
            resp = await client.request(method, url, params=params, json=json, headers=headers)
        except httpx.HTTPError as e:
            raise ExternalServiceError(f"Failed to call OpenRouteService ({method} {url}): {e}") from e

        if resp.status_code == 401:
            raise AuthorizationError("OpenRouteService rejected the API key")
        if resp.status_code == 429:
            raise QuotaExceededError("OpenRouteService rate limit exceeded")

        try:
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ExternalServiceError(f"OpenRouteService returned an error: {e}") from e
        return resp

    def _json(self, resp: httpx.Response, *, context: str) -> Dict[str, Any]:
        try:
            data = resp.json()
        except ValueError as e:
            raise ExternalServiceError(f"Malformed OpenRouteService response ({context})") from e
        if not isinstance(data, dict):
            raise ExternalServiceError(f"Unexpected OpenRouteService payload ({context})")
        return data

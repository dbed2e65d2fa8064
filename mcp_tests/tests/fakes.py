"""Shared test doubles for the provider client."""

ROUTE_PAYLOAD = {
    "routes": [
        {
            "summary": {"distance": 615000.0, "duration": 21600.0},
            "geometry": {"coordinates": [[-122.4194, 37.7749], [-118.2437, 34.0522]]},
            "segments": [
                {"steps": [{"instruction": "Head south", "distance": 10.0}]},
                {"steps": [{"instruction": "Arrive", "distance": 0.0}]},
            ],
        },
        {"summary": {"distance": 1.0, "duration": 1.0}},
    ]
}

GEOCODE_PAYLOAD = {
    "features": [
        {
            "geometry": {"coordinates": [-122.4194, 37.7749]},
            "properties": {"label": "San Francisco, CA, USA"},
        }
    ]
}


class FakeORSClient:
    """Duck-typed stand-in for OpenRouteServiceClient."""

    def __init__(self, *, configured=True, directions=ROUTE_PAYLOAD, geocode=GEOCODE_PAYLOAD, error=None):
        self.configured = configured
        self.directions_payload = directions
        self.geocode_payload = geocode
        self.error = error
        self.directions_calls = []
        self.geocode_calls = []

    def is_configured(self):
        return self.configured

    async def directions(self, coordinates, **kwargs):
        self.directions_calls.append((list(coordinates), kwargs))
        if self.error:
            raise self.error
        return self.directions_payload

    async def geocode_search(self, text, **kwargs):
        self.geocode_calls.append((text, kwargs))
        if self.error:
            raise self.error
        return self.geocode_payload



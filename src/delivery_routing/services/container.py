from __future__ import annotations

from delivery_routing.services.cache import CacheStore
from delivery_routing.services.distance import DistanceOracle
from delivery_routing.services.geocoding import GeocodeOracle
from delivery_routing.services.google_maps import GoogleMapsClient
from delivery_routing.services.optimization import RouteOptimizer
from delivery_routing.services.usage import UsageTracker


class GeodataServices:
    """One shared cache store wired into every oracle, tracker and optimizer."""

    def __init__(
        self,
        cache_store: CacheStore | None = None,
        maps_client: GoogleMapsClient | None = None,
    ) -> None:
        self.cache_store = cache_store or CacheStore()
        self.maps_client = maps_client or GoogleMapsClient()
        self.distance_oracle = DistanceOracle(self.cache_store, self.maps_client)
        self.geocode_oracle = GeocodeOracle(self.cache_store, self.maps_client)
        self.usage_tracker = UsageTracker(self.cache_store)
        self.route_optimizer = RouteOptimizer(self.distance_oracle)

from __future__ import annotations

import logging
from typing import Any

from django.conf import settings

from delivery_routing.exceptions import CacheStoreError, ExternalServiceError
from delivery_routing.services.cache import CacheStore
from delivery_routing.services.geo import corrected_distance_km
from delivery_routing.services.google_maps import GoogleMapsClient
from delivery_routing.services.quota import DISTANCE_ORACLE_COUNTER, log_quota_progress
from delivery_routing.services.types import GeoPoint

logger = logging.getLogger(__name__)


class DistanceOracle:
    """Answers "how far is A from B" in kilometres without ever failing.

    Lookup order is cache, daily quota, Google Distance Matrix, then the
    haversine estimate. Whatever is returned is cached under the directional
    ``A->B`` key, so ``B->A`` is looked up and cached separately.
    """

    def __init__(
        self,
        cache_store: CacheStore,
        maps_client: GoogleMapsClient | None = None,
        *,
        max_daily_calls: int | None = None,
        correction_factor: float | None = None,
        cache_ttl_seconds: int | None = None,
    ) -> None:
        self.cache_store = cache_store
        self.maps_client = maps_client or GoogleMapsClient()
        self.max_daily_calls = (
            max_daily_calls if max_daily_calls is not None else settings.GOOGLE_API_MAX_DAILY
        )
        self.correction_factor = (
            correction_factor if correction_factor is not None else settings.URBAN_DISTANCE_FACTOR
        )
        self.cache_ttl_seconds = (
            cache_ttl_seconds
            if cache_ttl_seconds is not None
            else settings.DISTANCE_CACHE_TTL_SECONDS
        )

    async def get_distance_km(self, point_a: GeoPoint, point_b: GeoPoint) -> float:
        cache_key = self._cache_key(point_a, point_b)
        cached = await self._read_cache(cache_key)
        if cached is not None:
            logger.debug("Distance cache hit %s = %s km", cache_key, cached)
            return float(cached)

        try:
            calls_today = await self.cache_store.increment_daily_counter(DISTANCE_ORACLE_COUNTER)
        except CacheStoreError:
            logger.warning(
                "Distance quota counter unavailable, using offline fallback", exc_info=True
            )
            return await self._fallback(cache_key, point_a, point_b)

        if calls_today > self.max_daily_calls:
            logger.warning(
                "Distance API daily limit reached (%s/%s)", calls_today, self.max_daily_calls
            )
            return await self._fallback(cache_key, point_a, point_b)

        log_quota_progress(logger, "Distance API", calls_today, self.max_daily_calls)

        if self.maps_client.is_configured:
            distance_km = await self._lookup(point_a, point_b)
            if distance_km is not None:
                logger.info("Distance API %s = %.2f km", cache_key, distance_km)
                return await self._store(cache_key, distance_km)
        else:
            logger.warning("GOOGLE_MAPS_API_KEY missing, using offline fallback")

        return await self._fallback(cache_key, point_a, point_b)

    async def _lookup(self, point_a: GeoPoint, point_b: GeoPoint) -> float | None:
        try:
            payload = await self.maps_client.distance_matrix(point_a, point_b)
        except ExternalServiceError:
            logger.error("Distance Matrix lookup failed after retries", exc_info=True)
            return None

        return self._parse_distance_km(payload)

    async def _fallback(self, cache_key: str, point_a: GeoPoint, point_b: GeoPoint) -> float:
        distance_km = corrected_distance_km(point_a, point_b, self.correction_factor)
        logger.info("Offline fallback %s = %.2f km", cache_key, distance_km)
        return await self._store(cache_key, distance_km)

    async def _store(self, cache_key: str, distance_km: float) -> float:
        # Fresh lookups return the stored 2-decimal value so they match later cache hits.
        # Candidates closer than 5 m can therefore tie and fall to working-set order.
        value = f"{distance_km:.2f}"
        try:
            await self.cache_store.set_or_replace(cache_key, self.cache_ttl_seconds, value)
        except CacheStoreError:
            logger.warning("Could not cache distance %s", cache_key, exc_info=True)
        return float(value)

    async def _read_cache(self, cache_key: str) -> Any | None:
        try:
            return await self.cache_store.get(cache_key)
        except CacheStoreError:
            logger.warning("Distance cache read failed for %s", cache_key, exc_info=True)
            return None

    @staticmethod
    def _cache_key(point_a: GeoPoint, point_b: GeoPoint) -> str:
        return (
            f"dist:{point_a.latitude},{point_a.longitude}"
            f"->{point_b.latitude},{point_b.longitude}"
        )

    @staticmethod
    def _parse_distance_km(payload: dict[str, Any]) -> float | None:
        if payload.get("status") != "OK":
            logger.warning("Distance Matrix returned status %s", payload.get("status"))
            return None

        try:
            element = payload["rows"][0]["elements"][0]
            if element.get("status") != "OK":
                logger.warning("Distance Matrix element status %s", element.get("status"))
                return None
            meters = float(element["distance"]["value"])
        except (KeyError, IndexError, TypeError, ValueError, AttributeError):
            logger.warning("Distance Matrix response could not be parsed")
            return None

        if meters < 0:
            logger.warning("Distance Matrix returned a negative distance (%s m)", meters)
            return None
        return meters / 1000.0

from __future__ import annotations

import hashlib
import json
import logging
from typing import Any

from django.conf import settings

from delivery_routing.exceptions import CacheStoreError, ExternalServiceError
from delivery_routing.services.cache import CacheStore
from delivery_routing.services.google_maps import GoogleMapsClient
from delivery_routing.services.quota import GEOCODE_ORACLE_COUNTER, log_quota_progress
from delivery_routing.services.types import GeocodeBatchItem, GeoPoint

logger = logging.getLogger(__name__)

MIN_ADDRESS_LENGTH = 3


class GeocodeOracle:
    def __init__(
        self,
        cache_store: CacheStore,
        maps_client: GoogleMapsClient | None = None,
        *,
        max_daily_calls: int | None = None,
        cache_ttl_seconds: int | None = None,
    ) -> None:
        self.cache_store = cache_store
        self.maps_client = maps_client or GoogleMapsClient()
        self.max_daily_calls = (
            max_daily_calls if max_daily_calls is not None else settings.GOOGLE_API_MAX_DAILY
        )
        self.cache_ttl_seconds = (
            cache_ttl_seconds
            if cache_ttl_seconds is not None
            else settings.GEOCODE_CACHE_TTL_SECONDS
        )

    async def geocode_address(self, address: str) -> GeoPoint | None:
        if not address or len(address.strip()) < MIN_ADDRESS_LENGTH:
            return None

        cache_key = self._cache_key(address)
        cached = await self._read_cache(cache_key)
        if cached is not None:
            point = self._parse_cached(cached)
            if point is not None:
                logger.debug("Geocode cache hit %r = %s", address, cached)
                return point

        try:
            calls_today = await self.cache_store.increment_daily_counter(GEOCODE_ORACLE_COUNTER)
        except CacheStoreError:
            logger.warning("Geocode quota counter unavailable", exc_info=True)
            return None

        if calls_today > self.max_daily_calls:
            logger.warning(
                "Geocoding API daily limit reached (%s/%s)", calls_today, self.max_daily_calls
            )
            return None

        log_quota_progress(logger, "Geocoding API", calls_today, self.max_daily_calls)

        if not self.maps_client.is_configured:
            logger.warning("GOOGLE_MAPS_API_KEY missing, cannot geocode")
            return None

        try:
            payload = await self.maps_client.geocode(address)
        except ExternalServiceError:
            logger.error("Geocoding request failed for %r", address, exc_info=True)
            return None

        point = self._parse_result(payload)
        if point is None:
            logger.warning("Geocoding failed for %r: %s", address, payload.get("status"))
            return None

        logger.info("Geocoded %r = %s,%s", address, point.latitude, point.longitude)
        try:
            await self.cache_store.set_or_replace(
                cache_key,
                self.cache_ttl_seconds,
                json.dumps({"lat": point.latitude, "lng": point.longitude}),
            )
        except CacheStoreError:
            logger.warning("Could not cache geocode for %r", address, exc_info=True)
        return point

    async def geocode_batch(self, addresses: list[str]) -> list[GeocodeBatchItem]:
        results: list[GeocodeBatchItem] = []
        for address in addresses:
            point = await self.geocode_address(address)
            if point is None:
                results.append(
                    GeocodeBatchItem(
                        address=address, latitude=None, longitude=None, status="FAILED"
                    )
                )
            else:
                results.append(
                    GeocodeBatchItem(
                        address=address,
                        latitude=point.latitude,
                        longitude=point.longitude,
                        status="OK",
                    )
                )
        return results

    async def _read_cache(self, cache_key: str) -> Any | None:
        try:
            return await self.cache_store.get(cache_key)
        except CacheStoreError:
            logger.warning("Geocode cache read failed for %s", cache_key, exc_info=True)
            return None

    @staticmethod
    def _cache_key(address: str) -> str:
        digest = hashlib.sha1(address.lower().encode()).hexdigest()
        return f"geo:{digest}"

    @staticmethod
    def _parse_cached(cached: Any) -> GeoPoint | None:
        try:
            value = json.loads(cached)
            return GeoPoint(latitude=float(value["lat"]), longitude=float(value["lng"]))
        except (KeyError, TypeError, ValueError):
            logger.warning("Ignoring malformed geocode cache entry %r", cached)
            return None

    @staticmethod
    def _parse_result(payload: dict[str, Any]) -> GeoPoint | None:
        if payload.get("status") != "OK":
            return None

        results = payload.get("results") or []
        if not results:
            return None

        try:
            location = results[0]["geometry"]["location"]
            return GeoPoint(latitude=float(location["lat"]), longitude=float(location["lng"]))
        except (KeyError, IndexError, TypeError, ValueError):
            return None

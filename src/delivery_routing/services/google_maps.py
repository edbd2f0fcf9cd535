from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx
from django.conf import settings

from delivery_routing.exceptions import ExternalServiceError
from delivery_routing.services.types import GeoPoint

logger = logging.getLogger(__name__)


class GoogleMapsClient:
    def __init__(
        self,
        api_key: str | None = None,
        *,
        base_url: str | None = None,
        timeout: float | None = None,
        retry_attempts: int | None = None,
        retry_base_delay: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = settings.GOOGLE_MAPS_API_KEY if api_key is None else api_key
        self.base_url = (base_url or settings.GOOGLE_MAPS_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.GOOGLE_TIMEOUT_SECONDS
        self.retry_attempts = max(
            1, retry_attempts if retry_attempts is not None else settings.DISTANCE_RETRY_ATTEMPTS
        )
        self.retry_base_delay = (
            retry_base_delay
            if retry_base_delay is not None
            else settings.DISTANCE_RETRY_BASE_DELAY_SECONDS
        )
        self.transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def distance_matrix(self, origin: GeoPoint, destination: GeoPoint) -> dict[str, Any]:
        params = {
            "origins": f"{origin.latitude},{origin.longitude}",
            "destinations": f"{destination.latitude},{destination.longitude}",
            "key": self.api_key,
        }

        for attempt in range(1, self.retry_attempts + 1):
            try:
                return await self._get_json("distancematrix/json", params)
            except (httpx.HTTPError, ValueError) as exc:
                if attempt >= self.retry_attempts:
                    raise ExternalServiceError("Distance Matrix request failed") from exc
                delay = self.retry_base_delay * attempt
                logger.warning(
                    "Distance Matrix request failed (%s/%s, %s), retrying in %.1fs",
                    attempt,
                    self.retry_attempts,
                    type(exc).__name__,
                    delay,
                )
                await asyncio.sleep(delay)

        raise ExternalServiceError("Distance Matrix request failed")

    async def geocode(self, address: str) -> dict[str, Any]:
        params = {"address": address, "key": self.api_key}
        try:
            return await self._get_json("geocode/json", params)
        except (httpx.HTTPError, ValueError) as exc:
            raise ExternalServiceError("Geocoding request failed") from exc

    async def _get_json(self, path: str, params: dict[str, str]) -> dict[str, Any]:
        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self.transport,
        ) as client:
            response = await client.get(path, params=params, headers={"Accept": "application/json"})
            response.raise_for_status()
            payload = response.json()

        if not isinstance(payload, dict):
            raise ValueError("Unexpected Google Maps response payload")
        return payload

from __future__ import annotations

import asyncio
import logging
from typing import Literal

from django.conf import settings

from delivery_routing.services.cache import CacheStore
from delivery_routing.services.quota import (
    GLOBAL_USAGE_COUNTER,
    log_quota_progress,
    service_usage_counter,
)
from delivery_routing.services.types import UsageReport, UsageResult

logger = logging.getLogger(__name__)

ServiceName = Literal["geocode", "distance"]


class UsageTracker:
    """Per-service and global daily call counts for Google Maps reporting.

    These counters live next to, not inside, the oracles' own quota counters.
    The geocode oracle shares ``google_geocode_calls`` with this tracker while
    the distance oracle counts under ``google_calls``, so the two families can
    disagree.
    """

    def __init__(
        self,
        cache_store: CacheStore,
        *,
        max_daily_calls: int | None = None,
        max_daily_calls_global: int | None = None,
    ) -> None:
        self.cache_store = cache_store
        self.max_daily_calls = (
            max_daily_calls if max_daily_calls is not None else settings.GOOGLE_API_MAX_DAILY
        )
        self.max_daily_calls_global = (
            max_daily_calls_global
            if max_daily_calls_global is not None
            else settings.GOOGLE_API_MAX_DAILY_GLOBAL
        )

    async def track_usage(self, service_name: ServiceName) -> UsageResult:
        service_calls = await self.cache_store.increment_daily_counter(
            service_usage_counter(service_name)
        )
        total_calls = await self.cache_store.increment_daily_counter(GLOBAL_USAGE_COUNTER)

        if total_calls > self.max_daily_calls_global:
            logger.warning(
                "Global Google API limit reached (%s/%s)",
                total_calls,
                self.max_daily_calls_global,
            )
            return UsageResult(exceeded=True, service_calls=service_calls, total_calls=total_calls)

        log_quota_progress(logger, "Global Google API", total_calls, self.max_daily_calls_global)
        return UsageResult(exceeded=False, service_calls=service_calls, total_calls=total_calls)

    async def report(self) -> UsageReport:
        date = self.cache_store.today()
        geocode_calls, distance_calls = await asyncio.gather(
            self.cache_store.read_daily_counter(service_usage_counter("geocode")),
            self.cache_store.read_daily_counter(service_usage_counter("distance")),
        )

        limits = {"geocode": self.max_daily_calls, "distance": self.max_daily_calls}
        return UsageReport(
            date=date,
            limits=limits,
            usage={
                "geocode": geocode_calls,
                "distance": distance_calls,
                "total": geocode_calls + distance_calls,
            },
            remaining={
                "geocode": max(0, limits["geocode"] - geocode_calls),
                "distance": max(0, limits["distance"] - distance_calls),
            },
        )

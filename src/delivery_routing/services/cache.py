from __future__ import annotations

import logging
from typing import Any

from asgiref.sync import sync_to_async
from django.conf import settings
from django.core.cache import BaseCache, caches
from django.utils import timezone

from delivery_routing.exceptions import CacheStoreError

logger = logging.getLogger(__name__)

# aadd/aincr can race with counter expiry; one retry is normally enough.
MAX_INCREMENT_ATTEMPTS = 3


class CacheStore:
    """String key/value store with TTLs and daily counters on a Django cache backend.

    Values are written and read as strings. Daily counters are keyed by
    ``<counter_base>:<UTC date of the increment>`` and expire a fixed time after
    their first increment, so a counter window is not aligned to midnight.
    """

    def __init__(
        self,
        backend: BaseCache | None = None,
        counter_ttl_seconds: int | None = None,
    ) -> None:
        self.backend = backend if backend is not None else caches[settings.GEODATA_CACHE_ALIAS]
        self.counter_ttl_seconds = (
            counter_ttl_seconds
            if counter_ttl_seconds is not None
            else settings.DAILY_COUNTER_TTL_SECONDS
        )

    async def get(self, key: str) -> Any | None:
        try:
            return await self.backend.aget(key)
        except Exception as exc:
            raise CacheStoreError(f"Cache read failed for {key}") from exc

    async def set_or_replace(self, key: str, ttl_seconds: int, value: str) -> None:
        try:
            await self.backend.aset(key, value, timeout=ttl_seconds)
        except Exception as exc:
            raise CacheStoreError(f"Cache write failed for {key}") from exc

    async def increment_daily_counter(self, counter_base: str) -> int:
        key = self.daily_counter_key(counter_base)

        for _ in range(MAX_INCREMENT_ATTEMPTS):
            try:
                # add() only succeeds for a new key, so the TTL is set once per window.
                await self.backend.aadd(key, 0, timeout=self.counter_ttl_seconds)
                # incr() is atomic on LocMem and Redis and leaves the key expiry untouched.
                return int(await sync_to_async(self.backend.incr)(key))
            except ValueError:
                logger.debug("Counter %s expired between add and incr, retrying", key)
            except Exception as exc:
                raise CacheStoreError(f"Counter increment failed for {key}") from exc

        raise CacheStoreError(f"Counter increment failed for {key}")

    async def read_daily_counter(self, counter_base: str) -> int:
        value = await self.get(self.daily_counter_key(counter_base))
        return int(value or 0)

    @staticmethod
    def today() -> str:
        return timezone.now().date().isoformat()

    @classmethod
    def daily_counter_key(cls, counter_base: str) -> str:
        return f"{counter_base}:{cls.today()}"

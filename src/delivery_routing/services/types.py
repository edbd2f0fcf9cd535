from __future__ import annotations

from dataclasses import dataclass
from typing import Literal


@dataclass(slots=True, frozen=True)
class GeoPoint:
    latitude: float
    longitude: float


@dataclass(slots=True, frozen=True)
class Stop:
    stop_id: int
    latitude: float
    longitude: float

    @property
    def point(self) -> GeoPoint:
        return GeoPoint(latitude=self.latitude, longitude=self.longitude)


@dataclass(slots=True, frozen=True)
class RouteResult:
    optimized_order: list[int]
    total_distance_km: float
    total_duration_min: int


@dataclass(slots=True, frozen=True)
class GeocodeBatchItem:
    address: str
    latitude: float | None
    longitude: float | None
    status: Literal["OK", "FAILED"]


@dataclass(slots=True, frozen=True)
class UsageResult:
    exceeded: bool
    service_calls: int
    total_calls: int


@dataclass(slots=True, frozen=True)
class UsageReport:
    date: str
    limits: dict[str, int]
    usage: dict[str, int]
    remaining: dict[str, int]

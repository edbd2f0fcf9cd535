from __future__ import annotations

import asyncio
import logging
import math

from django.conf import settings

from delivery_routing.exceptions import InvalidRouteInputError, OptimizationTimeoutError
from delivery_routing.services.distance import DistanceOracle
from delivery_routing.services.types import RouteResult, Stop

logger = logging.getLogger(__name__)

MIN_ROUTE_STOPS = 2


class RouteOptimizer:
    """Greedy nearest-neighbour ordering of stops over the distance oracle.

    The tour is an open path: it starts at the requested stop (or the first
    one) and never returns to it. Ties keep the earliest remaining candidate.
    """

    def __init__(
        self,
        distance_oracle: DistanceOracle,
        average_speed_kmh: float | None = None,
    ) -> None:
        self.distance_oracle = distance_oracle
        self.average_speed_kmh = (
            average_speed_kmh if average_speed_kmh is not None else settings.AVERAGE_SPEED_KMH
        )

    async def optimize(
        self,
        stops: list[Stop],
        start_id: int | None = None,
        *,
        timeout: float | None = None,
    ) -> RouteResult:
        if len(stops) < MIN_ROUTE_STOPS:
            raise InvalidRouteInputError(f"At least {MIN_ROUTE_STOPS} points are required")

        if timeout is None:
            return await self._nearest_neighbour(stops, start_id)

        try:
            return await asyncio.wait_for(self._nearest_neighbour(stops, start_id), timeout)
        except asyncio.TimeoutError as exc:
            raise OptimizationTimeoutError(
                f"Route optimization exceeded {timeout:.1f}s for {len(stops)} stops"
            ) from exc

    async def _nearest_neighbour(self, stops: list[Stop], start_id: int | None) -> RouteResult:
        remaining = list(stops)
        start_index = 0
        if start_id is not None:
            start_index = next(
                (index for index, stop in enumerate(remaining) if stop.stop_id == start_id), 0
            )

        current = remaining.pop(start_index)
        route_order = [current.stop_id]
        total_distance = 0.0
        total_duration = 0.0

        while remaining:
            nearest_index = 0
            nearest_distance = float("inf")
            for index, candidate in enumerate(remaining):
                distance = await self.distance_oracle.get_distance_km(
                    current.point, candidate.point
                )
                if distance < nearest_distance:
                    nearest_index = index
                    nearest_distance = distance

            total_distance += nearest_distance
            total_duration += self.leg_duration_minutes(nearest_distance)

            current = remaining.pop(nearest_index)
            route_order.append(current.stop_id)

        logger.debug(
            "Optimized %s stops: %.2f km, %.0f min",
            len(route_order),
            total_distance,
            total_duration,
        )
        return RouteResult(
            optimized_order=route_order,
            total_distance_km=round(total_distance, 2),
            total_duration_min=math.floor(total_duration + 0.5),
        )

    def leg_duration_minutes(self, distance_km: float) -> float:
        return distance_km / self.average_speed_kmh * 60.0

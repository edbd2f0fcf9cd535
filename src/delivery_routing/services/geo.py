from __future__ import annotations

import math

from delivery_routing.services.types import GeoPoint

EARTH_RADIUS_KM = 6371.0


def great_circle_km(start: GeoPoint, finish: GeoPoint) -> float:
    phi_start = math.radians(start.latitude)
    phi_finish = math.radians(finish.latitude)
    half_dphi = (phi_finish - phi_start) / 2.0
    half_dlambda = math.radians(finish.longitude - start.longitude) / 2.0

    chord = math.sin(half_dphi) ** 2 + (
        math.cos(phi_start) * math.cos(phi_finish) * math.sin(half_dlambda) ** 2
    )
    return 2.0 * EARTH_RADIUS_KM * math.asin(math.sqrt(min(1.0, chord)))


def corrected_distance_km(start: GeoPoint, finish: GeoPoint, correction_factor: float) -> float:
    """Great-circle distance scaled by an urban detour factor."""
    return great_circle_km(start, finish) * correction_factor

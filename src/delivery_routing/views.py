from __future__ import annotations

import asyncio
import json
from typing import Any, Awaitable, TypeVar

from django.conf import settings
from django.http import HttpRequest, HttpResponse, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST
from pydantic import BaseModel, ValidationError

from delivery_routing.exceptions import CacheStoreError, OptimizationTimeoutError
from delivery_routing.schemas import (
    DistanceRequest,
    DistanceResponse,
    GeocodeBatchItemResponse,
    GeocodeBatchRequest,
    GeocodeBatchResponse,
    GeocodeRequest,
    RouteOptimizeRequest,
    RouteOptimizeResponse,
    UsageReportResponse,
)
from delivery_routing.services.container import GeodataServices
from delivery_routing.services.types import GeoPoint, Stop

T = TypeVar("T")
ModelT = TypeVar("ModelT", bound=BaseModel)

_geodata_services: GeodataServices | None = None


def get_geodata_services() -> GeodataServices:
    global _geodata_services
    if _geodata_services is None:
        _geodata_services = GeodataServices()
    return _geodata_services


@require_GET
async def health_view(_: HttpRequest) -> HttpResponse:
    services = get_geodata_services()
    return JsonResponse(
        {
            "status": "ok",
            "google_api_configured": services.maps_client.is_configured,
        }
    )


@csrf_exempt
@require_POST
async def distance_view(request: HttpRequest) -> HttpResponse:
    distance_request = _validate(request, DistanceRequest)
    if isinstance(distance_request, JsonResponse):
        return distance_request

    services = get_geodata_services()
    try:
        km = await _with_deadline(
            services.distance_oracle.get_distance_km(
                _to_point(distance_request.origin.lat, distance_request.origin.lng),
                _to_point(distance_request.destination.lat, distance_request.destination.lng),
            )
        )
    except asyncio.TimeoutError:
        return _deadline_response()

    return JsonResponse(DistanceResponse(km=km).model_dump(mode="json"), status=200)


@csrf_exempt
@require_POST
async def geocode_view(request: HttpRequest) -> HttpResponse:
    geocode_request = _validate(request, GeocodeRequest)
    if isinstance(geocode_request, JsonResponse):
        return geocode_request

    services = get_geodata_services()
    try:
        point = await _with_deadline(
            services.geocode_oracle.geocode_address(geocode_request.address)
        )
    except asyncio.TimeoutError:
        return _deadline_response()

    if point is None:
        return _error_response(
            "not_found", f'Could not geocode "{geocode_request.address}"', status=404
        )
    return JsonResponse({"lat": point.latitude, "lng": point.longitude}, status=200)


@csrf_exempt
@require_POST
async def geocode_batch_view(request: HttpRequest) -> HttpResponse:
    batch_request = _validate(request, GeocodeBatchRequest)
    if isinstance(batch_request, JsonResponse):
        return batch_request

    services = get_geodata_services()
    try:
        items = await _with_deadline(
            services.geocode_oracle.geocode_batch(batch_request.addresses)
        )
    except asyncio.TimeoutError:
        return _deadline_response()

    response = GeocodeBatchResponse(
        results=[
            GeocodeBatchItemResponse(
                address=item.address,
                lat=item.latitude,
                lng=item.longitude,
                status=item.status,
            )
            for item in items
        ]
    )
    return JsonResponse(response.model_dump(mode="json"), status=200)


@csrf_exempt
@require_POST
async def route_optimize_view(request: HttpRequest) -> HttpResponse:
    optimize_request = _validate(request, RouteOptimizeRequest)
    if isinstance(optimize_request, JsonResponse):
        return optimize_request

    stops = [
        Stop(stop_id=point.id, latitude=point.lat, longitude=point.lng)
        for point in optimize_request.points
    ]
    services = get_geodata_services()
    try:
        result = await services.route_optimizer.optimize(
            stops,
            optimize_request.start_id,
            timeout=settings.REQUEST_DEADLINE_SECONDS,
        )
    except OptimizationTimeoutError:
        return _deadline_response()

    response = RouteOptimizeResponse(
        optimized_order=result.optimized_order,
        total_distance_km=result.total_distance_km,
        total_duration_min=result.total_duration_min,
    )
    return JsonResponse(response.model_dump(mode="json", by_alias=True), status=200)


@require_GET
async def google_usage_view(_: HttpRequest) -> HttpResponse:
    services = get_geodata_services()
    try:
        report = await _with_deadline(services.usage_tracker.report())
    except asyncio.TimeoutError:
        return _deadline_response()
    except CacheStoreError as exc:
        return _error_response("cache_unavailable", str(exc), status=503)

    response = UsageReportResponse(
        date=report.date,
        limits=report.limits,
        usage=report.usage,
        remaining=report.remaining,
    )
    return JsonResponse(response.model_dump(mode="json"), status=200)


def _validate(request: HttpRequest, schema: type[ModelT]) -> ModelT | JsonResponse:
    payload = _parse_json_payload(request)
    if isinstance(payload, JsonResponse):
        return payload

    try:
        return schema.model_validate(payload)
    except ValidationError as exc:
        return JsonResponse(
            {
                "error": {
                    "code": "validation_error",
                    "message": "Invalid request payload",
                    "details": exc.errors(include_url=False, include_context=False),
                }
            },
            status=400,
        )


async def _with_deadline(awaitable: Awaitable[T]) -> T:
    return await asyncio.wait_for(awaitable, settings.REQUEST_DEADLINE_SECONDS)


def _to_point(lat: float, lng: float) -> GeoPoint:
    return GeoPoint(latitude=lat, longitude=lng)


def _parse_json_payload(request: HttpRequest) -> dict[str, Any] | JsonResponse:
    if not request.body:
        return {}

    try:
        payload = json.loads(request.body)
    except json.JSONDecodeError:
        return _error_response("invalid_json", "Request body must be valid JSON", status=400)

    if not isinstance(payload, dict):
        return _error_response("invalid_json", "JSON body must be an object", status=400)

    return payload


def _deadline_response() -> JsonResponse:
    return _error_response("deadline_exceeded", "Request did not finish in time", status=504)


def _error_response(code: str, message: str, status: int) -> JsonResponse:
    return JsonResponse({"error": {"code": code, "message": message}}, status=status)

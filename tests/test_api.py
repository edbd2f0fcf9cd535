from __future__ import annotations

import asyncio
import json

import pytest

from delivery_routing.services.geo import great_circle_km
from delivery_routing.services.types import GeocodeBatchItem, GeoPoint, RouteResult


def _post(api_client, path: str, payload: object):
    return api_client.post(path, data=json.dumps(payload), content_type="application/json")


def test_health_endpoint_reports_offline_mode(api_client) -> None:
    response = api_client.get("/api/v1/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "google_api_configured": False}


def test_distance_endpoint_returns_fallback_km(api_client) -> None:
    response = _post(
        api_client,
        "/api/v1/distance",
        {"from": {"lat": 32.08, "lng": 34.78}, "to": {"lat": 32.09, "lng": 34.79}},
    )

    assert response.status_code == 200
    start = GeoPoint(latitude=32.08, longitude=34.78)
    finish = GeoPoint(latitude=32.09, longitude=34.79)
    expected = round(great_circle_km(start, finish), 2)
    assert response.json()["km"] == pytest.approx(expected)


def test_distance_endpoint_validates_coordinates(api_client) -> None:
    response = _post(
        api_client,
        "/api/v1/distance",
        {"from": {"lat": 91.0, "lng": 34.78}, "to": {"lat": 32.09, "lng": 34.79}},
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "validation_error"


def test_invalid_json_returns_400(api_client) -> None:
    response = api_client.post(
        "/api/v1/distance", data="{not json", content_type="application/json"
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "invalid_json"


def test_distance_endpoint_rejects_get(api_client) -> None:
    response = api_client.get("/api/v1/distance")

    assert response.status_code == 405


def test_geocode_short_address_is_a_validation_error(api_client) -> None:
    response = _post(api_client, "/api/v1/geocode", {"address": "ab"})

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "validation_error"


def test_geocode_without_credential_returns_404(api_client) -> None:
    response = _post(api_client, "/api/v1/geocode", {"address": "Herzl 1, Haifa"})

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "not_found"


def test_geocode_success_uses_oracle(api_client, mocker) -> None:
    services = mocker.Mock()
    services.geocode_oracle.geocode_address = mocker.AsyncMock(
        return_value=GeoPoint(latitude=32.8, longitude=34.99)
    )
    mocker.patch("delivery_routing.views.get_geodata_services", return_value=services)

    response = _post(api_client, "/api/v1/geocode", {"address": "Herzl 1, Haifa"})

    assert response.status_code == 200
    assert response.json() == {"lat": 32.8, "lng": 34.99}
    services.geocode_oracle.geocode_address.assert_awaited_once_with("Herzl 1, Haifa")


def test_geocode_batch_returns_results_in_order(api_client, mocker) -> None:
    services = mocker.Mock()
    services.geocode_oracle.geocode_batch = mocker.AsyncMock(
        return_value=[
            GeocodeBatchItem(address="Tel Aviv", latitude=32.08, longitude=34.78, status="OK"),
            GeocodeBatchItem(address="Atlantis", latitude=None, longitude=None, status="FAILED"),
        ]
    )
    mocker.patch("delivery_routing.views.get_geodata_services", return_value=services)

    response = _post(api_client, "/api/v1/geocode/batch", {"addresses": ["Tel Aviv", "Atlantis"]})

    assert response.status_code == 200
    assert response.json() == {
        "results": [
            {"address": "Tel Aviv", "lat": 32.08, "lng": 34.78, "status": "OK"},
            {"address": "Atlantis", "lat": None, "lng": None, "status": "FAILED"},
        ]
    }


def test_geocode_batch_requires_at_least_one_address(api_client) -> None:
    response = _post(api_client, "/api/v1/geocode/batch", {"addresses": []})

    assert response.status_code == 400


def test_route_optimize_returns_camel_case_result(api_client) -> None:
    response = _post(
        api_client,
        "/api/v1/routes/optimize",
        {
            "points": [
                {"id": 1, "lat": 32.08, "lng": 34.78},
                {"id": 2, "lat": 32.09, "lng": 34.79},
                {"id": 3, "lat": 32.07, "lng": 34.77},
            ],
            "startId": 3,
        },
    )

    assert response.status_code == 200
    payload = response.json()
    assert set(payload) == {"optimizedOrder", "totalDistanceKm", "totalDurationMin"}
    assert payload["optimizedOrder"][0] == 3
    assert sorted(payload["optimizedOrder"]) == [1, 2, 3]


def test_route_optimize_requires_two_points(api_client) -> None:
    response = _post(
        api_client,
        "/api/v1/routes/optimize",
        {"points": [{"id": 1, "lat": 32.08, "lng": 34.78}]},
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "validation_error"


def test_route_optimize_passes_start_id_and_deadline(api_client, mocker, settings) -> None:
    settings.REQUEST_DEADLINE_SECONDS = 12.0
    services = mocker.Mock()
    services.route_optimizer.optimize = mocker.AsyncMock(
        return_value=RouteResult(
            optimized_order=[2, 1], total_distance_km=1.5, total_duration_min=2
        )
    )
    mocker.patch("delivery_routing.views.get_geodata_services", return_value=services)

    response = _post(
        api_client,
        "/api/v1/routes/optimize",
        {
            "points": [
                {"id": 1, "lat": 32.08, "lng": 34.78},
                {"id": 2, "lat": 32.09, "lng": 34.79},
            ],
            "startId": 2,
        },
    )

    assert response.status_code == 200
    assert response.json() == {
        "optimizedOrder": [2, 1],
        "totalDistanceKm": 1.5,
        "totalDurationMin": 2,
    }
    call = services.route_optimizer.optimize.await_args
    assert [stop.stop_id for stop in call.args[0]] == [1, 2]
    assert call.args[1] == 2
    assert call.kwargs["timeout"] == 12.0


def test_slow_distance_lookup_returns_504(api_client, mocker, settings) -> None:
    settings.REQUEST_DEADLINE_SECONDS = 0.05

    async def slow_distance(*_: object) -> float:
        await asyncio.sleep(5)
        return 1.0

    services = mocker.Mock()
    services.distance_oracle.get_distance_km = slow_distance
    mocker.patch("delivery_routing.views.get_geodata_services", return_value=services)

    response = _post(
        api_client,
        "/api/v1/distance",
        {"from": {"lat": 32.08, "lng": 34.78}, "to": {"lat": 32.09, "lng": 34.79}},
    )

    assert response.status_code == 504
    assert response.json()["error"]["code"] == "deadline_exceeded"


def test_google_usage_report(api_client) -> None:
    _post(api_client, "/api/v1/geocode", {"address": "Herzl 1, Haifa"})

    response = api_client.get("/api/v1/google-usage")

    assert response.status_code == 200
    payload = response.json()
    assert payload["limits"] == {"geocode": 2500, "distance": 2500}
    assert payload["usage"] == {"geocode": 1, "distance": 0, "total": 1}
    assert payload["remaining"] == {"geocode": 2499, "distance": 2500}

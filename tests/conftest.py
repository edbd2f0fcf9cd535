from __future__ import annotations

from typing import Any, Callable

import pytest
from django.core.cache import cache
from django.test import Client
from fakes import FakeGoogleMaps

from delivery_routing import views
from delivery_routing.services.cache import CacheStore
from delivery_routing.services.google_maps import GoogleMapsClient


@pytest.fixture(autouse=True)
def _isolate_state(settings, monkeypatch) -> None:
    settings.GOOGLE_MAPS_API_KEY = ""
    monkeypatch.setattr(views, "_geodata_services", None)
    cache.clear()


@pytest.fixture
def api_client() -> Client:
    return Client()


@pytest.fixture
def cache_store() -> CacheStore:
    return CacheStore()


@pytest.fixture
def fake_google() -> FakeGoogleMaps:
    return FakeGoogleMaps()


@pytest.fixture
def maps_client_factory(fake_google: FakeGoogleMaps) -> Callable[..., GoogleMapsClient]:
    def build(api_key: str = "test-key", **kwargs: Any) -> GoogleMapsClient:
        kwargs.setdefault("retry_base_delay", 0.0)
        return GoogleMapsClient(
            api_key=api_key,
            base_url="https://maps.example.test/maps/api",
            transport=fake_google.transport,
            **kwargs,
        )

    return build

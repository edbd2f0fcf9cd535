from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

AddressText = Annotated[str, Field(min_length=3, max_length=500)]


class Coordinate(BaseModel):
    lat: float = Field(ge=-90.0, le=90.0)
    lng: float = Field(ge=-180.0, le=180.0)


class DistanceRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    origin: Coordinate = Field(alias="from")
    destination: Coordinate = Field(alias="to")


class DistanceResponse(BaseModel):
    km: float


class GeocodeRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    address: AddressText


class GeocodeBatchRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    addresses: list[AddressText] = Field(min_length=1, max_length=100)


class GeocodeBatchItemResponse(BaseModel):
    address: str
    lat: float | None
    lng: float | None
    status: Literal["OK", "FAILED"]


class GeocodeBatchResponse(BaseModel):
    results: list[GeocodeBatchItemResponse]


class StopPayload(BaseModel):
    id: int = Field(gt=0)
    lat: float = Field(ge=-90.0, le=90.0)
    lng: float = Field(ge=-180.0, le=180.0)


class RouteOptimizeRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    points: list[StopPayload] = Field(min_length=2)
    start_id: int | None = Field(default=None, gt=0, alias="startId")


class RouteOptimizeResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    optimized_order: list[int] = Field(alias="optimizedOrder")
    total_distance_km: float = Field(alias="totalDistanceKm")
    total_duration_min: int = Field(alias="totalDurationMin")


class UsageReportResponse(BaseModel):
    date: str
    limits: dict[str, int]
    usage: dict[str, int]
    remaining: dict[str, int]

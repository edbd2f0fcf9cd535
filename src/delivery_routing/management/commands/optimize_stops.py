from __future__ import annotations

from pathlib import Path
from typing import Any

import polars as pl
from asgiref.sync import async_to_sync
from django.core.management.base import BaseCommand, CommandError

from delivery_routing.services.container import GeodataServices
from delivery_routing.services.types import Stop


class Command(BaseCommand):
    help = "Order the stops of a CSV file (id,lat,lng) into a nearest-neighbour route."

    def add_arguments(self, parser: Any) -> None:
        parser.add_argument(
            "--csv-path",
            type=str,
            required=True,
            help="Path to a CSV file with id, lat and lng columns",
        )
        parser.add_argument(
            "--start-id",
            type=int,
            default=None,
            help="Stop id to start the route from (defaults to the first row)",
        )

    def handle(self, *_: Any, **options: Any) -> None:
        csv_path = Path(options["csv_path"])
        if not csv_path.exists():
            raise CommandError(f"CSV file does not exist: {csv_path}")

        frame = self._load_and_transform(csv_path)
        stops = [
            Stop(stop_id=row["id"], latitude=row["lat"], longitude=row["lng"])
            for row in frame.to_dicts()
        ]
        if len(stops) < 2:
            raise CommandError(f"At least 2 valid stops are required, found {len(stops)}")

        services = GeodataServices()
        result = async_to_sync(services.route_optimizer.optimize)(stops, options["start_id"])

        ordered = " -> ".join(str(stop_id) for stop_id in result.optimized_order)
        self.stdout.write(f"Optimized order: {ordered}")
        self.stdout.write(
            self.style.SUCCESS(
                f"Route planned: {len(stops)} stops, "
                f"{result.total_distance_km} km, {result.total_duration_min} min"
            )
        )

    @staticmethod
    def _load_and_transform(csv_path: Path) -> pl.DataFrame:
        frame = pl.read_csv(csv_path, infer_schema_length=5000)
        required_columns = {"id", "lat", "lng"}
        missing_columns = required_columns.difference(frame.columns)
        if missing_columns:
            raise CommandError(f"Missing expected columns: {sorted(missing_columns)}")

        return frame.select(
            pl.col("id").cast(pl.Int64, strict=False).alias("id"),
            pl.col("lat").cast(pl.Float64, strict=False).alias("lat"),
            pl.col("lng").cast(pl.Float64, strict=False).alias("lng"),
        ).filter(
            pl.col("id").is_not_null()
            & (pl.col("id") > 0)
            & pl.col("lat").is_between(-90.0, 90.0)
            & pl.col("lng").is_between(-180.0, 180.0)
        )

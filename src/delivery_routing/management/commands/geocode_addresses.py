from __future__ import annotations

from pathlib import Path
from typing import Any

import polars as pl
from asgiref.sync import async_to_sync
from django.core.management.base import BaseCommand, CommandError

from delivery_routing.services.container import GeodataServices


class Command(BaseCommand):
    help = "Geocode the addresses of a CSV column through the cached Google geocoder."

    def add_arguments(self, parser: Any) -> None:
        parser.add_argument(
            "--csv-path",
            type=str,
            required=True,
            help="Path to a CSV file containing addresses",
        )
        parser.add_argument(
            "--column",
            type=str,
            default="address",
            help="Name of the column holding the address text",
        )

    def handle(self, *_: Any, **options: Any) -> None:
        csv_path = Path(options["csv_path"])
        if not csv_path.exists():
            raise CommandError(f"CSV file does not exist: {csv_path}")

        column = options["column"]
        frame = pl.read_csv(csv_path, infer_schema_length=0)
        if column not in frame.columns:
            raise CommandError(f"Missing expected column: {column}")

        addresses = (
            frame.select(pl.col(column).str.strip_chars().fill_null(""))
            .to_series()
            .to_list()
        )
        if not addresses:
            self.stdout.write(self.style.WARNING("No addresses to geocode"))
            return

        services = GeodataServices()
        items = async_to_sync(services.geocode_oracle.geocode_batch)(addresses)

        geocoded = 0
        failed = 0
        for item in items:
            if item.status == "OK":
                geocoded += 1
                self.stdout.write(f"OK      {item.address} -> {item.latitude},{item.longitude}")
            else:
                failed += 1
                self.stdout.write(f"FAILED  {item.address}")

        self.stdout.write(
            self.style.SUCCESS(f"Geocode run complete: {geocoded} succeeded, {failed} failed")
        )

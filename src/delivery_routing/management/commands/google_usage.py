from __future__ import annotations

from typing import Any

from asgiref.sync import async_to_sync
from django.core.management.base import BaseCommand, CommandError

from delivery_routing.exceptions import CacheStoreError
from delivery_routing.services.container import GeodataServices


class Command(BaseCommand):
    help = "Print today's Google Maps API usage against the configured daily limits."

    def handle(self, *_: Any, **options: Any) -> None:
        services = GeodataServices()
        try:
            report = async_to_sync(services.usage_tracker.report)()
        except CacheStoreError as exc:
            raise CommandError(str(exc)) from exc

        self.stdout.write(f"Usage for {report.date}")
        for service in ("geocode", "distance"):
            self.stdout.write(
                f"  {service}: {report.usage[service]}/{report.limits[service]} "
                f"({report.remaining[service]} remaining)"
            )
        self.stdout.write(self.style.SUCCESS(f"Total calls today: {report.usage['total']}"))

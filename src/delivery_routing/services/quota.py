from __future__ import annotations

import logging

DISTANCE_ORACLE_COUNTER = "google_calls"
GEOCODE_ORACLE_COUNTER = "google_geocode_calls"
GLOBAL_USAGE_COUNTER = "google_api_total_calls"

ALERT_EVERY_N_CALLS = 100
ALERT_USAGE_RATIO = 0.9


def service_usage_counter(service_name: str) -> str:
    return f"google_{service_name}_calls"


def log_quota_progress(logger: logging.Logger, label: str, calls: int, limit: int) -> None:
    if calls % ALERT_EVERY_N_CALLS == 0 or calls > limit * ALERT_USAGE_RATIO:
        logger.info("%s calls today: %s/%s", label, calls, limit)

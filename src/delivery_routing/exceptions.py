class RoutePlannerError(Exception):
    """Base exception for route planning errors."""


class ExternalServiceError(RoutePlannerError):
    """Raised when an upstream API call fails."""


class InvalidRouteInputError(RoutePlannerError):
    """Raised when a route cannot be optimized from the given stops."""


class CacheStoreError(RoutePlannerError):
    """Raised when the cache backend cannot be read or written."""


class OptimizationTimeoutError(RoutePlannerError):
    """Raised when route optimization does not finish before its deadline."""

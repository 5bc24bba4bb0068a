"""
Error taxonomy for tour ordering.

Every class maps to one HTTP status in main.py; nothing here is retried.
"""
from typing import Optional


class TravelMapError(Exception):
    """Base class for errors raised by the services layer."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidArgument(TravelMapError, ValueError):
    """Structural precondition violated by caller data (marker count, coordinates)."""

    status_code = 422


class RoutingProviderUnavailable(TravelMapError):
    """The routing provider is not configured (missing access token)."""

    status_code = 503

    def __init__(self, message: str = "Mapbox access token not configured. Please set MAPBOX_ACCESS_TOKEN."):
        super().__init__(message)


class RoutingProviderError(TravelMapError):
    """The provider call failed or returned an unusable payload."""

    status_code = 503

    def __init__(self, message: str = "Failed to calculate route", status: Optional[int] = None, payload: Optional[str] = None):
        super().__init__(message)
        self.status = status
        self.payload = payload


class QuotaExceeded(TravelMapError):
    """Monthly Mapbox request ceiling reached."""

    status_code = 429

    def __init__(self, period: str, count: int, limit: int):
        super().__init__(
            f"Mapbox API monthly quota exceeded ({count}/{limit} requests). Please try again next month."
        )
        self.period = period
        self.count = count
        self.limit = limit

    def usage(self) -> dict:
        return {
            "period": self.period,
            "count": self.count,
            "limit": self.limit,
            "remaining": max(0, self.limit - self.count),
        }


class BusinessRuleViolation(TravelMapError):
    """A domain rule was broken (cross-trip reference, duplicate name, foreign item)."""

    def __init__(self, message: str, status_code: int = 422, errors: Optional[dict] = None):
        super().__init__(message)
        self.status_code = status_code
        self.errors = errors

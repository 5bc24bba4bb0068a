"""
Walking distance/duration matrix from the Mapbox Matrix API.
"""
from dataclasses import dataclass
from typing import List, Optional, Sequence

import httpx
from sqlalchemy.orm import Session

from config import settings
from exceptions import InvalidArgument, RoutingProviderError, RoutingProviderUnavailable
from models.Marker import Marker
from services.mapbox_request_limiter import MapboxRequestLimiter
from utils.logger import setup_api_logger

logger = setup_api_logger()

# Tour ordering is about stops within a single outing, so always on foot
WALKING_PROFILE = "walking"


@dataclass
class DistanceMatrix:
    """Square matrices indexed like the input markers. Cells may be None."""
    durations: List[List[Optional[float]]]  # segundos
    distances: List[List[Optional[float]]]  # metros

    def __len__(self) -> int:
        return len(self.distances)


def build_coordinates(markers: Sequence[Marker]) -> str:
    """'lng,lat;lng,lat;...' in marker order (Mapbox wants longitude first)."""
    return ";".join(f"{m.longitude},{m.latitude}" for m in markers)


def is_square_matrix(rows, size: int) -> bool:
    """True for a list of `size` lists of `size` cells, each a number or None."""
    if not isinstance(rows, list) or len(rows) != size:
        return False
    for row in rows:
        if not isinstance(row, list) or len(row) != size:
            return False
        for cell in row:
            if cell is not None and (isinstance(cell, bool) or not isinstance(cell, (int, float))):
                return False
    return True


class MapboxMatrixService:

    def __init__(
        self,
        db: Session,
        limiter: Optional[MapboxRequestLimiter] = None,
        access_token: Optional[str] = None,
        base_url: Optional[str] = None,
        max_locations: Optional[int] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.Client] = None,
    ):
        self.limiter = limiter or MapboxRequestLimiter(db)
        self.access_token = access_token if access_token is not None else settings.MAPBOX_ACCESS_TOKEN
        self.base_url = (base_url or settings.MAPBOX_BASE_URL).rstrip("/")
        self.max_locations = max_locations or settings.MAX_SORT_MARKERS
        self.timeout = timeout or settings.MAPBOX_TIMEOUT_SECONDS
        self._client = client

    def calculate_matrix(self, markers: Sequence[Marker]) -> DistanceMatrix:
        """
        Calculate walking durations (s) and distances (m) between every pair of markers.

        Raises InvalidArgument for fewer than 2 or more than max_locations markers,
        RoutingProviderUnavailable when no access token is configured,
        QuotaExceeded when the monthly ceiling is reached and
        RoutingProviderError when Mapbox fails or answers without a matrix.
        """
        marker_count = len(markers)

        if marker_count < 2:
            raise InvalidArgument("At least 2 markers are required to calculate a matrix")

        if marker_count > self.max_locations:
            raise InvalidArgument(
                f"Too many markers. Maximum is {self.max_locations} markers for Mapbox Matrix API"
            )

        if not self.access_token:
            raise RoutingProviderUnavailable()

        self.limiter.check_quota()

        url = f"{self.base_url}/directions-matrix/v1/mapbox/{WALKING_PROFILE}/{build_coordinates(markers)}"
        params = {
            "access_token": self.access_token,
            "sources": "all",
            "destinations": "all",
            "annotations": "duration,distance",
        }

        logger.info("Calling Mapbox Matrix API | marker_count=%s | profile=%s", marker_count, WALKING_PROFILE)

        try:
            resp = self._get(url, params)
        except httpx.HTTPError as e:
            logger.error("Mapbox Matrix API request failed | error=%s", str(e))
            raise RoutingProviderError(f"Failed to calculate matrix via Mapbox: {str(e)}") from e

        if not resp.is_success:
            logger.error("Mapbox Matrix API request failed | status=%s | body=%s", resp.status_code, resp.text)
            raise RoutingProviderError(
                f"Failed to calculate matrix via Mapbox: {resp.text}",
                status=resp.status_code,
                payload=resp.text,
            )

        # Mapbox bills every answered request, valid payload or not
        self.limiter.increment_count()

        try:
            data = resp.json()
        except ValueError:
            data = None

        if not isinstance(data, dict) or "durations" not in data or "distances" not in data:
            logger.error("Mapbox Matrix API returned an unusable payload | body=%s", resp.text)
            raise RoutingProviderError(
                "Invalid response from Mapbox Matrix API: missing durations or distances",
                status=resp.status_code,
                payload=resp.text,
            )

        if not is_square_matrix(data["durations"], marker_count) or not is_square_matrix(data["distances"], marker_count):
            logger.error("Mapbox Matrix API returned a matrix of the wrong size | marker_count=%s | body=%s",
                         marker_count, resp.text)
            raise RoutingProviderError(
                f"Invalid response from Mapbox Matrix API: expected a {marker_count}x{marker_count} matrix",
                status=resp.status_code,
                payload=resp.text,
            )

        return DistanceMatrix(durations=data["durations"], distances=data["distances"])

    def _get(self, url: str, params: dict) -> httpx.Response:
        if self._client is not None:
            return self._client.get(url, params=params, timeout=self.timeout)
        with httpx.Client(timeout=self.timeout) as client:
            return client.get(url, params=params)

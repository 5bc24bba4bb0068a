from . import trips
from . import markers
from . import tours
from . import tour_routes
from . import mapbox

__all__ = [
    "trips",
    "markers",
    "tours",
    "tour_routes",
    "mapbox",
]

from models.Trip import Trip
from models.Marker import Marker
from models.TourMarker import TourMarker
from models.Tour import Tour
from models.Route import Route
from models.MapboxRequest import MapboxRequest

__all__ = ["Trip", "Marker", "TourMarker", "Tour", "Route", "MapboxRequest"]

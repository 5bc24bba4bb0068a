"""
Tour rules that live outside marker positions: naming, nesting, explicit
cascade deletes, duration estimate and the routes worth displaying.
"""
from typing import List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from exceptions import BusinessRuleViolation
from models.Marker import Marker
from models.Route import Route
from models.Tour import Tour
from models.TourMarker import TourMarker

DUPLICATE_NAME_MESSAGE = "A tour with this name already exists for this trip."


class TourService:

    def __init__(self, db: Session):
        self.db = db

    def create_tour(self, trip_id: int, name: str, parent_tour_id: Optional[int] = None) -> Tour:
        position = 0
        if parent_tour_id is not None:
            parent = self.db.query(Tour).filter(Tour.id == parent_tour_id).first()
            if parent is None or parent.trip_id != trip_id:
                raise BusinessRuleViolation("Parent tour does not belong to this trip")
            max_position = (
                self.db.query(func.max(Tour.position))
                .filter(Tour.parent_tour_id == parent_tour_id)
                .scalar()
            )
            position = 0 if max_position is None else max_position + 1

        self._ensure_unique_name(trip_id, parent_tour_id, name)

        tour = Tour(trip_id=trip_id, parent_tour_id=parent_tour_id, name=name, position=position)
        self.db.add(tour)
        self.db.flush()
        return tour

    def rename_tour(self, tour: Tour, name: str) -> Tour:
        self._ensure_unique_name(tour.trip_id, tour.parent_tour_id, name, exclude_id=tour.id)
        tour.name = name
        self.db.flush()
        return tour

    def delete_tour(self, tour: Tour) -> None:
        """Delete a tour with its sub-tours, marker occurrences and routes.

        Markers stay with the trip.
        """
        for sub_tour in self.db.query(Tour).filter(Tour.parent_tour_id == tour.id).all():
            self.delete_tour(sub_tour)

        self.db.query(TourMarker).filter(TourMarker.tour_id == tour.id).delete()
        self.db.query(Route).filter(Route.tour_id == tour.id).delete()
        self.db.expire(tour, ["marker_links", "routes", "sub_tours"])
        self.db.delete(tour)
        self.db.flush()

    def delete_marker(self, marker: Marker) -> None:
        """Delete a marker, its occurrences in every tour and the routes touching it."""
        self.db.query(TourMarker).filter(TourMarker.marker_id == marker.id).delete()
        self.db.query(Route).filter(
            or_(Route.start_marker_id == marker.id, Route.end_marker_id == marker.id)
        ).delete()
        self.db.expire_all()
        self.db.delete(marker)
        self.db.flush()

    def add_route(self, tour: Tour, start_marker: Marker, end_marker: Marker, **fields) -> Route:
        if start_marker.trip_id != tour.trip_id or end_marker.trip_id != tour.trip_id:
            raise BusinessRuleViolation("Route markers must belong to this tour's trip")
        if start_marker.id == end_marker.id:
            raise BusinessRuleViolation("Start and end markers must be different")

        route = Route(
            trip_id=tour.trip_id,
            tour_id=tour.id,
            start_marker_id=start_marker.id,
            end_marker_id=end_marker.id,
            **fields,
        )
        self.db.add(route)
        self.db.flush()
        self.db.expire(tour, ["routes"])
        return route

    def consecutive_routes(self, tour: Tour) -> List[Route]:
        """Stored routes of the tour whose markers are adjacent in the current order.

        Reordering never deletes routes, so stale ones are filtered out here.
        """
        marker_ids = [link.marker_id for link in tour.marker_links]
        pairs = set(zip(marker_ids, marker_ids[1:]))
        return [r for r in tour.routes if (r.start_marker_id, r.end_marker_id) in pairs]

    def estimated_duration_hours(self, tour: Tour) -> float:
        visit_hours = sum(link.marker.estimated_hours or 0 for link in tour.marker_links)
        travel_seconds = sum(r.duration for r in self.consecutive_routes(tour))
        return round(visit_hours + travel_seconds / 3600, 2)

    def _ensure_unique_name(self, trip_id: int, parent_tour_id: Optional[int], name: str, exclude_id: Optional[int] = None) -> None:
        # Compared in Python: SQLite's lower() only folds ASCII letters
        query = self.db.query(Tour.name).filter(Tour.trip_id == trip_id)
        if parent_tour_id is None:
            query = query.filter(Tour.parent_tour_id.is_(None))
        else:
            query = query.filter(Tour.parent_tour_id == parent_tour_id)
        if exclude_id is not None:
            query = query.filter(Tour.id != exclude_id)

        folded = name.casefold()
        if any(sibling.casefold() == folded for (sibling,) in query.all()):
            raise BusinessRuleViolation(DUPLICATE_NAME_MESSAGE, errors={"name": [DUPLICATE_NAME_MESSAGE]})

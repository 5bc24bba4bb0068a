"""
Positions of markers inside a tour.

Rows of marker_tour are only touched through attach / detach / reorder here.
Nothing is committed by this service: callers commit once the whole change
is in the session, so a failed reorder leaves the stored positions untouched.
"""
from collections import defaultdict, deque
from typing import Dict, List, Sequence, Union

from sqlalchemy import func
from sqlalchemy.orm import Session

from exceptions import BusinessRuleViolation
from models.Marker import Marker
from models.Tour import Tour
from models.TourMarker import TourMarker
from schemas import MarkerRef, SubtourRef


class TourMarkerService:

    def __init__(self, db: Session):
        self.db = db

    def attach_marker(self, tour: Tour, marker: Marker) -> TourMarker:
        """Append the marker at the end of the tour.

        Attaching a marker that is already in the tour adds another occurrence.
        """
        if marker.trip_id != tour.trip_id:
            raise BusinessRuleViolation("Marker does not belong to this tour's trip")

        max_position = (
            self.db.query(func.max(TourMarker.position))
            .filter(TourMarker.tour_id == tour.id)
            .scalar()
        )
        position = 0 if max_position is None else max_position + 1

        link = TourMarker(tour_id=tour.id, marker_id=marker.id, position=position)
        self.db.add(link)
        self.db.flush()
        self.db.expire(tour, ["marker_links"])
        return link

    def detach_marker(self, tour: Tour, marker_id: str) -> bool:
        """Remove a single occurrence (the lowest position) of the marker.

        Remaining positions are left as they are; the next reorder makes them dense again.
        """
        link = (
            self.db.query(TourMarker)
            .filter(TourMarker.tour_id == tour.id, TourMarker.marker_id == marker_id)
            .order_by(TourMarker.position.asc(), TourMarker.id.asc())
            .first()
        )
        if link is None:
            return False

        self.db.delete(link)
        self.db.flush()
        self.db.expire(tour, ["marker_links"])
        return True

    def reorder_markers(self, tour: Tour, marker_ids: Sequence[str]) -> List[TourMarker]:
        """Rewrite the tour so that position i holds marker_ids[i].

        marker_ids may repeat a marker and may name markers of the same trip
        that are not attached yet.
        """
        self._ensure_same_trip(tour, marker_ids)

        for link in self.db.query(TourMarker).filter(TourMarker.tour_id == tour.id).all():
            self.db.delete(link)
        self.db.flush()

        links = [
            TourMarker(tour_id=tour.id, marker_id=marker_id, position=index)
            for index, marker_id in enumerate(marker_ids)
        ]
        self.db.add_all(links)
        self.db.flush()
        self.db.expire(tour, ["marker_links"])
        return links

    def reorder_items(self, tour: Tour, items: Sequence[Union[MarkerRef, SubtourRef]]) -> None:
        """Order the visible children of a tour: its markers and its sub-tours.

        Every item gets its index in `items` as position, markers in marker_tour
        and sub-tours in tours.position, so merging both by position gives back
        the list. Repeated marker items map to the marker's occurrences in
        their current order. Occurrences and sub-tours not listed keep their
        relative order after the listed items.
        """
        occurrences: Dict[str, deque] = defaultdict(deque)
        links = (
            self.db.query(TourMarker)
            .filter(TourMarker.tour_id == tour.id)
            .order_by(TourMarker.position.asc(), TourMarker.id.asc())
            .all()
        )
        for link in links:
            occurrences[link.marker_id].append(link)

        subtours = {
            t.id: t
            for t in self.db.query(Tour)
            .filter(Tour.parent_tour_id == tour.id)
            .order_by(Tour.position.asc(), Tour.id.asc())
            .all()
        }

        assignments = []
        listed_subtours = set()
        for index, item in enumerate(items):
            if isinstance(item, MarkerRef):
                if not occurrences[item.id]:
                    raise BusinessRuleViolation("One or more markers do not belong to this tour")
                assignments.append((occurrences[item.id].popleft(), index))
            else:
                subtour = subtours.get(item.id)
                if subtour is None:
                    raise BusinessRuleViolation("One or more sub-tours do not belong to this tour")
                if subtour.id in listed_subtours:
                    raise BusinessRuleViolation("A sub-tour can only be listed once")
                listed_subtours.add(subtour.id)
                assignments.append((subtour, index))

        assigned_links = {target.id for target, _ in assignments if isinstance(target, TourMarker)}
        # Unlisted children keep their relative order; markers first on equal positions
        remaining = [(link.position, 0, link) for link in links if link.id not in assigned_links]
        remaining += [(t.position, 1, t) for t in subtours.values() if t.id not in listed_subtours]
        remaining.sort(key=lambda entry: entry[:2])

        for target, index in assignments:
            target.position = index
        for offset, (_, _, target) in enumerate(remaining):
            target.position = len(items) + offset

        self.db.flush()
        self.db.expire(tour, ["marker_links", "sub_tours"])

    def _ensure_same_trip(self, tour: Tour, marker_ids: Sequence[str]) -> None:
        unique_ids = set(marker_ids)
        if not unique_ids:
            return

        rows = self.db.query(Marker.id, Marker.trip_id).filter(Marker.id.in_(unique_ids)).all()
        found = {marker_id: trip_id for marker_id, trip_id in rows}

        missing = unique_ids - found.keys()
        if missing:
            raise BusinessRuleViolation(
                "One or more markers do not exist",
                errors={"marker_ids": sorted(missing)},
            )

        foreign = sorted(marker_id for marker_id, trip_id in found.items() if trip_id != tour.trip_id)
        if foreign:
            raise BusinessRuleViolation(
                "One or more markers do not belong to this tour's trip",
                errors={"marker_ids": foreign},
            )

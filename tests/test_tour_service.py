"""
Tour naming, cascade deletes and duration estimate.
"""
import pytest

from exceptions import BusinessRuleViolation
from models.Marker import Marker
from models.Route import Route
from models.Tour import Tour
from models.TourMarker import TourMarker
from services.tour_marker_service import TourMarkerService
from services.tour_service import DUPLICATE_NAME_MESSAGE, TourService


@pytest.fixture
def service(db):
    return TourService(db)


def add_route(db, tour, start, end, duration, distance=1000):
    route = TourService(db).add_route(
        tour, start, end,
        transport_mode="foot-walking",
        distance=distance,
        duration=duration,
    )
    db.commit()
    return route


class TestTourNames:

    def test_create_top_level_tour(self, db, service, trip):
        tour = service.create_tour(trip.id, "Day 1")
        db.commit()

        assert tour.id is not None
        assert tour.parent_tour_id is None
        assert tour.position == 0

    def test_duplicate_name_ignores_case(self, db, service, trip):
        service.create_tour(trip.id, "Day 1")
        db.commit()

        with pytest.raises(BusinessRuleViolation) as exc_info:
            service.create_tour(trip.id, "day 1")

        assert exc_info.value.message == DUPLICATE_NAME_MESSAGE
        assert exc_info.value.errors == {"name": [DUPLICATE_NAME_MESSAGE]}

    @pytest.mark.parametrize("first, second", [
        ("Ärzte", "ärzte"),
        ("Évora", "ÉVORA"),
        ("Straße", "STRASSE"),
    ])
    def test_duplicate_name_ignores_non_ascii_case(self, db, service, trip, first, second):
        service.create_tour(trip.id, first)
        db.commit()

        with pytest.raises(BusinessRuleViolation):
            service.create_tour(trip.id, second)

    def test_same_name_in_another_trip(self, db, service, trip, other_trip):
        service.create_tour(trip.id, "Day 1")
        service.create_tour(other_trip.id, "Day 1")
        db.commit()

        assert db.query(Tour).count() == 2

    def test_same_name_under_different_parents(self, db, service, trip):
        day1 = service.create_tour(trip.id, "Day 1")
        day2 = service.create_tour(trip.id, "Day 2")
        service.create_tour(trip.id, "Morning", parent_tour_id=day1.id)
        service.create_tour(trip.id, "Morning", parent_tour_id=day2.id)
        db.commit()

        assert db.query(Tour).filter(Tour.name == "Morning").count() == 2

    def test_sub_tour_name_may_match_top_level(self, db, service, trip):
        day1 = service.create_tour(trip.id, "Day 1")
        service.create_tour(trip.id, "Day 1", parent_tour_id=day1.id)
        db.commit()

        assert db.query(Tour).count() == 2

    def test_duplicate_sub_tour_name(self, db, service, trip):
        day1 = service.create_tour(trip.id, "Day 1")
        service.create_tour(trip.id, "Morning", parent_tour_id=day1.id)
        db.commit()

        with pytest.raises(BusinessRuleViolation):
            service.create_tour(trip.id, "MORNING", parent_tour_id=day1.id)

    def test_rename_to_own_name(self, db, service, trip):
        tour = service.create_tour(trip.id, "Day 1")
        db.commit()

        service.rename_tour(tour, "DAY 1")
        db.commit()

        assert tour.name == "DAY 1"

    def test_rename_to_sibling_name(self, db, service, trip):
        service.create_tour(trip.id, "Day 1")
        tour = service.create_tour(trip.id, "Day 2")
        db.commit()

        with pytest.raises(BusinessRuleViolation):
            service.rename_tour(tour, "Day 1")

    def test_sub_tours_are_appended(self, db, service, trip):
        day1 = service.create_tour(trip.id, "Day 1")
        first = service.create_tour(trip.id, "Morning", parent_tour_id=day1.id)
        second = service.create_tour(trip.id, "Evening", parent_tour_id=day1.id)
        db.commit()

        assert (first.position, second.position) == (0, 1)

    def test_parent_from_another_trip(self, db, service, trip, other_trip):
        foreign = service.create_tour(other_trip.id, "Day 1")
        db.commit()

        with pytest.raises(BusinessRuleViolation, match="Parent tour"):
            service.create_tour(trip.id, "Morning", parent_tour_id=foreign.id)


class TestDeletes:

    def test_delete_tour_cascades(self, db, service, trip, make_tour, make_marker):
        tour = make_tour(trip, "Day 1")
        sub_tour = make_tour(trip, "Morning", parent=tour)
        a = make_marker(trip, "Castelo")
        b = make_marker(trip, "Se")
        links = TourMarkerService(db)
        links.attach_marker(tour, a)
        links.attach_marker(tour, b)
        links.attach_marker(sub_tour, a)
        db.commit()
        add_route(db, tour, a, b, duration=600)

        service.delete_tour(tour)
        db.commit()

        assert db.query(Tour).count() == 0
        assert db.query(TourMarker).count() == 0
        assert db.query(Route).count() == 0
        assert db.query(Marker).count() == 2

    def test_delete_marker_removes_occurrences_and_routes(self, db, service, trip, make_tour, make_marker):
        tour = make_tour(trip, "Day 1")
        a = make_marker(trip, "Castelo")
        b = make_marker(trip, "Se")
        links = TourMarkerService(db)
        links.attach_marker(tour, a)
        links.attach_marker(tour, b)
        links.attach_marker(tour, a)
        db.commit()
        add_route(db, tour, a, b, duration=600)

        service.delete_marker(a)
        db.commit()

        assert [link.marker_id for link in db.query(TourMarker).all()] == [b.id]
        assert db.query(Route).count() == 0
        assert db.query(Tour).count() == 1


class TestRoutes:

    def test_route_markers_must_belong_to_trip(self, db, service, trip, other_trip, make_tour, make_marker):
        tour = make_tour(trip, "Day 1")
        a = make_marker(trip, "Castelo")
        foreign = make_marker(other_trip, "Ribeira")

        with pytest.raises(BusinessRuleViolation):
            service.add_route(tour, a, foreign, transport_mode="foot-walking", distance=1, duration=1)

    def test_route_needs_two_different_markers(self, db, service, trip, make_tour, make_marker):
        tour = make_tour(trip, "Day 1")
        a = make_marker(trip, "Castelo")

        with pytest.raises(BusinessRuleViolation):
            service.add_route(tour, a, a, transport_mode="foot-walking", distance=1, duration=1)

    def test_only_consecutive_routes_are_shown(self, db, service, trip, make_tour, make_marker):
        tour = make_tour(trip, "Day 1")
        a, b, c = (make_marker(trip, name) for name in ("Castelo", "Se", "Miradouro"))
        TourMarkerService(db).reorder_markers(tour, [a.id, b.id, c.id])
        db.commit()
        ab = add_route(db, tour, a, b, duration=600)
        add_route(db, tour, a, c, duration=900)
        bc = add_route(db, tour, b, c, duration=300)

        assert [r.id for r in service.consecutive_routes(tour)] == [ab.id, bc.id]

    def test_repeated_marker_pairs(self, db, service, trip, make_tour, make_marker):
        tour = make_tour(trip, "Day 1")
        a, b = make_marker(trip, "Castelo"), make_marker(trip, "Se")
        TourMarkerService(db).reorder_markers(tour, [a.id, b.id, a.id])
        db.commit()
        ab = add_route(db, tour, a, b, duration=600)
        ba = add_route(db, tour, b, a, duration=600)

        assert {r.id for r in service.consecutive_routes(tour)} == {ab.id, ba.id}


class TestEstimatedDuration:

    def test_visit_hours_plus_travel_time(self, db, service, trip, make_tour, make_marker):
        tour = make_tour(trip, "Day 1")
        a = make_marker(trip, "Castelo", estimated_hours=2)
        b = make_marker(trip, "Se", estimated_hours=1.5)
        c = make_marker(trip, "Miradouro", estimated_hours=0.5)
        TourMarkerService(db).reorder_markers(tour, [a.id, b.id, c.id])
        db.commit()
        add_route(db, tour, a, b, duration=1800)
        add_route(db, tour, b, c, duration=900)

        assert service.estimated_duration_hours(tour) == 4.75

    def test_markers_without_estimate_count_as_zero(self, db, service, trip, make_tour, make_marker):
        tour = make_tour(trip, "Day 1")
        a = make_marker(trip, "Castelo", estimated_hours=3)
        b = make_marker(trip, "Se")
        TourMarkerService(db).reorder_markers(tour, [a.id, b.id])
        db.commit()

        assert service.estimated_duration_hours(tour) == 3.0

    def test_repeated_marker_counts_every_visit(self, db, service, trip, make_tour, make_marker):
        tour = make_tour(trip, "Day 1")
        a = make_marker(trip, "Castelo", estimated_hours=2)
        b = make_marker(trip, "Se", estimated_hours=1)
        TourMarkerService(db).reorder_markers(tour, [a.id, b.id, a.id])
        db.commit()

        assert service.estimated_duration_hours(tour) == 5.0

    def test_routes_out_of_order_are_ignored(self, db, service, trip, make_tour, make_marker):
        tour = make_tour(trip, "Day 1")
        a = make_marker(trip, "Castelo", estimated_hours=1)
        b = make_marker(trip, "Se", estimated_hours=1)
        c = make_marker(trip, "Miradouro", estimated_hours=1)
        TourMarkerService(db).reorder_markers(tour, [a.id, b.id, c.id])
        db.commit()
        add_route(db, tour, a, c, duration=3600)

        assert service.estimated_duration_hours(tour) == 3.0

    def test_rounded_to_two_decimals(self, db, service, trip, make_tour, make_marker):
        tour = make_tour(trip, "Day 1")
        a = make_marker(trip, "Castelo", estimated_hours=1)
        b = make_marker(trip, "Se", estimated_hours=1)
        TourMarkerService(db).reorder_markers(tour, [a.id, b.id])
        db.commit()
        add_route(db, tour, a, b, duration=1000)

        assert service.estimated_duration_hours(tour) == 2.28

    def test_empty_tour(self, db, service, trip, make_tour):
        assert service.estimated_duration_hours(make_tour(trip, "Day 1")) == 0

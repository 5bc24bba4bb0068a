from typing import List
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from config import settings
from database import get_db
from exceptions import InvalidArgument
from models.Marker import Marker
from models.Tour import Tour
from models.TourMarker import TourMarker
from models.Trip import Trip
from schemas import (
    MarkerIdPayload,
    MarkerRead,
    ReorderItemsPayload,
    ReorderMarkersPayload,
    RouteRead,
    SortedTourRead,
    TourMarkerRead,
    TourRead,
    TourUpdate,
    TourWrite,
)
from services.mapbox_matrix_service import MapboxMatrixService
from services.tour_marker_service import TourMarkerService
from services.tour_service import TourService
from services.tour_sorting_service import TourSortingService
from utils.logger import setup_api_logger

logger = setup_api_logger()
router = APIRouter(prefix="/tours", tags=["Tours"])


def get_tour(tour_id: int, db: Session = Depends(get_db)) -> Tour:
    tour = db.query(Tour).filter(Tour.id == tour_id).first()
    if not tour:
        raise HTTPException(status_code=404, detail="Tour not found")
    return tour


def get_matrix_service(db: Session = Depends(get_db)) -> MapboxMatrixService:
    return MapboxMatrixService(db)


def serialize_tour(tour: Tour, tours: TourService) -> TourRead:
    """Tour with its markers in position order, displayable routes and sub-tours."""
    return TourRead(
        id=tour.id,
        name=tour.name,
        trip_id=tour.trip_id,
        parent_tour_id=tour.parent_tour_id,
        position=tour.position,
        created_at=tour.created_at,
        updated_at=tour.updated_at,
        estimated_duration_hours=tours.estimated_duration_hours(tour),
        markers=[
            TourMarkerRead(**MarkerRead.model_validate(link.marker).model_dump(), position=link.position)
            for link in tour.marker_links
        ],
        routes=[RouteRead.model_validate(r) for r in tours.consecutive_routes(tour)],
        sub_tours=[serialize_tour(sub_tour, tours) for sub_tour in tour.sub_tours],
    )


def _get_marker(db: Session, marker_id: str) -> Marker:
    marker = db.query(Marker).filter(Marker.id == marker_id).first()
    if not marker:
        raise HTTPException(status_code=404, detail="Marker not found")
    return marker


@router.post("/", response_model=TourRead, status_code=status.HTTP_201_CREATED)
def create_tour(payload: TourWrite, db: Session = Depends(get_db)):
    if not db.query(Trip).filter(Trip.id == payload.trip_id).first():
        raise HTTPException(status_code=404, detail="Trip not found")

    tours = TourService(db)
    tour = tours.create_tour(payload.trip_id, payload.name, payload.parent_tour_id)
    db.commit()
    db.refresh(tour)
    return serialize_tour(tour, tours)


@router.get("/", response_model=List[TourRead])
def list_tours(trip_id: int = Query(...), db: Session = Depends(get_db)):
    """Top-level tours of a trip; sub-tours are nested inside their parent."""
    if not db.query(Trip).filter(Trip.id == trip_id).first():
        raise HTTPException(status_code=404, detail="Trip not found")

    tours = TourService(db)
    top_level = (
        db.query(Tour)
        .filter(Tour.trip_id == trip_id, Tour.parent_tour_id.is_(None))
        .order_by(Tour.created_at.asc(), Tour.id.asc())
        .all()
    )
    return [serialize_tour(t, tours) for t in top_level]


@router.get("/{tour_id}", response_model=TourRead)
def show_tour(tour: Tour = Depends(get_tour), db: Session = Depends(get_db)):
    return serialize_tour(tour, TourService(db))


@router.put("/{tour_id}", response_model=TourRead)
def update_tour(payload: TourUpdate, tour: Tour = Depends(get_tour), db: Session = Depends(get_db)):
    tours = TourService(db)
    tours.rename_tour(tour, payload.name)
    db.commit()
    db.refresh(tour)
    return serialize_tour(tour, tours)


@router.delete("/{tour_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_tour(tour: Tour = Depends(get_tour), db: Session = Depends(get_db)):
    TourService(db).delete_tour(tour)
    db.commit()


@router.post("/{tour_id}/markers/attach", response_model=TourRead)
def attach_marker(payload: MarkerIdPayload, tour: Tour = Depends(get_tour), db: Session = Depends(get_db)):
    marker = _get_marker(db, payload.marker_id)
    TourMarkerService(db).attach_marker(tour, marker)
    db.commit()
    return serialize_tour(tour, TourService(db))


@router.post("/{tour_id}/markers/detach", response_model=TourRead)
def detach_marker(payload: MarkerIdPayload, tour: Tour = Depends(get_tour), db: Session = Depends(get_db)):
    _get_marker(db, payload.marker_id)
    TourMarkerService(db).detach_marker(tour, payload.marker_id)
    db.commit()
    return serialize_tour(tour, TourService(db))


@router.put("/{tour_id}/markers/reorder", response_model=TourRead)
def reorder_markers(payload: ReorderMarkersPayload, tour: Tour = Depends(get_tour), db: Session = Depends(get_db)):
    TourMarkerService(db).reorder_markers(tour, payload.marker_ids)
    db.commit()
    return serialize_tour(tour, TourService(db))


@router.put("/{tour_id}/items/reorder", response_model=TourRead)
def reorder_items(payload: ReorderItemsPayload, tour: Tour = Depends(get_tour), db: Session = Depends(get_db)):
    TourMarkerService(db).reorder_items(tour, payload.items)
    db.commit()
    return serialize_tour(tour, TourService(db))


@router.post("/{tour_id}/markers/sort", response_model=SortedTourRead)
def sort_markers(
    tour: Tour = Depends(get_tour),
    db: Session = Depends(get_db),
    matrix_service: MapboxMatrixService = Depends(get_matrix_service),
):
    """
    Reorder the tour's markers to shorten the walk between them.
    Mapbox Matrix API gives walking distances; a nearest neighbour pass picks the order.
    """
    # Insertion order, not position: the walk always starts from the first row
    links = (
        db.query(TourMarker)
        .filter(TourMarker.tour_id == tour.id)
        .order_by(TourMarker.id.asc())
        .all()
    )
    markers = [link.marker for link in links]

    if len(markers) < 2:
        raise InvalidArgument("Tour must have at least 2 markers to sort")

    if len(markers) > settings.MAX_SORT_MARKERS:
        raise InvalidArgument(
            f"Tour has too many markers. Maximum is {settings.MAX_SORT_MARKERS} markers for automatic sorting."
        )

    matrix = matrix_service.calculate_matrix(markers)

    sorting = TourSortingService()
    order = sorting.sorted_indices(markers, matrix)
    TourMarkerService(db).reorder_markers(tour, [markers[i].id for i in order])
    db.commit()

    logger.info("Tour markers sorted successfully | tour_id=%s | marker_count=%s", tour.id, len(markers))

    result = serialize_tour(tour, TourService(db))
    return SortedTourRead(
        **result.model_dump(),
        total_distance=sorting.calculate_total_distance(order, matrix.distances),
    )

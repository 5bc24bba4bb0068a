from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from database import get_db
from models.Marker import Marker
from models.Route import Route
from models.Tour import Tour
from routes.tours import get_tour
from schemas import RouteWrite, RouteRead
from services.tour_service import TourService

router = APIRouter(prefix="/tours/{tour_id}/routes", tags=["Routes"])


@router.post("/", response_model=RouteRead, status_code=status.HTTP_201_CREATED)
def create_route(payload: RouteWrite, tour: Tour = Depends(get_tour), db: Session = Depends(get_db)):
    start = db.query(Marker).filter(Marker.id == payload.start_marker_id).first()
    end = db.query(Marker).filter(Marker.id == payload.end_marker_id).first()
    if not start or not end:
        raise HTTPException(status_code=404, detail="Marker not found")

    data = payload.model_dump(exclude={"start_marker_id", "end_marker_id"})
    route = TourService(db).add_route(tour, start, end, **data)
    db.commit()
    db.refresh(route)
    return route


@router.get("/", response_model=List[RouteRead])
def list_routes(tour: Tour = Depends(get_tour), db: Session = Depends(get_db)):
    """Every stored route of the tour, including ones no longer between consecutive markers."""
    return db.query(Route).filter(Route.tour_id == tour.id).order_by(Route.id.asc()).all()


@router.delete("/{route_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_route(route_id: int, tour: Tour = Depends(get_tour), db: Session = Depends(get_db)):
    route = db.query(Route).filter_by(id=route_id, tour_id=tour.id).first()
    if not route:
        raise HTTPException(status_code=404, detail="Route not found")
    db.delete(route)
    db.commit()

from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from models.Trip import Trip
from models.Marker import Marker
from schemas import MarkerWrite, MarkerRead, MarkerUpdate
from database import get_db
from services.tour_service import TourService

router = APIRouter(prefix="/trips/{trip_id}/markers", tags=["Markers"])


@router.post("/", response_model=MarkerRead, status_code=status.HTTP_201_CREATED)
def create_marker(trip_id: int, payload: MarkerWrite, db: Session = Depends(get_db)):
    if not db.query(Trip).filter(Trip.id == trip_id).first():
        raise HTTPException(status_code=404, detail="Trip not found")

    marker = Marker(trip_id=trip_id, **payload.model_dump())
    db.add(marker)
    db.commit()
    db.refresh(marker)
    return marker


@router.get("/", response_model=List[MarkerRead])
def list_markers(trip_id: int, db: Session = Depends(get_db)):
    return db.query(Marker).filter(Marker.trip_id == trip_id).order_by(Marker.created_at.asc()).all()


@router.patch("/{marker_id}", response_model=MarkerRead)
def update_marker(trip_id: int, marker_id: str, payload: MarkerUpdate, db: Session = Depends(get_db)):
    marker = db.query(Marker).filter_by(id=marker_id, trip_id=trip_id).first()
    if not marker:
        raise HTTPException(status_code=404, detail="Marker not found")

    # Solo actualizar campos que fueron proporcionados
    for k, v in payload.model_dump(exclude_unset=True).items():
        setattr(marker, k, v)

    db.commit()
    db.refresh(marker)
    return marker


@router.delete("/{marker_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_marker(trip_id: int, marker_id: str, db: Session = Depends(get_db)):
    marker = db.query(Marker).filter_by(id=marker_id, trip_id=trip_id).first()
    if not marker:
        raise HTTPException(status_code=404, detail="Marker not found")
    TourService(db).delete_marker(marker)
    db.commit()

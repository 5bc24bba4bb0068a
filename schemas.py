# schemas.py (Pydantic v2)
from pydantic import BaseModel, Field
from typing import Optional, List, Literal, Union, Annotated
from datetime import datetime


# ---------- Trips ----------
class TripBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=150)
    country: Optional[str] = None
    notes: Optional[str] = None
    viewport_latitude: Optional[float] = Field(None, ge=-90, le=90)
    viewport_longitude: Optional[float] = Field(None, ge=-180, le=180)
    viewport_zoom: Optional[float] = None

class TripWrite(TripBase):
    pass

class TripRead(TripBase):
    id: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


# ---------- Markers ----------
class MarkerBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    type: str = "point_of_interest"
    notes: Optional[str] = None
    url: Optional[str] = None
    is_unesco: bool = False
    estimated_hours: Optional[float] = Field(None, ge=0)  # Horas estimadas de visita

class MarkerWrite(MarkerBase):
    pass

class MarkerUpdate(BaseModel):
    """Partial update (PATCH) - all fields optional"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    type: Optional[str] = None
    notes: Optional[str] = None
    url: Optional[str] = None
    is_unesco: Optional[bool] = None
    estimated_hours: Optional[float] = Field(None, ge=0)

class MarkerRead(MarkerBase):
    id: str
    trip_id: int

    class Config:
        from_attributes = True

class TourMarkerRead(MarkerRead):
    """A marker occurrence inside a tour"""
    position: int


# ---------- Routes ----------
TransportMode = Literal["driving-car", "cycling-regular", "foot-walking", "public-transport"]

class RouteWrite(BaseModel):
    start_marker_id: str
    end_marker_id: str
    transport_mode: TransportMode = "foot-walking"
    distance: int = Field(..., ge=0)  # metros
    duration: int = Field(..., ge=0)  # segundos
    geometry: Optional[List[List[float]]] = None  # [[lng, lat], ...]
    warning: Optional[str] = None

class RouteRead(RouteWrite):
    id: int
    trip_id: int
    tour_id: Optional[int] = None
    distance_km: float
    duration_minutes: int

    class Config:
        from_attributes = True


# ---------- Tours ----------
class TourWrite(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    trip_id: int
    parent_tour_id: Optional[int] = None

class TourUpdate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)

class TourRead(BaseModel):
    id: int
    name: str
    trip_id: int
    parent_tour_id: Optional[int] = None
    position: int
    created_at: datetime
    updated_at: datetime
    estimated_duration_hours: float = 0.0
    markers: List[TourMarkerRead] = []
    routes: List[RouteRead] = []  # Solo rutas entre marcadores consecutivos
    sub_tours: List["TourRead"] = []

class SortedTourRead(TourRead):
    total_distance: float  # metros, recorrido completo en el nuevo orden


# ---------- Tour marker operations ----------
class MarkerIdPayload(BaseModel):
    marker_id: str

class ReorderMarkersPayload(BaseModel):
    marker_ids: List[str]

class MarkerRef(BaseModel):
    type: Literal["marker"]
    id: str

class SubtourRef(BaseModel):
    type: Literal["subtour"]
    id: int

TourItemRef = Annotated[Union[MarkerRef, SubtourRef], Field(discriminator="type")]

class ReorderItemsPayload(BaseModel):
    items: List[TourItemRef]


# ---------- Mapbox ----------
class UsageStats(BaseModel):
    period: str
    count: int
    limit: int
    remaining: int


TourRead.model_rebuild()

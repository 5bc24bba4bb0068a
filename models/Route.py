from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON, func
from sqlalchemy.orm import relationship
from database import Base

class Route(Base):
    __tablename__ = "routes"

    id = Column(Integer, primary_key=True, index=True)
    trip_id = Column(Integer, ForeignKey("trips.id"), nullable=False, index=True)
    tour_id = Column(Integer, ForeignKey("tours.id"), nullable=True, index=True)
    start_marker_id = Column(String(36), ForeignKey("markers.id"), nullable=False, index=True)
    end_marker_id = Column(String(36), ForeignKey("markers.id"), nullable=False, index=True)
    transport_mode = Column(String(30), nullable=False)
    distance = Column(Integer, nullable=False)  # metros
    duration = Column(Integer, nullable=False)  # segundos
    geometry = Column(JSON, nullable=True)  # [[lng, lat], ...]
    warning = Column(String(500), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    tour = relationship("Tour", back_populates="routes")

    @property
    def distance_km(self) -> float:
        return round(self.distance / 1000, 2)

    @property
    def duration_minutes(self) -> int:
        return int(round(self.duration / 60))

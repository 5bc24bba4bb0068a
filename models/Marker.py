import uuid

from sqlalchemy import Column, Integer, String, Text, Float, Boolean, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from database import Base

class Marker(Base):
    __tablename__ = "markers"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    trip_id = Column(Integer, ForeignKey("trips.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    type = Column(String(50), nullable=False, default="point_of_interest")
    notes = Column(Text, nullable=True)
    url = Column(String(500), nullable=True)
    is_unesco = Column(Boolean, default=False, nullable=False)
    estimated_hours = Column(Float, nullable=True)  # Tiempo estimado de visita
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    trip = relationship("Trip", back_populates="markers")

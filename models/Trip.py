from sqlalchemy import Column, Integer, String, Text, DateTime, Float, func
from sqlalchemy.orm import relationship
from database import Base

class Trip(Base):
    __tablename__ = "trips"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(150), nullable=False)
    country = Column(String(100), nullable=True)
    notes = Column(Text, nullable=True)
    # Map viewport the trip opens on
    viewport_latitude = Column(Float, nullable=True)
    viewport_longitude = Column(Float, nullable=True)
    viewport_zoom = Column(Float, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    markers = relationship("Marker", back_populates="trip", passive_deletes=True)
    tours = relationship("Tour", back_populates="trip", passive_deletes=True)

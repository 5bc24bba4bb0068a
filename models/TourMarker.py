from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from database import Base

class TourMarker(Base):
    """One occurrence of a marker inside a tour.

    (marker_id, tour_id) is deliberately not unique: a marker may be visited
    more than once in the same tour.
    """
    __tablename__ = "marker_tour"

    id = Column(Integer, primary_key=True, index=True)
    marker_id = Column(String(36), ForeignKey("markers.id"), nullable=False, index=True)
    tour_id = Column(Integer, ForeignKey("tours.id"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    tour = relationship("Tour", back_populates="marker_links")
    marker = relationship("Marker", lazy="joined")

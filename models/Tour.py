from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from database import Base
from models.TourMarker import TourMarker

class Tour(Base):
    __tablename__ = "tours"

    id = Column(Integer, primary_key=True, index=True)
    trip_id = Column(Integer, ForeignKey("trips.id"), nullable=False, index=True)
    parent_tour_id = Column(Integer, ForeignKey("tours.id"), nullable=True, index=True)
    name = Column(String(255), nullable=False)
    # Position among the parent's visible children (markers and sub-tours)
    position = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    trip = relationship("Trip", back_populates="tours")
    parent = relationship("Tour", remote_side=[id], back_populates="sub_tours")
    sub_tours = relationship("Tour", back_populates="parent", order_by="Tour.position", passive_deletes=True)
    marker_links = relationship(
        "TourMarker",
        back_populates="tour",
        order_by=(TourMarker.position, TourMarker.id),
        passive_deletes=True,
    )
    routes = relationship("Route", back_populates="tour", passive_deletes=True)

    @property
    def ordered_markers(self):
        """Markers in visiting order; a marker appears once per occurrence."""
        return [link.marker for link in self.marker_links]

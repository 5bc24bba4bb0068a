from sqlalchemy import Column, Integer, String, DateTime, func
from database import Base

class MapboxRequest(Base):
    """Monthly counter of calls made to the Mapbox APIs, keyed by 'YYYY-MM'."""
    __tablename__ = "mapbox_requests"

    id = Column(Integer, primary_key=True, index=True)
    period = Column(String(7), unique=True, nullable=False, index=True)
    count = Column(Integer, nullable=False, default=0)
    last_request_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

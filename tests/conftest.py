import os
import tempfile

# Settings are read at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LOG_PATH"] = os.path.join(tempfile.gettempdir(), "travelmap-tests.log")
os.environ["MAPBOX_ACCESS_TOKEN"] = ""

import httpx
import pytest
from fastapi import Depends
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base, get_db
from main import app
from models.Marker import Marker
from models.Tour import Tour
from models.Trip import Trip
from routes.tours import get_matrix_service
from services.mapbox_matrix_service import MapboxMatrixService
from services.mapbox_request_limiter import MapboxRequestLimiter


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    yield session
    session.close()


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def trip(db):
    t = Trip(name="Lisbon")
    db.add(t)
    db.commit()
    return t


@pytest.fixture
def other_trip(db):
    t = Trip(name="Porto")
    db.add(t)
    db.commit()
    return t


@pytest.fixture
def make_marker(db):
    def _make(trip, name="Marker", latitude=38.7139, longitude=-9.1394, estimated_hours=None):
        marker = Marker(
            trip_id=trip.id,
            name=name,
            latitude=latitude,
            longitude=longitude,
            estimated_hours=estimated_hours,
        )
        db.add(marker)
        db.commit()
        return marker
    return _make


@pytest.fixture
def make_tour(db):
    def _make(trip, name="Day 1", parent=None, position=0):
        tour = Tour(
            trip_id=trip.id,
            name=name,
            parent_tour_id=parent.id if parent else None,
            position=position,
        )
        db.add(tour)
        db.commit()
        return tour
    return _make


@pytest.fixture
def mapbox_responder():
    """Fake Mapbox Matrix API; records every request it receives."""

    class Responder:
        def __init__(self):
            self.requests = []
            self.status_code = 200
            self.payload = None
            self.error = None

        def __call__(self, request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            if self.error is not None:
                raise self.error
            return httpx.Response(self.status_code, json=self.payload)

        def client(self) -> httpx.Client:
            return httpx.Client(transport=httpx.MockTransport(self))

    return Responder()


@pytest.fixture
def use_matrix_service(mapbox_responder):
    """Point the sort endpoint at the fake Mapbox API."""

    def _use(access_token="test-token", monthly_limit=100):
        def override(db: Session = Depends(get_db)):
            return MapboxMatrixService(
                db,
                limiter=MapboxRequestLimiter(db, monthly_limit=monthly_limit),
                access_token=access_token,
                client=mapbox_responder.client(),
            )

        app.dependency_overrides[get_matrix_service] = override

    return _use

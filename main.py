from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

import models  # noqa: F401  registers every table on Base.metadata
from database import Base, engine
from exceptions import BusinessRuleViolation, QuotaExceeded, TravelMapError
from utils.logger import setup_api_logger

from routes import (
    trips,
    markers,
    tours,
    tour_routes,
    mapbox,
)

Base.metadata.create_all(bind=engine)

app = FastAPI(title="Travel Map API (Trips, Markers, Tours, Routes)")

# setup file logger for API failures
api_logger = setup_api_logger()


async def _request_body(request: Request) -> str:
    try:
        body = await request.body()
    except Exception:
        body = b""
    return body.decode('utf-8', errors='replace')


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    # log request info and stacktrace
    body = await _request_body(request)
    api_logger.error("Unhandled exception on %s %s | body=%s | error=%s",
                     request.method, request.url.path, body, str(exc), exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    body = await _request_body(request)
    api_logger.warning("HTTPException on %s %s | status=%s | body=%s | detail=%s",
                       request.method, request.url.path, exc.status_code, body, str(exc.detail))
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.exception_handler(TravelMapError)
async def travel_map_exception_handler(request: Request, exc: TravelMapError):
    api_logger.warning("%s on %s %s | status=%s | detail=%s",
                       type(exc).__name__, request.method, request.url.path, exc.status_code, exc.message)
    content = {"detail": exc.message}
    if isinstance(exc, QuotaExceeded):
        content["usage"] = exc.usage()
    elif isinstance(exc, BusinessRuleViolation) and exc.errors:
        content["errors"] = exc.errors
    return JSONResponse(status_code=exc.status_code, content=content)


app.include_router(trips.router)
app.include_router(markers.router)
app.include_router(tours.router)
app.include_router(tour_routes.router)
app.include_router(mapbox.router)

import logging
import time
from fastapi import FastAPI, APIRouter, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from config import CORS_ORIGINS
from database import engine, Base
from logging_setup import setup_logging
import user_models, bus_models, driver_assignment, fitness_models, trip_models, spare_part_models  # noqa: F401
import auth_routes, user_routes, staff_routes, bus_routes, assignment_routes
import fitness_routes, today_route_routes, spare_part_routes, fuel_efficiency_routes

setup_logging()
logger = logging.getLogger("fleetmadox")

Base.metadata.create_all(bind=engine)

app = FastAPI(title="FleetMadox API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info("%s %s %s %.1fms", request.method, request.url.path, response.status_code, elapsed_ms)
    return response


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    issues = [
        {
            "path": ".".join(str(part) for part in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={
            "code": "VALIDATION_ERROR",
            "message": "Invalid request data",
            "path": request.url.path,
            "issues": issues,
        },
    )


@app.exception_handler(IntegrityError)
async def integrity_exception_handler(request: Request, exc: IntegrityError):
    logger.warning("integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
    return JSONResponse(status_code=409, content={"detail": "Conflict with existing data"})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.get("/")
def show_status():
    return {"name": "FleetMadox API", "status": "ok"}


api = APIRouter(prefix="/api")


@api.get("")
def show_message():
    return {"success": True, "message": "FleetMadox API running successfully!"}


for module in (
    auth_routes, user_routes, staff_routes, bus_routes, assignment_routes,
    fitness_routes, today_route_routes, spare_part_routes, fuel_efficiency_routes,
):
    api.include_router(module.router)

app.include_router(api)

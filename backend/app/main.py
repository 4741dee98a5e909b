from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.routes import (
    activity,
    auth,
    booking_requests,
    classroom_bookings,
    classrooms,
    departments,
    faculty,
    health,
    resource_requests,
    resources,
    subjects,
    timeslots,
    timetables,
)
from app.core.config import get_settings
from app.core.exceptions import AppError
from app.core.logging import configure_logging
from app.core.middleware import AccessLogMiddleware, RequestSizeLimitMiddleware, SecurityHeadersMiddleware
from app.db.bootstrap import ensure_runtime_schema_compatibility

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    configure_logging(settings.log_level)
    ensure_runtime_schema_compatibility()
    logger.info("%s started", settings.project_name)
    yield


async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.message, "details": exc.details},
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": str(exc.detail), "details": {}},
        headers=getattr(exc, "headers", None),
    )


async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": ".".join(str(part) for part in error.get("loc", ()) if part != "body"), "message": error.get("msg")}
        for error in exc.errors()
    ]
    message = errors[0]["message"] if errors else "Invalid request"
    return JSONResponse(
        status_code=400,
        content={"success": False, "message": message, "details": {"errors": errors}},
    )


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"success": False, "message": "Internal server error", "details": {}},
    )


app = FastAPI(title=settings.project_name, lifespan=lifespan)
app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(StarletteHTTPException, http_error_handler)
app.add_exception_handler(RequestValidationError, request_validation_error_handler)
app.add_exception_handler(Exception, unhandled_error_handler)

app.add_middleware(RequestSizeLimitMiddleware, max_bytes=settings.max_request_size_bytes)
app.add_middleware(SecurityHeadersMiddleware, settings=settings)
app.add_middleware(AccessLogMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

api = settings.api_prefix
app.include_router(health.router, prefix=api, tags=["health"])
app.include_router(auth.router, prefix=f"{api}/auth", tags=["auth"])
app.include_router(departments.router, prefix=f"{api}/departments", tags=["departments"])
app.include_router(classrooms.router, prefix=f"{api}/classrooms", tags=["classrooms"])
app.include_router(faculty.router, prefix=f"{api}/faculty", tags=["faculty"])
app.include_router(subjects.router, prefix=f"{api}/subjects", tags=["subjects"])
app.include_router(resources.router, prefix=f"{api}/resources", tags=["resources"])
app.include_router(classroom_bookings.router, prefix=f"{api}/classroom-bookings", tags=["classroom-bookings"])
app.include_router(timetables.router, prefix=f"{api}/timetables", tags=["timetables"])
app.include_router(booking_requests.router, prefix=f"{api}/booking-requests", tags=["booking-requests"])
app.include_router(resource_requests.router, prefix=f"{api}/resource-requests", tags=["resource-requests"])
app.include_router(timeslots.router, prefix=api, tags=["timeslots"])
app.include_router(activity.router, prefix=api, tags=["activity"])

"""
Application entry point for the Courses API.

Design choices:
- Mounts the course router using a configurable prefix from core.config Settings.
- Owns the process-scoped database engine: created on startup, disposed on shutdown.
- Translates every error into the same JSON envelope: {error, code, success: false, ...context}.
"""
import logging
import time
from datetime import datetime, timezone
from typing import List

from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.v1.routes import router as courses_router
from core.config import get_settings
from core.errors import CourseError, StorageError
from core.logging_config import configure_logging, get_request_id
from database import check_connection, create_schema, dispose_engine, get_engine, init_engine
from middleware import RequestLoggingMiddleware, create_request_logging_config
from schemas.api import ConnectionCheck, HealthStatus

_settings = get_settings()

# Configure structured logging
configure_logging(_settings.log_level)
logger = logging.getLogger("app")

_started_at = time.monotonic()

app = FastAPI(title="Courses API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
)
app.add_middleware(RequestLoggingMiddleware, config=create_request_logging_config())


@app.get("/")
async def root():
    return {
        "message": "Courses API is live",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "status": "running",
    }


@app.get("/health", response_model=HealthStatus)
async def health() -> HealthStatus:
    return HealthStatus(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        uptime=round(time.monotonic() - _started_at, 3),
    )


@app.get("/test-connection", response_model=ConnectionCheck)
def test_connection(engine: Engine = Depends(get_engine)) -> ConnectionCheck:
    """Round-trip to the database and report its clock and version."""
    try:
        info = check_connection(engine)
    except SQLAlchemyError as e:
        raise StorageError("Database connection failed", detail=str(e)) from e
    return ConnectionCheck(success=True, message="Database connected successfully!", **info)


app.include_router(courses_router, prefix=_settings.api_prefix)


def available_routes() -> List[str]:
    """Every documented method and path, as listed in the OpenAPI schema."""
    paths = app.openapi().get("paths", {})
    return [f"{method.upper()} {path}" for path, operations in paths.items() for method in operations]


def _error_body(error: str, code: str, **context) -> dict:
    return {"error": error, "code": code, "success": False, "request_id": get_request_id(), **context}


@app.exception_handler(CourseError)
async def course_error_handler(request: Request, exc: CourseError) -> JSONResponse:
    body = _error_body(exc.message, exc.code, **exc.context())
    if isinstance(exc, StorageError):
        logger.error(exc.code, extra={"path": request.url.path, "error": exc.detail})
        if _settings.expose_error_details and exc.detail:
            body["details"] = exc.detail
    else:
        logger.info(exc.code, extra={"path": request.url.path, **exc.context()})
    return JSONResponse(status_code=exc.status_code, content=body)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    first = errors[0] if errors else {}
    loc = [str(part) for part in first.get("loc", ()) if part not in ("body", "path", "query")]
    field = ".".join(loc) or None
    logger.info("request_validation_failed", extra={"path": request.url.path, "field": field})
    body = _error_body(
        first.get("msg", "Invalid request"),
        "validation_error",
        field=field,
        received={field: first.get("input")} if field else None,
    )
    return JSONResponse(status_code=400, content=jsonable_encoder(body))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # A known path with the wrong method is reported like any other unmatched route
    if exc.status_code in (404, 405):
        logger.info("route_not_found", extra={"method": request.method, "path": request.url.path})
        body = _error_body(
            "Route not found",
            "route_not_found",
            method=request.method,
            path=request.url.path,
            timestamp=datetime.now(timezone.utc).isoformat(),
            availableRoutes=available_routes(),
        )
        return JSONResponse(status_code=404, content=body)
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(str(exc.detail), "http_error"),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("unhandled_error", extra={
        "path": request.url.path,
        "error": str(exc),
        "error_type": type(exc).__name__,
    })
    body = _error_body("Internal server error", "internal_error")
    if _settings.expose_error_details:
        body["details"] = str(exc)
    return JSONResponse(status_code=500, content=body)


@app.on_event("startup")
async def startup_event():
    """Create the connection pool and make sure the courses table exists."""
    engine = init_engine(_settings)
    try:
        create_schema(engine)
    except SQLAlchemyError as e:
        # Keep serving /health; course routes will report storage errors.
        logger.error("schema_bootstrap_failed", extra={"error": str(e), "error_type": type(e).__name__})


@app.on_event("shutdown")
async def shutdown_event():
    dispose_engine()

"""
AgencyHub API

FastAPI application: logging and schema setup on startup, CORS, error
rendering and the /api/v1 routers.

Every error leaves as {"detail": ..., "type": ...}:
    400 validation_error     404 not_found
    401 authentication_error 403 permission_denied
    409 conflict             500 internal_error
"""
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from agencyhub import __version__
from agencyhub.api.endpoints import agencies, auth, records, users
from agencyhub.config import get_settings
from agencyhub.core.exceptions import AgencyHubError, AuthenticationError
from agencyhub.database import engine, init_db
from agencyhub.utils.logging import get_logger, setup_logging

settings = get_settings()

setup_logging(
    log_level=settings.LOG_LEVEL,
    json_format=(settings.ENVIRONMENT == "production")
)
logger = get_logger(__name__)

API_PREFIX = "/api/v1"

# Frontends allowed outside development
ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"AgencyHub {__version__} starting ({settings.ENVIRONMENT})")
    if settings.AUTO_MIGRATE:
        init_db()

    yield

    engine.dispose()
    logger.info("AgencyHub stopped")


app = FastAPI(
    title="AgencyHub",
    description="Multi-tenant agency management: team, clients, projects, leads, quotes, tasks and contacts",
    version=__version__,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.ENVIRONMENT == "development" else ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def timing_header(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    response.headers["X-Process-Time"] = f"{time.perf_counter() - started:.4f}"
    return response


def error_response(status_code: int, detail: str, error_type: str, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"detail": detail, "type": error_type},
        headers=headers,
    )


@app.exception_handler(AgencyHubError)
async def handle_core_error(request: Request, exc: AgencyHubError):
    # permission denials were already logged as security events by the gate
    logger.info(
        f"{request.method} {request.url.path} -> {exc.status_code} {exc.error_type}: {exc.detail}",
        extra={"path": request.url.path, "method": request.method}
    )
    return error_response(exc.status_code, exc.detail, exc.error_type)


@app.exception_handler(AuthenticationError)
async def handle_authentication_error(request: Request, exc: AuthenticationError):
    return error_response(exc.status_code, exc.detail, "authentication_error", exc.headers)


@app.exception_handler(RequestValidationError)
async def handle_request_validation_error(request: Request, exc: RequestValidationError):
    """Malformed bodies and parameters are reported like any other ValidationError."""
    problems = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"] if part != "body")
        problems.append(f"{field}: {error['msg']}" if field else error["msg"])
    return error_response(400, "; ".join(problems), "validation_error")


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception):
    """Log everything, reveal details only in DEBUG."""
    logger.error(
        f"Unhandled {type(exc).__name__} on {request.method} {request.url.path}",
        exc_info=exc,
        extra={"path": request.url.path, "method": request.method}
    )
    if settings.DEBUG:
        return error_response(500, str(exc), type(exc).__name__)
    return error_response(500, "Internal server error", "internal_error")


@app.get("/health", tags=["health"])
async def health_check():
    """Liveness plus a round trip to the database."""
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError as exc:
        logger.error(f"Health check could not reach the database: {exc}")
        database = "unavailable"

    return {
        "status": "healthy" if database == "ok" else "degraded",
        "database": database,
        "environment": settings.ENVIRONMENT,
        "version": __version__,
    }


app.include_router(auth.router, prefix=API_PREFIX)
app.include_router(agencies.router, prefix=API_PREFIX)
app.include_router(users.router, prefix=API_PREFIX)
for router in records.routers:
    app.include_router(router, prefix=API_PREFIX)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "agencyhub.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )

"""FastAPI application entrypoint."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from reviewapp.api.middleware import RequestIDMiddleware, RequestLoggingMiddleware
from reviewapp.api.router import api_router
from reviewapp.config import settings
from reviewapp.database import close_db
from reviewapp.services.errors import ServiceError

logger = logging.getLogger(__name__)

# Initialize Sentry for error tracking
if settings.sentry_dsn:
    import sentry_sdk

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.environment,
        traces_sample_rate=0.1 if settings.is_production else 1.0,
    )
    logger.info("Sentry initialized")


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    # Startup: Database initialization is handled by Alembic migrations
    yield
    await close_db()


app = FastAPI(
    title="ReviewApp API",
    description="User accounts and movie reviews",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/api/docs" if settings.debug_enabled else None,
    redoc_url="/api/redoc" if settings.debug_enabled else None,
    openapi_url="/api/openapi.json" if settings.debug_enabled else None,
)


def error_response(message: str, status_code: int = status.HTTP_400_BAD_REQUEST, headers=None) -> JSONResponse:
    """Render the ``{"error": message}`` envelope shared by all failures."""
    return JSONResponse({"error": message}, status_code=status_code, headers=headers)


def first_validation_message(exc: RequestValidationError) -> str:
    """Describe the first failing field of a request body."""
    errors = exc.errors()
    if not errors:
        return "Invalid request!"

    error = errors[0]
    message = str(error.get("msg", "Invalid request!"))
    if error.get("type") == "value_error":
        return message.removeprefix("Value error, ")

    loc = [str(part) for part in error.get("loc", ()) if part != "body"]
    return f"{loc[-1]}: {message}" if loc else message


@app.exception_handler(ServiceError)
async def service_error_handler(_request: Request, exc: ServiceError):
    return error_response(exc.message, exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(_request: Request, exc: RequestValidationError):
    return error_response(first_validation_message(exc))


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(_request: Request, exc: StarletteHTTPException):
    return error_response(str(exc.detail), exc.status_code, headers=getattr(exc, "headers", None))


# Outermost last: request IDs are assigned before requests are logged
app.add_middleware(RequestLoggingMiddleware)  # type: ignore[arg-type]
app.add_middleware(RequestIDMiddleware)  # type: ignore[arg-type]

app.add_middleware(
    CORSMiddleware,  # type: ignore[arg-type]
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "Accept", "X-Request-ID"],
    expose_headers=["X-Request-ID"],
)

app.include_router(api_router, prefix="/api")


if __name__ == "__main__":
    import uvicorn

    from reviewapp.logging import get_uvicorn_log_config

    uvicorn.run(
        "reviewapp.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.is_development,
        log_config=get_uvicorn_log_config(),
    )

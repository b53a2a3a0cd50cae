import time
import uuid
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import sentry_sdk
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute
from sqlmodel import Session
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.cors import CORSMiddleware

from shopfloor.api.main import api_router
from shopfloor.core.config import settings
from shopfloor.core.config_validation import get_allowed_origins, validate_configuration
from shopfloor.core.db import create_db_and_tables, engine
from shopfloor.core.exceptions import EntityNotFoundError, ShopfloorError
from shopfloor.core.observability import (
    REQUEST_COUNT,
    REQUEST_DURATION,
    get_logger,
    initialize_observability,
    set_correlation_id,
)
from shopfloor.services.seeding import DatabaseSeedingService, load_seed_configuration

logger = get_logger(__name__)


class ObservabilityMiddleware(BaseHTTPMiddleware):
    """Middleware for request observability and metrics collection."""

    async def dispatch(self, request: Request, call_next):
        correlation_id = request.headers.get("X-Correlation-ID") or str(uuid.uuid4())
        set_correlation_id(correlation_id)

        start_time = time.time()
        method = request.method
        path = request.url.path

        logger.info(
            "Request started",
            method=method,
            path=path,
            client_ip=request.client.host if request.client else None,
            user_agent=request.headers.get("User-Agent", ""),
        )

        try:
            response = await call_next(request)
        except Exception as e:
            duration = time.time() - start_time
            REQUEST_COUNT.labels(method=method, endpoint=path, status="500").inc()
            REQUEST_DURATION.labels(method=method, endpoint=path).observe(duration)
            logger.error(
                "Request failed",
                method=method,
                path=path,
                duration_seconds=duration,
                error=str(e),
                error_type=type(e).__name__,
                exc_info=True,
            )
            raise

        duration = time.time() - start_time
        status_code = response.status_code
        REQUEST_COUNT.labels(method=method, endpoint=path, status=str(status_code)).inc()
        REQUEST_DURATION.labels(method=method, endpoint=path).observe(duration)

        response.headers["X-Correlation-ID"] = correlation_id
        logger.info(
            "Request completed",
            method=method,
            path=path,
            status_code=status_code,
            duration_seconds=duration,
        )
        return response


def custom_generate_unique_id(route: APIRoute) -> str:
    return f"{route.tags[0]}-{route.name}"


def run_startup_seeding() -> None:
    if not settings.SEED_DATABASE or settings.ENVIRONMENT == "testing":
        return
    seed_config = load_seed_configuration(settings.SEED_CONFIG_FILE)
    with Session(engine) as session:
        DatabaseSeedingService(session, seed_config, engine).seed_for_environment(
            settings.ENVIRONMENT
        )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    logger.info("Starting application initialization")

    try:
        initialize_observability()
        validate_configuration(settings)
        create_db_and_tables()
        run_startup_seeding()

        logger.info(
            "Application started successfully",
            project_name=settings.PROJECT_NAME,
            environment=settings.ENVIRONMENT,
            metrics_enabled=settings.ENABLE_METRICS,
            metrics_port=settings.METRICS_PORT if settings.ENABLE_METRICS else None,
        )

        yield

    except Exception as e:
        logger.error("Application startup failed", error=str(e), exc_info=True)
        raise

    finally:
        logger.info("Shutting down application")


# Initialize Sentry for error tracking
if settings.SENTRY_DSN and settings.ENVIRONMENT not in ("development", "testing"):
    sentry_sdk.init(
        dsn=str(settings.SENTRY_DSN),
        traces_sample_rate=1.0 if settings.ENVIRONMENT == "staging" else 0.1,
        environment=settings.ENVIRONMENT,
    )

app = FastAPI(
    title=settings.PROJECT_NAME,
    description="""
    Shopfloor - Authentication and Production Scheduling API

    ## Features

    * **Authentication**: Registration, password login, Google sign-in and JWT bearer tokens
    * **Production Orders**: Order intake, status tracking and statistics
    * **Machines**: Status and utilization of the production equipment
    * **Production Jobs**: Per-machine job queues with drag-and-drop reordering
    """,
    version="1.0.0",
    openapi_url=f"{settings.API_PREFIX}/openapi.json",
    docs_url="/docs",
    redoc_url="/redoc",
    generate_unique_id_function=custom_generate_unique_id,
    lifespan=lifespan,
)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        field = ".".join(loc)
        errors.append(f"{field}: {error['msg']}" if field else error["msg"])
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=jsonable_encoder({"message": "Validation failed", "errors": errors}),
    )


@app.exception_handler(EntityNotFoundError)
async def not_found_handler(request: Request, exc: EntityNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content=exc.to_dict())


@app.exception_handler(ShopfloorError)
async def shopfloor_error_handler(request: Request, exc: ShopfloorError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=exc.to_dict())


app.add_middleware(ObservabilityMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_allowed_origins(settings),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix=settings.API_PREFIX)

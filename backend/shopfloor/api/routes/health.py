"""
Health check endpoint.

Reports database connectivity and whether the token issuer is usable.
"""

import time
from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError

from shopfloor.api.deps import JwtServiceDep, SessionDep
from shopfloor.core.db import check_connection
from shopfloor.core.observability import get_logger
from shopfloor.models import User
from shopfloor.services.jwt_service import JwtService

logger = get_logger(__name__)

router = APIRouter(tags=["health"])

HEALTHY = "healthy"
UNHEALTHY = "unhealthy"


class ServiceHealth(BaseModel):
    name: str
    status: str
    description: str
    response_time_ms: float | None = None


class HealthCheckResponse(BaseModel):
    status: str
    checks: list[ServiceHealth]
    timestamp: str


def check_database(session: SessionDep) -> ServiceHealth:
    start_time = time.perf_counter()
    try:
        connected = check_connection(session)
    except SQLAlchemyError as e:
        logger.error("Database health check failed", error=str(e))
        connected = False
    elapsed = (time.perf_counter() - start_time) * 1000

    return ServiceHealth(
        name="database",
        status=HEALTHY if connected else UNHEALTHY,
        description="Database connection is healthy" if connected else "Database connection failed",
        response_time_ms=round(elapsed, 2),
    )


def check_jwt_service(jwt_service: JwtService) -> ServiceHealth:
    config = jwt_service.config
    if not (config.JWT_KEY.strip() and config.JWT_ISSUER.strip() and config.JWT_AUDIENCE.strip()):
        return ServiceHealth(
            name="jwt",
            status=UNHEALTHY,
            description="JWT configuration is incomplete",
        )

    probe = User(id="health-check", username="health-check", email="health@check.local", hashed_password="")
    if jwt_service.validate_token(jwt_service.generate_token(probe)) is None:
        return ServiceHealth(name="jwt", status=UNHEALTHY, description="JWT round trip failed")

    return ServiceHealth(
        name="jwt", status=HEALTHY, description="JWT service is configured correctly"
    )


@router.get(
    "/health",
    summary="Service health",
    response_model=HealthCheckResponse,
    responses={503: {"description": "At least one check failed"}},
)
def health_check(session: SessionDep, jwt_service: JwtServiceDep) -> JSONResponse:
    checks = [check_database(session), check_jwt_service(jwt_service)]
    overall = HEALTHY if all(c.status == HEALTHY for c in checks) else UNHEALTHY

    body = HealthCheckResponse(
        status=overall,
        checks=checks,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
    return JSONResponse(
        status_code=200 if overall == HEALTHY else 503,
        content=body.model_dump(),
    )

"""
API dependencies.

Database sessions, bearer-token authentication and service factories for the
route handlers.
"""

from collections.abc import Generator
from typing import Annotated, Any

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from shopfloor.core.db import engine
from shopfloor.core.observability import set_user_id
from shopfloor.services.auth_service import AuthenticationService
from shopfloor.services.jwt_service import JwtService
from shopfloor.services.oauth import GoogleOAuthClient
from shopfloor.services.production import (
    MachineService,
    ProductionJobService,
    ProductionOrderService,
)

bearer_scheme = HTTPBearer(auto_error=False)


def get_db() -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session


SessionDep = Annotated[Session, Depends(get_db)]


def get_jwt_service() -> JwtService:
    return JwtService()


def get_oauth_client() -> GoogleOAuthClient:
    return GoogleOAuthClient()


JwtServiceDep = Annotated[JwtService, Depends(get_jwt_service)]
OAuthClientDep = Annotated[GoogleOAuthClient, Depends(get_oauth_client)]


def get_auth_service(session: SessionDep, jwt_service: JwtServiceDep) -> AuthenticationService:
    return AuthenticationService(session, jwt_service)


AuthServiceDep = Annotated[AuthenticationService, Depends(get_auth_service)]


def get_bearer_token(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> str:
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return credentials.credentials


TokenDep = Annotated[str, Depends(get_bearer_token)]


def get_current_claims(token: TokenDep, auth_service: AuthServiceDep) -> dict[str, Any]:
    """Claims of the caller's token; rejects expired, forged and revoked tokens."""
    claims = auth_service.validate_token(token)
    if claims is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    set_user_id(claims["sub"])
    return claims


CurrentClaims = Annotated[dict[str, Any], Depends(get_current_claims)]


def get_order_service(session: SessionDep) -> ProductionOrderService:
    return ProductionOrderService(session)


def get_machine_service(session: SessionDep) -> MachineService:
    return MachineService(session)


def get_job_service(session: SessionDep) -> ProductionJobService:
    return ProductionJobService(session)


OrderServiceDep = Annotated[ProductionOrderService, Depends(get_order_service)]
MachineServiceDep = Annotated[MachineService, Depends(get_machine_service)]
JobServiceDep = Annotated[ProductionJobService, Depends(get_job_service)]

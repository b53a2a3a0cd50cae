"""
Authentication API Routes.

Username/password registration and login, Google sign-in, profile and logout.
"""

from typing import Annotated
from urllib.parse import quote, urlencode

from fastapi import APIRouter, HTTPException, Query, Request, status
from fastapi.responses import PlainTextResponse, RedirectResponse

from shopfloor.api.deps import (
    AuthServiceDep,
    CurrentClaims,
    JwtServiceDep,
    OAuthClientDep,
    SessionDep,
    TokenDep,
)
from shopfloor.application.dtos import (
    AuthResponse,
    LoginRequest,
    Message,
    ProfileResponse,
    RegisterRequest,
    RegisterResponse,
    UserDto,
)
from shopfloor.core.config import settings
from shopfloor.core.exceptions import ShopfloorError
from shopfloor.core.observability import get_logger
from shopfloor.services.auth_service import OAuthUserInfo
from shopfloor.services.oauth import OAuthError
from shopfloor.services.user_service import UserService

logger = get_logger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

DEFAULT_FRONTEND_URL = "http://localhost:5173"


def _frontend_redirect(**params: str) -> RedirectResponse:
    frontend_url = (settings.FRONTEND_URL or DEFAULT_FRONTEND_URL).rstrip("/")
    query = urlencode(params, quote_via=quote)
    return RedirectResponse(
        f"{frontend_url}/oauth-success?{query}", status_code=status.HTTP_302_FOUND
    )


@router.post(
    "/register",
    summary="Register a new user",
    response_model=RegisterResponse,
    responses={400: {"description": "Duplicate account or password policy violation"}},
)
def register(request: RegisterRequest, auth_service: AuthServiceDep) -> RegisterResponse:
    try:
        result = auth_service.register(request.username, request.email, request.password)
    except Exception as e:
        logger.exception("Registration error")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Registration error: {e}",
        ) from e

    if not result.success:
        raise ShopfloorError(result.error_message or "Registration failed", result.errors)

    return RegisterResponse(
        user=UserDto.model_validate(result.user), token=result.token
    )


@router.post(
    "/login",
    summary="Log in with username and password",
    response_model=AuthResponse,
    responses={401: {"description": "Invalid username or password"}},
)
def login(request: LoginRequest, auth_service: AuthServiceDep) -> AuthResponse:
    try:
        result = auth_service.authenticate(request.username, request.password)
    except Exception as e:
        logger.exception("Login error")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    if not result.success:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail=result.error_message
        )

    return AuthResponse(user=UserDto.model_validate(result.user), token=result.token)


@router.get("/test", response_class=PlainTextResponse, summary="Liveness probe")
def test() -> str:
    return "Server is running successfully!"


@router.get(
    "/profile",
    summary="Current user profile",
    response_model=ProfileResponse,
    responses={401: {"description": "Missing or invalid token"}, 404: {"description": "User not found"}},
)
def profile(session: SessionDep, claims: CurrentClaims) -> ProfileResponse:
    user = UserService(session).get_user_by_id(claims["sub"])
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return ProfileResponse(user=UserDto.model_validate(user))


@router.post("/logout", summary="Revoke the current token", response_model=Message)
def logout(token: TokenDep, claims: CurrentClaims, auth_service: AuthServiceDep) -> Message:
    auth_service.revoke_token(token)
    logger.info("User logged out", user_id=claims["sub"])
    return Message(message="Logged out successfully")


@router.get("/google-login", summary="Start Google sign-in")
def google_login(
    request: Request,
    jwt_service: JwtServiceDep,
    oauth_client: OAuthClientDep,
    return_url: Annotated[str | None, Query(alias="returnUrl")] = None,
) -> RedirectResponse:
    state = jwt_service.create_oauth_state(return_url)
    redirect_uri = str(request.url_for("oauth_success"))
    return RedirectResponse(
        oauth_client.authorization_url(redirect_uri, state),
        status_code=status.HTTP_302_FOUND,
    )


@router.get("/oauth-success", summary="Google sign-in callback")
def oauth_success(
    request: Request,
    auth_service: AuthServiceDep,
    jwt_service: JwtServiceDep,
    oauth_client: OAuthClientDep,
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
) -> RedirectResponse:
    if error or not code or not state:
        logger.warning("OAuth callback without code", provider_error=error)
        return _frontend_redirect(error="OAuth authentication failed")

    state_payload = jwt_service.verify_oauth_state(state)
    if state_payload is None:
        return _frontend_redirect(error="Invalid OAuth state")

    try:
        redirect_uri = str(request.url_for("oauth_success"))
        access_token = oauth_client.exchange_code(code, redirect_uri)
        userinfo = oauth_client.fetch_userinfo(access_token)

        email = userinfo.get("email")
        if not email:
            return _frontend_redirect(error="No email returned from Google")

        result = auth_service.handle_oauth_user(
            OAuthUserInfo(email=email, name=userinfo.get("name"))
        )
    except OAuthError as e:
        return _frontend_redirect(error=e.message)
    except Exception as e:
        logger.exception("OAuth callback failed")
        return _frontend_redirect(error=str(e))

    if not result.success:
        return _frontend_redirect(error=result.error_message or "User creation failed")

    params = {"token": result.token}
    if state_payload.get("returnUrl"):
        params["returnUrl"] = state_payload["returnUrl"]
    return _frontend_redirect(**params)

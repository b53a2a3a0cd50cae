"""
Startup configuration checks and CORS origin resolution.

``validate_configuration`` runs once in the application lifespan and aborts
startup with a ``ConfigurationError`` describing everything that is wrong.
``get_allowed_origins`` produces the origin list handed to the CORS middleware.
"""

from urllib.parse import urlsplit

from pydantic import AnyHttpUrl, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from shopfloor.core.config import Settings
from shopfloor.core.exceptions import ConfigurationError
from shopfloor.core.observability import get_logger

logger = get_logger(__name__)

REQUIRED_KEYS = (
    "JWT_KEY",
    "JWT_ISSUER",
    "JWT_AUDIENCE",
    "GOOGLE_CLIENT_ID",
    "GOOGLE_CLIENT_SECRET",
    "FRONTEND_URL",
)

WEAK_JWT_KEY_FRAGMENTS = (
    "your-secret-key",
    "your-256-bit-secret",
    "supersecretkey",
    "default",
    "secret",
)

MIN_JWT_KEY_LENGTH = 32
MAX_PRODUCTION_EXPIRATION_MINUTES = 1440

DEFAULT_ORIGINS: dict[str, tuple[str, ...]] = {
    "development": ("http://localhost:5173", "https://localhost:5173"),
    "staging": ("https://staging.your-domain.com",),
    "production": ("https://your-production-domain.com",),
}
FALLBACK_ORIGINS: tuple[str, ...] = ("http://localhost:5173",)

_http_url = TypeAdapter(AnyHttpUrl)


def validate_configuration(settings: Settings) -> None:
    """Check required keys, CORS origins and JWT settings.

    Raises:
        ConfigurationError: on the first category of problems found.
    """
    missing = [key for key in REQUIRED_KEYS if not str(getattr(settings, key) or "").strip()]
    if missing:
        keys = ", ".join(missing)
        if settings.ENVIRONMENT == "development":
            hint = "Please set them in your local .env file."
        elif settings.ENVIRONMENT in ("staging", "production"):
            hint = "Please set the corresponding environment variables."
        else:
            hint = "Check your configuration setup."
        raise ConfigurationError(f"Missing configuration keys: {keys}. {hint}", missing)

    _validate_cors_configuration(settings)
    _validate_jwt_configuration(settings)


def _validate_cors_configuration(settings: Settings) -> None:
    invalid: list[str] = []
    http_in_production: list[str] = []

    for origin in _configured_origins(settings):
        if not is_valid_origin(origin):
            invalid.append(origin)
        elif settings.ENVIRONMENT == "production" and origin.lower().startswith("http://"):
            http_in_production.append(origin)

    if invalid:
        raise ConfigurationError(
            f"Invalid CORS origins found: {', '.join(invalid)}. "
            "Origins must be valid HTTP or HTTPS URLs.",
            invalid,
        )
    if http_in_production:
        raise ConfigurationError(
            f"HTTP origins not allowed in production: {', '.join(http_in_production)}. "
            "All origins must use HTTPS in production.",
            http_in_production,
        )


def _validate_jwt_configuration(settings: Settings) -> None:
    key = settings.JWT_KEY
    production = settings.ENVIRONMENT == "production"

    if key:
        if len(key) < MIN_JWT_KEY_LENGTH:
            raise ConfigurationError(
                "JWT key is too short. Minimum length is "
                f"{MIN_JWT_KEY_LENGTH} characters. Current length: {len(key)}."
            )
        if production and any(weak in key.lower() for weak in WEAK_JWT_KEY_FRAGMENTS):
            raise ConfigurationError(
                "JWT key appears to use a weak or default value. "
                "Use a cryptographically secure random key in production."
            )

    if settings.JWT_EXPIRATION_MINUTES <= 0:
        raise ConfigurationError("JWT_EXPIRATION_MINUTES must be greater than 0.")
    if production and settings.JWT_EXPIRATION_MINUTES > MAX_PRODUCTION_EXPIRATION_MINUTES:
        raise ConfigurationError(
            "JWT_EXPIRATION_MINUTES should not exceed 24 hours (1440 minutes) in production."
        )

    issuer = settings.JWT_ISSUER
    if production and issuer and "://" not in issuer and "." not in issuer:
        logger.warning("JWT issuer should typically be a URI in production", issuer=issuer)


def _configured_origins(settings: Settings) -> list[str]:
    if settings.ALLOWED_ORIGINS:
        return list(settings.ALLOWED_ORIGINS)
    if settings.FRONTEND_URL:
        return [settings.FRONTEND_URL]
    return list(DEFAULT_ORIGINS.get(settings.ENVIRONMENT, FALLBACK_ORIGINS)[:1])


def is_valid_origin(origin: str, environment: str = "") -> bool:
    """An origin is an absolute http(s) URL with a host; https only in production."""
    if not origin or not origin.strip():
        return False
    try:
        url = _http_url.validate_python(origin.strip())
    except PydanticValidationError:
        return False
    if not url.host:
        return False
    if environment == "production" and url.scheme != "https":
        return False
    return True


def alternate_protocol_origin(origin: str) -> str | None:
    """Swap http <-> https. Localhost keeps its port, other hosts use the default."""
    try:
        url = _http_url.validate_python(origin.strip())
    except PydanticValidationError:
        return None
    scheme = "https" if url.scheme == "http" else "http"
    alternate = f"{scheme}://{url.host}"
    explicit_port = urlsplit(origin.strip()).port
    if url.host == "localhost" and explicit_port:
        alternate += f":{explicit_port}"
    return alternate


def get_allowed_origins(settings: Settings) -> list[str]:
    """Resolve the CORS origin list for the configured environment."""
    environment = settings.ENVIRONMENT
    origins: list[str] = []

    for origin in _configured_origins(settings):
        origin = origin.strip().rstrip("/")
        if not is_valid_origin(origin, environment):
            logger.warning("Ignoring invalid CORS origin", origin=origin)
            continue
        origins.append(origin)
        if environment == "development":
            alternate = alternate_protocol_origin(origin)
            if alternate and is_valid_origin(alternate, environment):
                origins.append(alternate)

    if not origins:
        origins.extend(DEFAULT_ORIGINS.get(environment, FALLBACK_ORIGINS))

    return list(dict.fromkeys(origins))

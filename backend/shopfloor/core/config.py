import json
from typing import Annotated, Any, Literal

from pydantic import BeforeValidator, HttpUrl, computed_field
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


def parse_cors(v: Any) -> list[str] | str:
    if v is None or v == "":
        return []
    if isinstance(v, str) and not v.startswith("["):
        return [i.strip() for i in v.split(",") if i.strip()]
    elif isinstance(v, str):
        return json.loads(v)
    elif isinstance(v, list):
        return v
    raise ValueError(v)


Environment = Literal["development", "staging", "production", "testing"]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    PROJECT_NAME: str = "Shopfloor Scheduling API"
    API_PREFIX: str = "/api"
    ENVIRONMENT: Environment = "development"

    # JWT
    JWT_KEY: str = ""
    JWT_ISSUER: str = ""
    JWT_AUDIENCE: str = ""
    JWT_EXPIRATION_MINUTES: int = 60

    # Google OAuth
    GOOGLE_CLIENT_ID: str = ""
    GOOGLE_CLIENT_SECRET: str = ""
    GOOGLE_AUTHORIZATION_URL: str = "https://accounts.google.com/o/oauth2/v2/auth"
    GOOGLE_TOKEN_URL: str = "https://oauth2.googleapis.com/token"
    GOOGLE_USERINFO_URL: str = "https://openidconnect.googleapis.com/v1/userinfo"
    OAUTH_STATE_EXPIRE_MINUTES: int = 15

    FRONTEND_URL: str = ""
    ALLOWED_ORIGINS: Annotated[list[str], NoDecode, BeforeValidator(parse_cors)] = []

    DATABASE_URL: str | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        # One sqlite file per environment unless a URL is configured
        return {
            "development": "sqlite:///./shopfloor-dev.db",
            "staging": "sqlite:///./staging.db",
            "production": "sqlite:///./production.db",
            "testing": "sqlite://",
        }[self.ENVIRONMENT]

    # Seeding
    SEED_DATABASE: bool = True
    SEED_CONFIG_FILE: str | None = None

    # Observability
    LOG_LEVEL: str | None = None
    LOG_FORMAT: Literal["json", "console"] = "console"
    LOG_SQL: bool = False
    SENTRY_DSN: HttpUrl | None = None
    ENABLE_METRICS: bool = False
    METRICS_PORT: int = 8001

    @computed_field  # type: ignore[prop-decorator]
    @property
    def log_level(self) -> str:
        if self.LOG_LEVEL:
            return self.LOG_LEVEL.upper()
        return "WARNING" if self.ENVIRONMENT == "production" else "INFO"


settings = Settings()

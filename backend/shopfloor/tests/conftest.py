import os

# Configuration must be in place before shopfloor.core.config is imported
os.environ["ENVIRONMENT"] = "testing"
os.environ["JWT_KEY"] = "test-signing-key-0123456789-abcdefghijklmnop"
os.environ["JWT_ISSUER"] = "https://shopfloor.example.com"
os.environ["JWT_AUDIENCE"] = "shopfloor-clients"
os.environ["GOOGLE_CLIENT_ID"] = "test-client-id.apps.googleusercontent.com"
os.environ["GOOGLE_CLIENT_SECRET"] = "test-client-secret"
os.environ["FRONTEND_URL"] = "http://localhost:5173"
os.environ["SEED_DATABASE"] = "false"
os.environ.pop("DATABASE_URL", None)
os.environ.pop("ALLOWED_ORIGINS", None)

from collections.abc import Generator  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlmodel import Session, delete  # noqa: E402

from shopfloor.core.db import create_db_and_tables, engine  # noqa: E402
from shopfloor.main import app  # noqa: E402
from shopfloor.models import Machine, ProductionJob, ProductionOrder, User  # noqa: E402
from shopfloor.tests.utils import register_user_token_headers  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def create_tables() -> None:
    create_db_and_tables()


@pytest.fixture(autouse=True)
def clean_tables() -> Generator[None, None, None]:
    yield
    with Session(engine) as session:
        session.execute(delete(ProductionJob))
        session.execute(delete(ProductionOrder))
        session.execute(delete(Machine))
        session.execute(delete(User))
        session.commit()


@pytest.fixture()
def db() -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session


@pytest.fixture(scope="module")
def client() -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def user_token_headers(client: TestClient) -> dict[str, str]:
    return register_user_token_headers(client)

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine, text

from shopfloor.core.config import settings


def build_engine(database_uri: str) -> Engine:
    engine_kwargs: dict = {"pool_pre_ping": True}

    if database_uri.startswith("sqlite"):
        engine_kwargs["connect_args"] = {"check_same_thread": False}
        # In-memory databases live as long as their single connection
        if database_uri in ("sqlite://", "sqlite:///:memory:"):
            engine_kwargs["poolclass"] = StaticPool
    else:
        engine_kwargs.update(pool_recycle=3600, pool_size=10, max_overflow=20)

    new_engine = create_engine(database_uri, **engine_kwargs)

    if database_uri.startswith("sqlite"):
        # SQLite ignores foreign keys (and so ON DELETE CASCADE) unless asked
        @event.listens_for(new_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return new_engine


engine = build_engine(settings.SQLALCHEMY_DATABASE_URI)


# make sure all SQLModel models are imported (shopfloor.models) before creating
# tables, otherwise SQLModel might fail to initialize relationships properly
def create_db_and_tables(target: Engine | None = None) -> None:
    import shopfloor.models  # noqa: F401

    SQLModel.metadata.create_all(target or engine)


def check_connection(session: Session) -> bool:
    return session.execute(text("SELECT 1")).scalar() == 1

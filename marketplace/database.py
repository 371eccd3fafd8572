"""SQLModel database engine and session management."""

import logging

from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine, Session

from marketplace.config import settings

logger = logging.getLogger(__name__)


def make_engine(database_url: str) -> Engine:
    # SQLite needs check_same_thread=False; PostgreSQL does not
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_engine(database_url, echo=False, connect_args=connect_args)


engine = make_engine(settings.database_url)


def create_db_and_tables(bind: Engine | None = None):
    """Create all tables. Called on startup."""
    # Import models so their tables are registered on the metadata
    import marketplace.models  # noqa: F401

    SQLModel.metadata.create_all(bind or engine)
    logger.info("Database tables ready")


def get_session() -> Session:
    """Dependency that yields a database session."""
    with Session(engine) as session:
        yield session

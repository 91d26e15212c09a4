import logging
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from reconnect.config import DATABASE_URL, DB_POOL_SIZE

logger = logging.getLogger(__name__)


def build_engine(url: str):
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        # in-memory databases only live as long as their single connection
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)

    return create_engine(
        url,
        pool_size=DB_POOL_SIZE,
        pool_pre_ping=True,
    )


engine = build_engine(DATABASE_URL)


def get_session():
    with Session(engine) as session:
        yield session


def create_db_and_tables(bind=None):
    # registers the table on SQLModel.metadata
    from reconnect.models.found_item import FoundItem  # noqa: F401

    SQLModel.metadata.create_all(bind or engine)


def check_database(bind=None) -> bool:
    try:
        with (bind or engine).connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as e:
        logger.error("Database connection failed: %s", e)
        return False

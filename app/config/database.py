"""Postgres engine and sessions for the scheduling tables"""
import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, text
from sqlalchemy.orm import Session, sessionmaker

from app.config.settings import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

# btree_gist backs the per-coach overlap exclusion; pgcrypto backs gen_random_uuid() defaults
REQUIRED_EXTENSIONS = ("btree_gist", "pgcrypto")

engine = create_engine(
    settings.DATABASE_URL,
    pool_size=settings.DB_POOL_SIZE,
    max_overflow=settings.DB_MAX_OVERFLOW,
    pool_pre_ping=True,
)

SessionLocal = sessionmaker(bind=engine, autoflush=False)


def get_db() -> Iterator[Session]:
    """Request-scoped session for FastAPI dependencies"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def worker_session() -> Iterator[Session]:
    """Session for Celery tasks; rolled back if the task body raises"""
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def create_tables() -> None:
    """Create extensions and tables for local development; alembic owns deployed schemas"""
    from app.models import Base

    with engine.begin() as conn:
        for extension in REQUIRED_EXTENSIONS:
            conn.execute(text(f"CREATE EXTENSION IF NOT EXISTS {extension}"))
    Base.metadata.create_all(bind=engine)
    logger.info(f"Created scheduling tables: {sorted(Base.metadata.tables)}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    create_tables()

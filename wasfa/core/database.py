from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from wasfa.core.config import get_settings

settings = get_settings()

# Main SQLAlchemy engine
engine = create_engine(
    str(settings.database_url),
    future=True,
    pool_pre_ping=True,
)

# Session factory
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    future=True,
)


def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency that yields a DB session.

    Tenant isolation is not done at the connection level: every
    tenant-scoped query filters on tenant_id in the service layer.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

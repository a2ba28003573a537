"""Database session management"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from billing_core.config import settings
from billing_core.infrastructure.database.models import Base

# SQLite needs check_same_thread off because FastAPI runs sync endpoints in a threadpool
_connect_args = {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}

engine = create_engine(
    settings.database_url,
    pool_pre_ping=True,  # Verify connections before using
    connect_args=_connect_args,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db() -> None:
    """Create tables if they do not exist"""
    Base.metadata.create_all(bind=engine)


def get_db() -> Session:
    """Dependency injection for database sessions"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

"""
Database configuration and session management.

Configures SQLAlchemy engine with connection pooling for PostgreSQL.
Provides FastAPI dependency for database session injection.
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from api.settings import settings

DATABASE_URL = settings.get_database_url()

Base = declarative_base()

if DATABASE_URL.startswith("sqlite"):
    engine = create_engine(DATABASE_URL, connect_args={"check_same_thread": False})
else:
    engine = create_engine(
        DATABASE_URL,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
    )
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """Yield database session with automatic cleanup."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

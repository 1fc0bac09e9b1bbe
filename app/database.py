"""
sub2api Database Configuration

SQLAlchemy engine and session management.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from app.config import settings


def _engine_options(url: str) -> dict:
    """Pool options per backend; SQLite connections are shared across threads."""
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True, "pool_size": 10, "max_overflow": 20}


# =============================================================================
# Database Engine
# =============================================================================

engine = create_engine(
    settings.database_url,
    echo=settings.debug,
    **_engine_options(settings.database_url),
)

# =============================================================================
# Session Factory
# =============================================================================

# Repositories hand entities to background workers after the session closes,
# so loaded attributes must survive commit.
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
    bind=engine,
)

# =============================================================================
# Base Model
# =============================================================================

Base = declarative_base()

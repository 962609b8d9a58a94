#nodeconfig_engine\infrastructure\sql\database.py

"""SQLAlchemy database setup and session management."""

from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from nodeconfig_engine.config import settings


# ============================================
# Base for ORM models
# ============================================
Base = declarative_base()


# ============================================
# Engine configuration
# ============================================
def create_db_engine(database_url: Optional[str] = None, echo: Optional[bool] = None) -> Engine:
    """Create SQLAlchemy engine for the node registry."""

    url = database_url or settings.database_url
    echo = settings.echo_sql if echo is None else echo

    if url.startswith("sqlite") and ":memory:" in url:
        # One shared connection, or every session sees an empty database
        return create_engine(
            url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    return create_engine(url, echo=echo, pool_pre_ping=True)


# ============================================
# Session factory function
# ============================================
def get_session_factory(engine_instance: Engine):
    """Get a session factory bound to the given engine."""
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine_instance,
        expire_on_commit=False
    )


# ============================================
# Database initialization
# ============================================
def init_db(engine_instance: Engine) -> None:
    """Create all tables."""
    # Registers the tables on Base.metadata
    from nodeconfig_engine.infrastructure.sql import models  # noqa: F401

    Base.metadata.create_all(bind=engine_instance)


def drop_db(engine_instance: Engine) -> None:
    """Drop all tables (for testing only)."""
    Base.metadata.drop_all(bind=engine_instance)

"""
Database connection and session management using SQLAlchemy.
"""
from pathlib import Path
from typing import Any, Dict, Optional
import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker

from .models import Base

logger = logging.getLogger(__name__)


# Lazy initialization - these will be set when init_db() is called
_engine: Optional[Engine] = None
_SessionLocal: Optional[sessionmaker] = None


def build_engine(db_config: Dict[str, Any]) -> Engine:
    """
    Create an engine and make sure the tables exist.

    Pool sizing only applies to server databases; SQLite uses its own pools.
    """
    url = make_url(db_config["database_url"])
    kwargs: Dict[str, Any] = {"echo": db_config.get("echo", False)}

    if url.get_backend_name() == "sqlite":
        kwargs["connect_args"] = {"check_same_thread": False}
        if url.database and url.database != ":memory:":
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)
    else:
        kwargs["pool_size"] = db_config.get("pool_size", 5)
        kwargs["max_overflow"] = db_config.get("max_overflow", 10)
        kwargs["pool_pre_ping"] = db_config.get("pool_pre_ping", True)

    engine = create_engine(url, **kwargs)
    Base.metadata.create_all(bind=engine)
    return engine


def init_db(db_config: Optional[Dict[str, Any]] = None) -> None:
    """
    Initialize database connection. Call this before using the database.
    """
    global _engine, _SessionLocal

    if _engine is not None:
        return  # Already initialized

    if db_config is None:
        from .config import get_db_config
        db_config = get_db_config()

    _engine = build_engine(db_config)
    _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=_engine)
    logger.info("Database initialized successfully")


def get_session_local() -> sessionmaker:
    """Get the session factory, initializing if necessary."""
    if _SessionLocal is None:
        init_db()
    return _SessionLocal

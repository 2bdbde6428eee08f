"""
Database module for the attendance log (SQLAlchemy).
"""
from .models import Base, AttendanceLogRecord
from .database import build_engine, init_db, get_session_local
from .config import get_db_config

__all__ = [
    "Base",
    "AttendanceLogRecord",
    "build_engine",
    "init_db",
    "get_session_local",
    "get_db_config",
]

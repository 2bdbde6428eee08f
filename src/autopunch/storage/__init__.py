"""
Storage module: JSON user collection and SQL attendance log.
"""
from .users import JsonUserStore
from .logs import SqlLogStore

__all__ = [
    "JsonUserStore",
    "SqlLogStore",
]

"""
FastAPI endpoints module.
"""
from .config import get_api_config
from .main import app, create_app

__all__ = [
    "app",
    "create_app",
    "get_api_config",
]

"""
FastAPI endpoints configuration.
"""
import os
from typing import Dict, Any

from dotenv import load_dotenv

load_dotenv()


def get_api_config() -> Dict[str, Any]:
    """
    Get API configuration settings.

    Returns:
        Dictionary with API configuration
    """
    return {
        "title": os.getenv("API_TITLE", "Attendance Automation API"),
        "description": os.getenv("API_DESCRIPTION", "API for scheduled attendance punches"),
        "version": os.getenv("API_VERSION", "1.0.0"),
        "host": os.getenv("API_HOST", "0.0.0.0"),
        "port": int(os.getenv("API_PORT", "8000")),
        "reload": os.getenv("API_RELOAD", "false").lower() == "true",
        "production": os.getenv("ENVIRONMENT", "development") == "production",
        # When set, every /api route requires a matching X-Internal-Secret header
        "internal_secret": os.getenv("INTERNAL_SECRET") or None,
    }

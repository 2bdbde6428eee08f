#!/usr/bin/env python3
"""
Startup script for running the FastAPI application with the scheduler.
"""
import sys
import os
from pathlib import Path

# Allow running from a checkout without installing the package
src_path = Path(__file__).parent / "src"
sys.path.insert(0, str(src_path))

import uvicorn
from autopunch.endpoints.config import get_api_config
from autopunch.utils import setup_logging

if __name__ == "__main__":
    api_config = get_api_config()
    setup_logging(verbose=os.getenv("LOG_LEVEL", "").upper() == "DEBUG")

    # Hosting platforms provide PORT
    port = int(os.getenv("PORT", api_config["port"]))

    # Use string import path so uvicorn can properly resolve the app
    uvicorn.run(
        "autopunch.endpoints.main:app",
        host=api_config["host"],
        port=port,
        reload=api_config["reload"],
        log_level="info"
    )

"""
Base/shared configuration management for attendance automation.
"""
import os
import logging
from pathlib import Path
from typing import Dict, Any, Optional

from croniter import croniter
from dotenv import load_dotenv

from autopunch.exceptions import ConfigurationError, InvalidTimeFormat
from autopunch.timeutil import parse_time

load_dotenv()  # Load .env file if it exists

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = Path.cwd() / "data"


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


def get_app_config() -> Dict[str, Any]:
    """
    Get application configuration settings.

    Returns:
        Dictionary with application configuration
    """
    data_dir = Path(os.getenv("AUTOPUNCH_DATA_DIR", str(DEFAULT_DATA_DIR)))
    return {
        "data_dir": data_dir,
        "users_file": Path(os.getenv("AUTOPUNCH_USERS_FILE", str(data_dir / "users.json"))),
        "timezone": os.getenv("AUTOPUNCH_TIMEZONE") or None,
        "provider": os.getenv("AUTOPUNCH_PROVIDER", "portal"),
        "base_url": os.getenv("PORTAL_BASE_URL", "https://hcm.example.com"),
        "default_timeout": int(os.getenv("PORTAL_TIMEOUT", "30000")),
        "headless": _env_bool("PORTAL_HEADLESS", "true"),
        "slow_mo": int(os.getenv("PORTAL_SLOW_MO", "0")),
        "screenshot_dir": Path(os.getenv("AUTOPUNCH_SCREENSHOT_DIR", str(data_dir / "screenshots"))),
    }


def get_automation_config() -> Dict[str, Any]:
    """
    Get automation scheduling settings.

    Returns:
        Dictionary with the scheduling engine's tuning knobs
    """
    return {
        # Cron schedule for automation (runs every minute)
        "cron_schedule": os.getenv("AUTOMATION_CRON_SCHEDULE", "* * * * *"),
        # Tolerance around the (jittered) scheduled time, in minutes
        "time_window_minutes": int(os.getenv("AUTOMATION_TIME_WINDOW_MINUTES", "6")),
        # Per-day jitter applied to scheduled times, in minutes
        "randomize_window_minutes": int(os.getenv("AUTOMATION_RANDOMIZE_WINDOW_MINUTES", "6")),
        "max_retry_attempts": int(os.getenv("AUTOMATION_MAX_RETRY_ATTEMPTS", "3")),
        "retry_delay_seconds": float(os.getenv("AUTOMATION_RETRY_DELAY_SECONDS", "5")),
        # Bounded retry horizon after the scheduled login time
        "extended_retry_hours": float(os.getenv("AUTOMATION_EXTENDED_RETRY_HOURS", "2")),
        "emergency_logout_start": os.getenv("AUTOMATION_EMERGENCY_LOGOUT_START", "23:00"),
        "emergency_logout_end": os.getenv("AUTOMATION_EMERGENCY_LOGOUT_END", "23:59"),
        "enable_automation": _env_bool("AUTOMATION_ENABLED", "true"),
    }


def validate_automation_config(config: Dict[str, Any]) -> None:
    """
    Validate automation settings.

    Raises:
        ConfigurationError: If a value is out of range or malformed
    """
    try:
        start = parse_time(config["emergency_logout_start"])
        end = parse_time(config["emergency_logout_end"])
    except InvalidTimeFormat as e:
        raise ConfigurationError(f"Invalid emergency logout window: {e}") from e

    if end < start:
        raise ConfigurationError("Emergency logout end must not be before its start")

    if not croniter.is_valid(config["cron_schedule"]):
        raise ConfigurationError(f"Invalid cron schedule: {config['cron_schedule']}")

    for key in ("time_window_minutes", "randomize_window_minutes", "retry_delay_seconds", "extended_retry_hours"):
        if config[key] < 0:
            raise ConfigurationError(f"{key} must not be negative")

    if config["max_retry_attempts"] < 1:
        raise ConfigurationError("max_retry_attempts must be at least 1")


def validate_config(automation_config: Optional[Dict[str, Any]] = None) -> bool:
    """
    Validate that required configuration exists.

    Returns:
        True if configuration is valid

    Raises:
        ConfigurationError: If configuration is invalid
    """
    try:
        automation = automation_config or get_automation_config()
        validate_automation_config(automation)

        app_config = get_app_config()

        # Credential key configuration (will raise if missing)
        from autopunch.kms.config import get_kms_config
        kms_config = get_kms_config()

        logger.info("Configuration validated successfully")
        logger.info(f"Users file: {app_config['users_file']}")
        logger.info(f"Provider: {app_config['provider']}")
        logger.info(f"Credential key source: {kms_config['mode']}")
        logger.info(f"Cron schedule: {automation['cron_schedule']}")

        return True
    except Exception as e:
        logger.error(f"Configuration validation failed: {e}")
        raise

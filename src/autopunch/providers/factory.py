"""
Provider registry and factory.

Implementations register themselves under a name; configuration
(AUTOPUNCH_PROVIDER) selects which one the application builds.
"""
import logging
from typing import Any, Callable, Dict, Optional, Type

from autopunch.exceptions import ConfigurationError
from .base import AttendanceProvider

logger = logging.getLogger(__name__)

_PROVIDERS: Dict[str, Type[AttendanceProvider]] = {}


def register_provider(name: str) -> Callable[[Type[AttendanceProvider]], Type[AttendanceProvider]]:
    """
    Class decorator registering a provider implementation.

    Example:
        @register_provider("portal")
        class PortalProvider(AttendanceProvider):
            ...
    """
    def decorator(cls: Type[AttendanceProvider]) -> Type[AttendanceProvider]:
        key = name.lower()
        if key in _PROVIDERS and _PROVIDERS[key] is not cls:
            raise ValueError(f"Provider already registered: {name}")
        cls.name = key
        _PROVIDERS[key] = cls
        return cls
    return decorator


def available_providers() -> list:
    return sorted(_PROVIDERS)


def create_provider(name: str, app_config: Optional[Dict[str, Any]] = None) -> AttendanceProvider:
    """
    Create a provider instance by registry name.

    Args:
        name: Provider name, e.g. "portal"
        app_config: Application configuration passed to the provider

    Raises:
        ConfigurationError: If no provider is registered under this name
    """
    # Import built-in implementations so they register themselves
    from . import portal  # noqa: F401

    provider_cls = _PROVIDERS.get(name.lower())
    if provider_cls is None:
        raise ConfigurationError(
            f"Unsupported provider type: {name}. Available: {', '.join(available_providers())}"
        )

    logger.info(f"Using attendance provider: {provider_cls.name}")
    return provider_cls(app_config or {})

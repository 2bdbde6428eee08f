"""
Builds the process-wide object graph from configuration.

Everything stateful (the execution lock, the provider, the stores) is
created exactly once here and passed to whoever needs it; no module keeps
its own global instance.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from functools import partial
from typing import Any, Callable, Dict, Optional

from sqlalchemy.orm import sessionmaker

from autopunch.automation import QueueProcessor
from autopunch.config import get_app_config, get_automation_config, validate_automation_config
from autopunch.db.database import build_engine, get_session_local
from autopunch.executor import ActionExecutor
from autopunch.kms import CredentialCipher, build_cipher
from autopunch.lock import ExecutionLock
from autopunch.providers import AttendanceProvider, create_provider
from autopunch.scheduler import AttendanceScheduler
from autopunch.services import UserService
from autopunch.storage import JsonUserStore, SqlLogStore
from autopunch.timeutil import local_now

logger = logging.getLogger(__name__)


@dataclass
class Services:
    app_config: Dict[str, Any]
    automation_config: Dict[str, Any]
    user_store: JsonUserStore
    log_store: SqlLogStore
    cipher: CredentialCipher
    provider: AttendanceProvider
    lock: ExecutionLock
    executor: ActionExecutor
    processor: QueueProcessor
    scheduler: AttendanceScheduler
    user_service: UserService
    clock: Callable[[], datetime]

    def close(self) -> None:
        self.scheduler.stop()
        self.provider.close()


def build_services(
    app_config: Optional[Dict[str, Any]] = None,
    automation_config: Optional[Dict[str, Any]] = None,
    db_config: Optional[Dict[str, Any]] = None,
    cipher: Optional[CredentialCipher] = None,
    provider: Optional[AttendanceProvider] = None,
    clock: Optional[Callable[[], datetime]] = None,
    sleep: Optional[Callable[[float], None]] = None,
) -> Services:
    """
    Wire up all components.

    Any argument left as None is built from environment configuration;
    tests pass fakes for the provider, cipher and clock.

    Raises:
        ConfigurationError: If configuration is invalid
    """
    app_config = app_config or get_app_config()
    automation_config = automation_config or get_automation_config()
    validate_automation_config(automation_config)

    clock = clock or partial(local_now, app_config.get("timezone"))

    user_store = JsonUserStore(app_config["users_file"])
    user_store.ensure_file_exists()

    if db_config is not None:
        session_factory = sessionmaker(autocommit=False, autoflush=False, bind=build_engine(db_config))
    else:
        session_factory = get_session_local()
    log_store = SqlLogStore(session_factory)

    cipher = cipher or build_cipher()
    provider = provider or create_provider(app_config["provider"], app_config)
    lock = ExecutionLock()

    executor_kwargs = {"clock": clock}
    if sleep is not None:
        executor_kwargs["sleep"] = sleep
    executor = ActionExecutor(provider, user_store, automation_config, **executor_kwargs)

    processor = QueueProcessor(user_store, log_store, cipher, executor, automation_config, clock=clock)
    scheduler = AttendanceScheduler(
        processor,
        lock,
        cron_schedule=automation_config["cron_schedule"],
        enabled=automation_config["enable_automation"],
        clock=clock,
    )

    logger.info(f"Services ready (users: {app_config['users_file']}, provider: {provider.name})")
    return Services(
        app_config=app_config,
        automation_config=automation_config,
        user_store=user_store,
        log_store=log_store,
        cipher=cipher,
        provider=provider,
        lock=lock,
        executor=executor,
        processor=processor,
        scheduler=scheduler,
        user_service=UserService(user_store, cipher),
        clock=clock,
    )

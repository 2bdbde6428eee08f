"""
FastAPI application main file.
"""
import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import BackgroundTasks, Depends, FastAPI, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, StrictInt
from starlette.exceptions import HTTPException as StarletteHTTPException

from autopunch.bootstrap import Services, build_services
from autopunch.exceptions import StoreError, UserNotFound, ValidationFailed
from autopunch.models import LockSource
from .config import get_api_config

logger = logging.getLogger(__name__)

LOGS_DEFAULT_LIMIT = 100
LOGS_MAX_LIMIT = 1000


class SyncUserRequest(BaseModel):
    """Request model for creating or updating a user."""
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(None, description="Portal user id")
    password: Optional[str] = Field(None, description="Portal password; empty keeps the stored one on update")
    login_time: Optional[str] = Field(None, alias="loginTime", description="HH:MM")
    logout_time: Optional[str] = Field(None, alias="logoutTime", description="HH:MM")
    weekdays: List[StrictInt] = Field(default_factory=list, description="1=Monday ... 7=Sunday")


def get_services(request: Request) -> Services:
    return request.app.state.services


def _error(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message, **extra})


def run_manual_cycle(services: Services) -> None:
    """Background task for a manual trigger; the lock is already held."""
    try:
        services.processor.process()
    except Exception as e:
        logger.error(f"Manual execution failed: {e}", exc_info=True)
    finally:
        services.lock.release()


def create_app(services: Optional[Services] = None) -> FastAPI:
    """
    Create the API application.

    Args:
        services: Prebuilt services; built from environment configuration at
            startup when omitted
    """
    api_config = get_api_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Lifespan event handler for startup and shutdown."""
        if app.state.services is None:
            try:
                app.state.services = build_services()
            except Exception as e:
                logger.error(f"Failed to initialize services: {e}")
                raise

        app.state.services.scheduler.start()

        yield

        app.state.services.close()

    docs_kwargs = {}
    if api_config["production"]:
        # Disable docs in production
        docs_kwargs = {"docs_url": None, "redoc_url": None, "openapi_url": None}

    app = FastAPI(
        title=api_config["title"],
        description=api_config["description"],
        version=api_config["version"],
        lifespan=lifespan,
        **docs_kwargs,
    )
    app.state.services = services

    @app.middleware("http")
    async def protect_internal_routes(request: Request, call_next):
        """Require the internal secret header on /api routes when one is configured."""
        expected_secret = api_config["internal_secret"]
        if expected_secret and request.url.path.startswith("/api"):
            if request.headers.get("X-Internal-Secret") != expected_secret:
                return _error(status.HTTP_403_FORBIDDEN, "Access denied. This endpoint is internal only.")
        return await call_next(request)

    @app.exception_handler(ValidationFailed)
    async def validation_failed_handler(request: Request, exc: ValidationFailed):
        return _error(status.HTTP_400_BAD_REQUEST, str(exc), errors=exc.errors)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = []
        for error in exc.errors():
            location = ".".join(str(part) for part in error.get("loc", ()) if part not in ("body", "query"))
            errors.append(f"{location}: {error.get('msg')}" if location else error.get("msg"))
        return _error(status.HTTP_400_BAD_REQUEST, "Validation failed", errors=errors)

    @app.exception_handler(UserNotFound)
    async def user_not_found_handler(request: Request, exc: UserNotFound):
        return _error(status.HTTP_404_NOT_FOUND, "User not found")

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError):
        logger.error(f"Storage error on {request.url.path}: {exc}")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Storage error")

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return _error(exc.status_code, str(exc.detail))

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    @app.post("/api/sync-user")
    def sync_user(payload: SyncUserRequest, services: Services = Depends(get_services)):
        """Create the user if new, otherwise update it."""
        user, is_new = services.user_service.sync_user(payload.model_dump(by_alias=True))
        return JSONResponse(
            status_code=status.HTTP_201_CREATED if is_new else status.HTTP_200_OK,
            content={
                "success": True,
                "message": "User created successfully" if is_new else "User updated successfully",
                "isNew": is_new,
                "user": user.to_dict(include_password=False),
            },
        )

    @app.get("/api/users/{user_id}")
    def get_user(user_id: str, services: Services = Depends(get_services)):
        user = services.user_service.get_user(user_id)
        return {"success": True, "user": user.to_dict(include_password=False)}

    @app.delete("/api/users/{user_id}")
    def delete_user(user_id: str, services: Services = Depends(get_services)):
        services.user_service.delete_user(user_id)
        return {"success": True, "message": "User deleted successfully"}

    @app.get("/api/attendance/logs")
    def get_logs(
        user_id: Optional[str] = Query(None, alias="userId"),
        limit: int = Query(LOGS_DEFAULT_LIMIT, ge=1, le=LOGS_MAX_LIMIT),
        services: Services = Depends(get_services),
    ):
        """Attendance logs, newest first."""
        logs = services.log_store.query_filtered(user_id=user_id, limit=limit)
        return {"success": True, "count": len(logs), "logs": [log.to_dict() for log in logs]}

    @app.get("/api/attendance/status")
    def get_status(services: Services = Depends(get_services)):
        return {"success": True, **services.lock.to_api(), "scheduler": services.scheduler.status()}

    @app.post("/api/attendance/trigger")
    def trigger(background_tasks: BackgroundTasks, services: Services = Depends(get_services)):
        """Start one automation cycle in the background unless one is running."""
        if not services.lock.acquire(LockSource.MANUAL):
            current = services.lock.to_api()
            return JSONResponse(
                status_code=status.HTTP_409_CONFLICT,
                content={
                    "success": False,
                    "error": "Execution already in progress",
                    "message": f"Attendance automation is already running (started by {current['source']})",
                    "lockedBy": current["source"],
                    "startedAt": current["startedAt"],
                },
            )

        background_tasks.add_task(run_manual_cycle, services)
        logger.info("Manual execution triggered")
        return JSONResponse(
            status_code=status.HTTP_202_ACCEPTED,
            content={
                "success": True,
                "message": "Attendance automation triggered",
                "startedAt": services.lock.to_api()["startedAt"],
            },
        )

    return app


app = create_app()

import asyncio
import contextlib
import logging
import logging.config
from datetime import timedelta

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from linkhub.api.errors import register_exception_handlers
from linkhub.api.routes import router as api_router
from linkhub.config import Settings, get_settings
from linkhub.core.security import build_password_hasher
from linkhub.core.storage import build_storage_gateway
from linkhub.database import create_session_factory, engine_from_settings
from linkhub.services import ResourceStore, UploadOrchestrator, run_upload_sweeper


LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
        }
    },
    "handlers": {
        "default": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
        }
    },
    "root": {
        "handlers": ["default"],
        "level": "INFO",
    },
    "loggers": {
        "botocore": {
            "handlers": ["default"],
            "level": "WARNING",
            "propagate": False,
        }
    },
}


logging.config.dictConfig(LOGGING_CONFIG)

logger = logging.getLogger(__name__)


def _init_state(app: FastAPI, settings: Settings) -> None:
    """Build the long-lived collaborators once and hang them on ``app.state``."""

    engine = engine_from_settings(settings)
    hasher = build_password_hasher(settings)
    gateway = build_storage_gateway(settings)

    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    app.state.password_hasher = hasher
    app.state.storage_gateway = gateway
    app.state.resource_store = ResourceStore(app.state.session_factory, hasher)
    app.state.upload_orchestrator = UploadOrchestrator(
        gateway,
        part_size=settings.upload_part_size,
        url_lifetime=timedelta(minutes=settings.presign_ttl_minutes),
    )
    app.state.sweeper_task = None


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(title=settings.app_name, debug=settings.debug)
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[str(origin).rstrip("/") for origin in settings.cors_origins],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    @app.get("/health", tags=["system"])
    def health_check() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok", "environment": settings.environment}

    @app.on_event("startup")
    async def _startup() -> None:
        _init_state(app, settings)
        if settings.pending_upload_ttl_minutes > 0:
            app.state.sweeper_task = asyncio.create_task(
                run_upload_sweeper(
                    app.state.resource_store,
                    app.state.storage_gateway,
                    ttl=timedelta(minutes=settings.pending_upload_ttl_minutes),
                    interval_seconds=settings.pending_sweep_interval_seconds,
                )
            )
        logger.info("%s started (%s)", settings.app_name, settings.environment)

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        task = app.state.sweeper_task
        if task is not None:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        app.state.engine.dispose()

    app.include_router(api_router, prefix="/api")
    return app


app = create_app()

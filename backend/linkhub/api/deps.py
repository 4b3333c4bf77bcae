"""FastAPI dependencies for the API layer.

Everything here is built once at start-up and kept on ``app.state``.
"""

from fastapi import Request

from linkhub.config import Settings
from linkhub.core.security import PasswordHasher
from linkhub.services import ResourceStore, UploadOrchestrator


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_resource_store(request: Request) -> ResourceStore:
    return request.app.state.resource_store


def get_upload_orchestrator(request: Request) -> UploadOrchestrator:
    return request.app.state.upload_orchestrator


def get_password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.password_hasher

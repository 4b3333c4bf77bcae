"""Shared pytest fixtures for backend tests."""

from __future__ import annotations

from datetime import timedelta
from typing import Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from linkhub.api import deps
from linkhub.config import Settings
from linkhub.core.security import PasswordHasher
from linkhub.core.storage import ObjectHead
from linkhub.database import create_db_engine, create_session_factory
from linkhub.errors import NotFoundError, StorageGatewayError
from linkhub.main import create_app
from linkhub.models import Base
from linkhub.schemas import CompletedPart
from linkhub.services import ResourceStore, UploadOrchestrator


class FakeStorageGateway:
    """In-memory object store recording every call.

    Method names listed in ``fail_on`` raise :class:`StorageGatewayError`.
    Tests simulate a client upload with :meth:`put_object`.
    """

    def __init__(self) -> None:
        self.calls: list[tuple] = []
        self.objects: dict[str, ObjectHead] = {}
        self.completed: dict[str, list[CompletedPart]] = {}
        self.fail_on: set[str] = set()
        self._upload_counter = 0

    def _record(self, name: str, *args) -> None:
        self.calls.append((name, *args))
        if name in self.fail_on:
            raise StorageGatewayError(f"{name} failed")

    def call_names(self) -> list[str]:
        return [call[0] for call in self.calls]

    def put_object(self, file_uuid: str, size: int, mime_type: str = "application/octet-stream") -> None:
        self.objects[file_uuid] = ObjectHead(size=size, mime_type=mime_type, etag='"stored"')

    def presign_put(self, file_uuid: str, mime_type: str, ttl: timedelta) -> str:
        self._record("presign_put", file_uuid, mime_type, ttl)
        return f"https://storage.test/files/{file_uuid}?op=put"

    def presign_upload_part(self, file_uuid: str, upload_id: str, part_number: int, ttl: timedelta) -> str:
        self._record("presign_upload_part", file_uuid, upload_id, part_number, ttl)
        return f"https://storage.test/files/{file_uuid}?uploadId={upload_id}&partNumber={part_number}"

    def create_multipart_upload(self, file_uuid: str, mime_type: str) -> str:
        self._record("create_multipart_upload", file_uuid, mime_type)
        self._upload_counter += 1
        return f"upload-{self._upload_counter}"

    def complete_multipart_upload(self, file_uuid: str, upload_id: str, parts) -> None:
        self._record("complete_multipart_upload", file_uuid, upload_id, list(parts))
        self.completed[file_uuid] = list(parts)

    def abort_multipart_upload(self, file_uuid: str, upload_id: str) -> None:
        self._record("abort_multipart_upload", file_uuid, upload_id)

    def presign_get(self, file_uuid: str, ttl: timedelta) -> str:
        self._record("presign_get", file_uuid, ttl)
        return f"https://storage.test/files/{file_uuid}?op=get"

    def head_object(self, file_uuid: str) -> ObjectHead:
        self._record("head_object", file_uuid)
        if file_uuid not in self.objects:
            raise NotFoundError(f"object files/{file_uuid} does not exist")
        return self.objects[file_uuid]

    def delete_object(self, file_uuid: str) -> None:
        self._record("delete_object", file_uuid)
        self.objects.pop(file_uuid, None)


@pytest.fixture()
def test_engine() -> Iterator[Engine]:
    """Provide an in-memory SQLite engine for isolated tests."""

    engine = create_db_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(engine)
        engine.dispose()


@pytest.fixture()
def session_factory(test_engine) -> sessionmaker[Session]:
    """Return a session factory bound to the test engine."""

    return create_session_factory(test_engine)


@pytest.fixture()
def db_session(session_factory) -> Iterator[Session]:
    """Yield a SQLAlchemy session for inspecting stored rows."""

    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def hasher() -> PasswordHasher:
    return PasswordHasher(["pbkdf2_sha256"])


@pytest.fixture()
def store(session_factory, hasher) -> ResourceStore:
    return ResourceStore(session_factory, hasher)


@pytest.fixture()
def gateway() -> FakeStorageGateway:
    return FakeStorageGateway()


@pytest.fixture()
def orchestrator(gateway) -> UploadOrchestrator:
    return UploadOrchestrator(gateway)


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        _env_file=None,
        environment="test",
        database_url="sqlite+pysqlite:///:memory:",
        s3_endpoint_url="http://localhost:9000",
        s3_access_key_id="test",
        s3_secret_access_key="test",
        list_max_limit=50,
    )


@pytest.fixture()
def client(settings, store, orchestrator, hasher) -> Iterator[TestClient]:
    """Yield a FastAPI TestClient whose collaborators are the test fixtures."""

    app = create_app(settings)
    app.dependency_overrides[deps.get_resource_store] = lambda: store
    app.dependency_overrides[deps.get_upload_orchestrator] = lambda: orchestrator
    app.dependency_overrides[deps.get_password_hasher] = lambda: hasher
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()

"""Transactional persistence of the entry/link/file aggregate."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload, sessionmaker

from linkhub.core.security import PasswordHasher
from linkhub.core.validators import validate_resource, validate_slug
from linkhub.errors import (
    ConsistencyViolation,
    DuplicateSlugError,
    ImmutabilityViolation,
    NotFoundError,
    ResourceError,
    TransactionError,
    ValidationError,
)
from linkhub.models import Entry, File, Link, ResourceType
from linkhub.schemas import EntryData, FileData, LinkData, Resource
from linkhub.schemas.resources import as_utc

logger = logging.getLogger(__name__)

_DUPLICATE_SLUG_MARKERS = ("uq_entries_slug", "entries.slug")


def _is_duplicate_slug(exc: IntegrityError) -> bool:
    message = str(exc.orig if exc.orig is not None else exc).lower()
    return any(marker in message for marker in _DUPLICATE_SLUG_MARKERS)


def _expect_one(rowcount: int, what: str) -> None:
    if rowcount != 1:
        raise ConsistencyViolation(f"{what} affected {rowcount} rows, expected 1")


def _to_second(value: datetime) -> datetime:
    return as_utc(value).replace(microsecond=0)


def _to_resource(entry: Entry, link: Link | None, file: File | None) -> Resource:
    entry_data = EntryData.model_validate(entry, from_attributes=True)
    if entry_data.type is ResourceType.LINK:
        if link is None:
            raise ConsistencyViolation(f"entry {entry.id} is a link but has no link row")
        return Resource(entry=entry_data, link=LinkData.model_validate(link, from_attributes=True))
    if file is None:
        raise ConsistencyViolation(f"entry {entry.id} is a file but has no file row")
    return Resource(entry=entry_data, file=FileData.model_validate(file, from_attributes=True))


class ResourceStore:
    """CRUD over resources where every multi-table write is one transaction.

    The store holds no mutable state of its own; concurrent requests are
    serialised by the database (unique slug constraint, transaction isolation).
    """

    def __init__(self, session_factory: sessionmaker[Session], hasher: PasswordHasher) -> None:
        self._session_factory = session_factory
        self._hasher = hasher

    @contextmanager
    def _transaction(self, action: str) -> Iterator[Session]:
        session = self._session_factory()
        try:
            with session.begin():
                yield session
        except ResourceError:
            raise
        except IntegrityError as exc:
            if _is_duplicate_slug(exc):
                raise DuplicateSlugError("a resource with this slug already exists", cause=exc) from exc
            raise TransactionError(f"{action} failed", cause=exc) from exc
        except SQLAlchemyError as exc:
            raise TransactionError(f"{action} failed", cause=exc) from exc
        finally:
            session.close()

    def get_resource(self, slug: str) -> Resource:
        """Fetch the entry by canonical slug, then its sub-row by entry id."""

        validate_slug(slug)
        with self._transaction("get resource") as session:
            entry = session.execute(select(Entry).where(Entry.slug == slug)).scalar_one_or_none()
            if entry is None:
                raise NotFoundError(f"no resource with slug {slug!r}")
            link = session.get(Link, entry.id) if entry.type is ResourceType.LINK else None
            file = session.get(File, entry.id) if entry.type is ResourceType.FILE else None
            return _to_resource(entry, link, file)

    def list_resources(self, offset: int, limit: int) -> list[Resource]:
        """Return resources in insertion order. Password hashes are NOT redacted."""

        if offset < 0:
            raise ValidationError("offset must not be negative")
        if limit <= 0:
            raise ValidationError("limit must be positive")
        with self._transaction("list resources") as session:
            entries = (
                session.execute(
                    select(Entry)
                    .options(selectinload(Entry.link), selectinload(Entry.file))
                    .order_by(Entry.id)
                    .offset(offset)
                    .limit(limit)
                )
                .scalars()
                .all()
            )
            return [_to_resource(entry, entry.link, entry.file) for entry in entries]

    def insert_resource(self, resource: Resource) -> int:
        """Insert entry and sub-row atomically and return the new entry id.

        The incoming entry id is ignored; the database assigns it.
        """

        validate_resource(resource, self._hasher)
        with self._transaction("insert resource") as session:
            entry = Entry(
                slug=resource.entry.slug,
                type=resource.entry.type,
                password_hash=resource.entry.password_hash,
                expires_at=resource.entry.expires_at,
            )
            session.add(entry)
            session.flush()
            if entry.id is None or entry.id <= 0:
                raise ConsistencyViolation("database did not assign an entry id")

            if resource.entry.type is ResourceType.LINK:
                session.add(Link(entry_id=entry.id, target_url=resource.link.target_url))
            else:
                session.add(
                    File(
                        entry_id=entry.id,
                        file_uuid=resource.file.file_uuid,
                        filename=resource.file.filename,
                        mime_type=resource.file.mime_type,
                        size=resource.file.size,
                        pending=True,
                    )
                )
            session.flush()
            entry_id = entry.id

        logger.info("Created %s resource %s (slug=%s)", resource.entry.type.value, entry_id, resource.entry.slug)
        return entry_id

    def update_resource(self, resource: Resource, update_password: bool) -> None:
        """Update slug, password and expiry (and target URL for links).

        Type, creation time and file content are immutable. When
        ``update_password`` is false the stored password hash is kept no matter
        what ``resource`` carries.
        """

        validate_resource(resource, self._hasher)
        entry_id = resource.entry.id
        if entry_id <= 0:
            raise ValidationError("entry id is required to update a resource")
        incoming = resource.model_copy(deep=True)

        with self._transaction("update resource") as session:
            stored = session.execute(
                select(Entry.type, Entry.created_at, Entry.password_hash).where(Entry.id == entry_id)
            ).one_or_none()
            if stored is None:
                raise NotFoundError(f"no resource with id {entry_id}")

            if ResourceType(stored.type) is not incoming.entry.type:
                raise ImmutabilityViolation("type is immutable")
            if _to_second(stored.created_at) != _to_second(incoming.entry.created_at):
                raise ImmutabilityViolation("created_at is immutable")
            if not update_password:
                incoming.entry.password_hash = stored.password_hash

            result = session.execute(
                update(Entry)
                .where(Entry.id == entry_id)
                .values(
                    slug=incoming.entry.slug,
                    password_hash=incoming.entry.password_hash,
                    expires_at=incoming.entry.expires_at,
                )
            )
            _expect_one(result.rowcount, "entry update")

            if incoming.entry.type is ResourceType.LINK:
                result = session.execute(
                    update(Link).where(Link.entry_id == entry_id).values(target_url=incoming.link.target_url)
                )
                _expect_one(result.rowcount, "link update")
            else:
                stored_file = session.execute(
                    select(File.file_uuid, File.filename, File.mime_type, File.size).where(File.entry_id == entry_id)
                ).one_or_none()
                if stored_file is None:
                    raise ConsistencyViolation(f"entry {entry_id} is a file but has no file row")
                if (
                    stored_file.file_uuid != incoming.file.file_uuid
                    or stored_file.filename != incoming.file.filename
                    or stored_file.mime_type != incoming.file.mime_type
                    or stored_file.size != incoming.file.size
                ):
                    raise ImmutabilityViolation(
                        "file content is immutable; delete and recreate the resource instead"
                    )

        logger.info("Updated resource %s (slug=%s)", entry_id, incoming.entry.slug)

    def mark_file_uploaded(self, entry_id: int) -> None:
        """Flip ``pending`` to false. There is no way back."""

        if entry_id <= 0:
            raise ValidationError("entry id must be positive")
        with self._transaction("mark file uploaded") as session:
            result = session.execute(update(File).where(File.entry_id == entry_id).values(pending=False))
            if result.rowcount == 0:
                raise NotFoundError(f"no file resource with id {entry_id}")
            _expect_one(result.rowcount, "file update")

    def delete_resource(self, id_or_slug: int | str) -> None:
        """Delete an entry by id or canonical slug; the sub-row goes with it (ON DELETE CASCADE)."""

        if isinstance(id_or_slug, bool):
            raise ValidationError("expected an entry id or a slug")
        if isinstance(id_or_slug, int):
            if id_or_slug <= 0:
                raise ValidationError("entry id must be positive")
            condition = Entry.id == id_or_slug
        else:
            validate_slug(id_or_slug)
            condition = Entry.slug == id_or_slug

        with self._transaction("delete resource") as session:
            result = session.execute(delete(Entry).where(condition))
            if result.rowcount == 0:
                raise NotFoundError(f"no resource matching {id_or_slug!r}")
            _expect_one(result.rowcount, "entry delete")

        logger.info("Deleted resource %r", id_or_slug)

    def find_stale_pending_files(self, older_than: datetime, limit: int = 100) -> list[Resource]:
        """File resources still pending that were created before ``older_than``."""

        with self._transaction("find stale pending files") as session:
            rows = session.execute(
                select(Entry, File)
                .join(File, File.entry_id == Entry.id)
                .where(File.pending.is_(True), Entry.created_at < older_than)
                .order_by(Entry.id)
                .limit(limit)
            ).all()
            return [_to_resource(entry, None, file) for entry, file in rows]

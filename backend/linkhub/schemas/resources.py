"""Resource aggregate: an entry plus exactly one link or file."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator

from linkhub.models.enums import ResourceType

REDACTED = "REDACTED"


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive timestamps (SQLite drops the zone) and convert aware ones."""

    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class EntryData(BaseModel):
    """Identity and metadata of an addressable resource."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(default=0, description="Assigned by the store; 0 before insertion")
    slug: str = Field(..., description="Canonical (path-escaped) slug")
    type: ResourceType
    password_hash: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    expires_at: datetime | None = None

    @field_validator("created_at", "expires_at")
    @classmethod
    def normalize_timestamp(cls, value: datetime | None) -> datetime | None:
        return as_utc(value)


class LinkData(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    entry_id: int = 0
    target_url: str


class FileData(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    entry_id: int = 0
    file_uuid: str
    filename: str
    mime_type: str
    size: int
    pending: bool = True


class Resource(BaseModel):
    """Entry plus its type-specific sub-row.

    Use :meth:`for_link` / :meth:`for_file` to build new resources; shapes built
    any other way go through ``validate_resource`` before they reach storage.
    """

    entry: EntryData
    link: LinkData | None = None
    file: FileData | None = None

    @property
    def type(self) -> ResourceType:
        return self.entry.type

    @classmethod
    def for_link(
        cls,
        *,
        slug: str,
        target_url: str,
        password_hash: str | None = None,
        expires_at: datetime | None = None,
    ) -> "Resource":
        return cls(
            entry=EntryData(
                slug=slug,
                type=ResourceType.LINK,
                password_hash=password_hash,
                expires_at=expires_at,
            ),
            link=LinkData(target_url=target_url),
        )

    @classmethod
    def for_file(
        cls,
        *,
        slug: str,
        file_uuid: str,
        filename: str,
        mime_type: str,
        size: int,
        password_hash: str | None = None,
        expires_at: datetime | None = None,
    ) -> "Resource":
        return cls(
            entry=EntryData(
                slug=slug,
                type=ResourceType.FILE,
                password_hash=password_hash,
                expires_at=expires_at,
            ),
            file=FileData(file_uuid=file_uuid, filename=filename, mime_type=mime_type, size=size),
        )

    def with_entry_id(self, entry_id: int) -> "Resource":
        """Return a copy whose entry and sub-row carry ``entry_id``."""

        updated = self.model_copy(deep=True)
        updated.entry.id = entry_id
        if updated.link is not None:
            updated.link.entry_id = entry_id
        if updated.file is not None:
            updated.file.entry_id = entry_id
        return updated

    def is_expired(self, now: datetime | None = None) -> bool:
        if self.entry.expires_at is None:
            return False
        current = as_utc(now) if now is not None else datetime.now(timezone.utc)
        return self.entry.expires_at <= current

    def redacted(self) -> "Resource":
        """Copy with the password hash masked, for administrative listings."""

        copy = self.model_copy(deep=True)
        if copy.entry.password_hash is not None:
            copy.entry.password_hash = REDACTED
        return copy

"""Payloads accepted and returned by the HTTP API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from linkhub.models.enums import ResourceType, UploadType
from linkhub.schemas.uploads import MultipartCompletion


class CreateLinkRequest(BaseModel):
    """Payload for creating a link resource."""

    slug: str = Field(..., description="Unescaped slug, must be unique")
    target_url: str = Field(..., description="URL to redirect to when the slug is accessed")
    password: str | None = Field(default=None, description="Optional plain text password")
    expires_at: datetime | None = Field(default=None, description="Optional expiration time")


class CreateFileRequest(BaseModel):
    """Payload for initiating a file resource and its upload."""

    slug: str = Field(..., description="Unescaped slug, must be unique")
    filename: str = Field(..., description="Display name shown to downloaders")
    mime_type: str = Field(..., description="MIME type of the file")
    size: int = Field(..., description="Declared file size in bytes")
    password: str | None = Field(default=None, description="Optional plain text password")
    expires_at: datetime | None = Field(default=None, description="Optional expiration time")


class UpdateEntryRequest(BaseModel):
    """Payload for updating an entry's metadata."""

    slug: str | None = Field(default=None, description="Optional new unescaped slug")
    password: str | None = Field(default=None, description="New password, used when update_password is set")
    expires_at: datetime | None = Field(default=None, description="Optional new expiration time")
    update_password: bool = Field(
        ..., description="Replace the stored password; a missing password then removes protection"
    )


class UpdateLinkRequest(BaseModel):
    target_url: str


class UnlockRequest(BaseModel):
    password: str


class UploadCompleteRequest(BaseModel):
    """Payload sent once the client has finished uploading file bytes."""

    type: UploadType
    multipart: MultipartCompletion | None = Field(
        default=None, description="Present if and only if type is multipart"
    )


class PublicLink(BaseModel):
    target_url: str


class PublicFile(BaseModel):
    download_url: str
    filename: str
    mime_type: str
    size: int


class ResourceView(BaseModel):
    """Public representation of a resolved slug."""

    type: ResourceType
    link: PublicLink | None = None
    file: PublicFile | None = None


class ResourceRef(BaseModel):
    id: int
    slug: str

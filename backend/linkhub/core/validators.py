"""Pure field and aggregate checks.

Every check raises :class:`linkhub.errors.ValidationError` with a short,
user-presentable message and returns ``None`` when the value is acceptable.
"""

from __future__ import annotations

import re
import unicodedata
import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Iterable
from urllib.parse import urlsplit

from linkhub.core.slug import MAX_RAW_SLUG_BYTES, MAX_SLUG_LENGTH, is_canonical
from linkhub.errors import ValidationError
from linkhub.models.enums import ResourceType

if TYPE_CHECKING:
    from linkhub.core.security import PasswordHasher
    from linkhub.schemas import CompletedPart, FileData, LinkData, Resource

MAX_FILE_SIZE = 10 * 1024 * 1024 * 1024  # 10 GiB
MAX_TARGET_URL_LENGTH = 2000
MAX_FILENAME_LENGTH = 255
MAX_MIME_TYPE_LENGTH = 127
MAX_PASSWORD_LENGTH = 255
MAX_UPLOAD_ID_LENGTH = 1024
MAX_ETAG_LENGTH = 1024
MAX_PART_NUMBER = 10_000

_PASSWORD_PATTERN = re.compile(r"[A-Za-z0-9_!? \-]+")
_FILENAME_ILLEGAL = frozenset('<>:"/\\|?*')
_SLUG_EXTRA_CHARS = frozenset("0123456789_-")


def validate_raw_slug(slug: str) -> None:
    """Slug as typed by a user: letters of any script, ASCII digits, ``-`` and ``_``.

    Length is counted in UTF-8 bytes so the escaped form always fits the column.
    """

    if not isinstance(slug, str) or not slug:
        raise ValidationError("slug must not be empty")
    if len(slug.encode("utf-8", errors="surrogatepass")) > MAX_RAW_SLUG_BYTES:
        raise ValidationError(f"slug must be at most {MAX_RAW_SLUG_BYTES} bytes long")
    if not all(ch.isalpha() or ch in _SLUG_EXTRA_CHARS for ch in slug):
        raise ValidationError("slug can only contain letters, digits, hyphens and underscores")


def validate_slug(slug: str) -> None:
    """Canonical, path-escaped slug as stored in ``entries.slug``."""

    if not isinstance(slug, str) or not 1 <= len(slug) <= MAX_SLUG_LENGTH:
        raise ValidationError(f"slug must be between 1 and {MAX_SLUG_LENGTH} characters long")
    if not is_canonical(slug):
        raise ValidationError("slug must be a canonical URL-escaped string")


def validate_type(value: object) -> ResourceType:
    try:
        return ResourceType(value)
    except ValueError:
        raise ValidationError(f"invalid resource type: {value!r}") from None


def validate_raw_password(password: str) -> None:
    if not isinstance(password, str) or not 1 <= len(password) <= MAX_PASSWORD_LENGTH:
        raise ValidationError(f"password must be between 1 and {MAX_PASSWORD_LENGTH} characters long")
    if not _PASSWORD_PATTERN.fullmatch(password):
        raise ValidationError(
            "password can only contain letters, digits, dash, underscore, exclamation mark, question mark and space"
        )


def validate_password_hash(password_hash: str, hasher: "PasswordHasher") -> None:
    if not hasher.is_valid_hash(password_hash):
        raise ValidationError("password hash is not in a supported format")


def validate_target_url(target_url: str) -> None:
    if not isinstance(target_url, str) or not 1 <= len(target_url) <= MAX_TARGET_URL_LENGTH:
        raise ValidationError(f"target_url must be between 1 and {MAX_TARGET_URL_LENGTH} characters long")
    if any(ch.isspace() or unicodedata.category(ch) == "Cc" for ch in target_url):
        raise ValidationError("target_url must not contain whitespace or control characters")
    try:
        parsed = urlsplit(target_url)
        _ = parsed.port  # raises on a malformed port
    except ValueError:
        raise ValidationError("target_url must be a valid URL with scheme and host") from None
    if not parsed.scheme or not parsed.hostname:
        raise ValidationError("target_url must be a valid URL with scheme and host")


def validate_uuid(value: str) -> None:
    """Only canonical, lower-case, version 4 UUIDs are accepted (they form object keys)."""

    try:
        parsed = uuid.UUID(value)
    except (TypeError, ValueError, AttributeError):
        raise ValidationError("file_uuid must be a valid UUID") from None
    if parsed.version != 4:
        raise ValidationError("file_uuid must be a version 4 UUID")
    if str(parsed) != value:
        raise ValidationError("file_uuid must be in canonical form")


def validate_filename(filename: str) -> None:
    if not isinstance(filename, str) or not 1 <= len(filename) <= MAX_FILENAME_LENGTH:
        raise ValidationError(f"filename must be between 1 and {MAX_FILENAME_LENGTH} characters long")
    if filename == ".":
        raise ValidationError("filename cannot be '.'")
    if ".." in filename:
        raise ValidationError("filename cannot contain consecutive dots")
    try:
        filename.encode("utf-8")
    except UnicodeEncodeError:
        raise ValidationError("filename must be valid Unicode text") from None
    for ch in filename:
        if ch in _FILENAME_ILLEGAL or unicodedata.category(ch).startswith("C"):
            raise ValidationError("filename contains invalid characters")


def validate_mime_type(mime_type: str) -> None:
    if not isinstance(mime_type, str) or not 1 <= len(mime_type) <= MAX_MIME_TYPE_LENGTH:
        raise ValidationError(f"mime_type must be between 1 and {MAX_MIME_TYPE_LENGTH} characters long")
    major, sep, minor = mime_type.partition("/")
    if not sep or not major or not minor:
        raise ValidationError("mime_type must be in the format 'type/subtype'")


def validate_size(size: int) -> None:
    if isinstance(size, bool) or not isinstance(size, int):
        raise ValidationError("size must be an integer")
    if size <= 0:
        raise ValidationError("size must be a positive integer")
    if size > MAX_FILE_SIZE:
        raise ValidationError("size cannot exceed 10 GiB")


def validate_expires_at(expires_at: datetime, now: datetime | None = None) -> None:
    """Expiry must lie strictly after ``now``; naive values are read as UTC."""

    current = now or datetime.now(timezone.utc)
    if current.tzinfo is None:
        current = current.replace(tzinfo=timezone.utc)
    value = expires_at if expires_at.tzinfo is not None else expires_at.replace(tzinfo=timezone.utc)
    if value <= current:
        raise ValidationError("expires_at must be in the future")


def validate_upload_id(upload_id: str) -> None:
    if not isinstance(upload_id, str) or not upload_id.strip():
        raise ValidationError("upload_id must not be empty")
    if len(upload_id) > MAX_UPLOAD_ID_LENGTH:
        raise ValidationError("upload_id is too long")


def validate_part_number(part_number: int) -> None:
    if isinstance(part_number, bool) or not isinstance(part_number, int):
        raise ValidationError("part_number must be an integer")
    if not 1 <= part_number <= MAX_PART_NUMBER:
        raise ValidationError(f"part_number must be between 1 and {MAX_PART_NUMBER}")


def validate_etag(etag: str) -> None:
    if not isinstance(etag, str) or not etag.strip():
        raise ValidationError("etag must not be empty")
    if len(etag) > MAX_ETAG_LENGTH:
        raise ValidationError("etag is too long")


def validate_completed_parts(parts: Iterable["CompletedPart"]) -> None:
    """Parts must be numbered 1..n in order, without gaps or duplicates, each with an ETag."""

    count = 0
    for index, part in enumerate(parts, start=1):
        validate_part_number(part.part_number)
        if part.part_number != index:
            raise ValidationError(
                f"part numbers must be sequential starting from 1, got {part.part_number} at position {index}"
            )
        validate_etag(part.etag)
        count = index
    if count == 0:
        raise ValidationError("at least one part is required to complete a multipart upload")


def validate_link(link: "LinkData") -> None:
    validate_target_url(link.target_url)


def validate_file(file: "FileData") -> None:
    validate_uuid(file.file_uuid)
    validate_filename(file.filename)
    validate_mime_type(file.mime_type)
    validate_size(file.size)


def validate_resource(resource: "Resource", hasher: "PasswordHasher") -> None:
    """Single gate for aggregate shape: exactly one sub-row, matching the entry type and id."""

    entry = resource.entry
    validate_slug(entry.slug)
    resource_type = validate_type(entry.type)
    if entry.password_hash is not None:
        validate_password_hash(entry.password_hash, hasher)
    if entry.id < 0:
        raise ValidationError("entry id must not be negative")

    if resource_type is ResourceType.LINK:
        if resource.link is None:
            raise ValidationError("link details are required for link resources")
        if resource.file is not None:
            raise ValidationError("file details must not be set for link resources")
        if resource.link.entry_id != entry.id:
            raise ValidationError("entry id mismatch between entry and link")
        validate_link(resource.link)
    else:
        if resource.file is None:
            raise ValidationError("file details are required for file resources")
        if resource.link is not None:
            raise ValidationError("link details must not be set for file resources")
        if resource.file.entry_id != entry.id:
            raise ValidationError("entry id mismatch between entry and file")
        validate_file(resource.file)

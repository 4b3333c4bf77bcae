"""Unit tests for field and aggregate validation."""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from linkhub.core import validators
from linkhub.core.slug import canonical_slug
from linkhub.errors import ErrorKind, ValidationError
from linkhub.schemas import CompletedPart, EntryData, FileData, LinkData, Resource


@pytest.mark.parametrize("slug", ["abc", "a_b-1", "привет", "日本語", "x" * 255])
def test_raw_slug_accepts_letters_digits_and_separators(slug):
    validators.validate_raw_slug(slug)


@pytest.mark.parametrize("slug", ["", "a b", "a/b", "a.b", "a%b", "x" * 256, "é" * 128])
def test_raw_slug_rejects_invalid_input(slug):
    with pytest.raises(ValidationError):
        validators.validate_raw_slug(slug)


def test_canonical_slug_of_max_raw_slug_fits_column():
    """The longest raw slug escapes to at most 765 characters."""

    raw = "я" * 127
    validators.validate_raw_slug(raw)
    validators.validate_slug(canonical_slug(raw))


@pytest.mark.parametrize("slug", ["abc", canonical_slug("привет"), "a%2Fb", "a:b@c"])
def test_slug_accepts_canonical_forms(slug):
    validators.validate_slug(slug)


@pytest.mark.parametrize("slug", ["", "a b", "a/b", "%d0%bf", "%FF", "%ZZ", "x" * 766])
def test_slug_rejects_non_canonical_forms(slug):
    with pytest.raises(ValidationError):
        validators.validate_slug(slug)


@pytest.mark.parametrize("password", ["hunter2", "pass word!?", "A_b-C", "x" * 255])
def test_raw_password_accepts_allowed_charset(password):
    validators.validate_raw_password(password)


@pytest.mark.parametrize("password", ["", "pässword", "semi;colon", "abc\n", "hunter2\n", "x" * 256])
def test_raw_password_rejects_invalid_input(password):
    with pytest.raises(ValidationError):
        validators.validate_raw_password(password)


def test_password_hash_format(hasher):
    validators.validate_password_hash(hasher.hash("secret"), hasher)
    with pytest.raises(ValidationError):
        validators.validate_password_hash("secret", hasher)


@pytest.mark.parametrize(
    "url",
    ["https://x.com", "http://localhost:8080/a?b=c", "ftp://files.example.org/pub", "https://例え.jp/パス"],
)
def test_target_url_accepts_absolute_urls(url):
    validators.validate_target_url(url)


@pytest.mark.parametrize(
    "url",
    ["", "x.com", "/relative/path", "https://", "https://a b.com", "http://host:99999", "https://x.com/\n", "https://x.com/" + "a" * 2000],
)
def test_target_url_rejects_invalid_input(url):
    with pytest.raises(ValidationError):
        validators.validate_target_url(url)


def test_uuid_accepts_only_canonical_v4():
    validators.validate_uuid(str(uuid.uuid4()))

    for value in (str(uuid.uuid1()), str(uuid.uuid4()).upper(), uuid.uuid4().hex, "not-a-uuid", ""):
        with pytest.raises(ValidationError):
            validators.validate_uuid(value)


@pytest.mark.parametrize("filename", ["report.pdf", "my file (1).txt", "архив.tar.gz", "x" * 255])
def test_filename_accepts_regular_names(filename):
    validators.validate_filename(filename)


@pytest.mark.parametrize(
    "filename",
    ["", ".", "..", "a..b", "a/b", "a\\b", 'a"b', "a<b", "a\x00b", "tab\tname", "x" * 256],
)
def test_filename_rejects_hostile_names(filename):
    with pytest.raises(ValidationError):
        validators.validate_filename(filename)


@pytest.mark.parametrize("mime_type", ["text/plain", "application/vnd.ms-excel", "video/mp4"])
def test_mime_type_accepts_type_subtype(mime_type):
    validators.validate_mime_type(mime_type)


@pytest.mark.parametrize("mime_type", ["", "text", "/plain", "text/", "a/" + "b" * 126])
def test_mime_type_rejects_malformed_values(mime_type):
    with pytest.raises(ValidationError):
        validators.validate_mime_type(mime_type)


def test_size_bounds():
    """Size must lie in (0, 10 GiB]."""

    validators.validate_size(1)
    validators.validate_size(validators.MAX_FILE_SIZE)
    for size in (0, -1, validators.MAX_FILE_SIZE + 1, True, 1.5):
        with pytest.raises(ValidationError):
            validators.validate_size(size)


def test_expires_at_must_be_strictly_in_the_future():
    now = datetime(2030, 1, 1, tzinfo=timezone.utc)

    validators.validate_expires_at(now + timedelta(seconds=1), now=now)
    validators.validate_expires_at(datetime(2030, 1, 2), now=now)
    for value in (now, now - timedelta(seconds=1)):
        with pytest.raises(ValidationError):
            validators.validate_expires_at(value, now=now)


def test_upload_identifiers():
    validators.validate_upload_id("upload-1")
    validators.validate_part_number(1)
    validators.validate_part_number(validators.MAX_PART_NUMBER)
    validators.validate_etag('"abc"')

    with pytest.raises(ValidationError):
        validators.validate_upload_id("  ")
    with pytest.raises(ValidationError):
        validators.validate_upload_id("u" * 1025)
    for number in (0, validators.MAX_PART_NUMBER + 1, True):
        with pytest.raises(ValidationError):
            validators.validate_part_number(number)
    with pytest.raises(ValidationError):
        validators.validate_etag("")


def _parts(*numbers: int) -> list[CompletedPart]:
    return [CompletedPart(part_number=number, etag=f'"etag-{number}"') for number in numbers]


def test_completed_parts_must_be_contiguous_from_one():
    validators.validate_completed_parts(_parts(1, 2, 3))

    for parts in (_parts(), _parts(2, 3), _parts(1, 3), _parts(1, 1, 2), _parts(2, 1)):
        with pytest.raises(ValidationError):
            validators.validate_completed_parts(parts)


def test_completed_parts_require_etags():
    parts = [CompletedPart(part_number=1, etag='"a"'), CompletedPart(part_number=2, etag="")]
    with pytest.raises(ValidationError):
        validators.validate_completed_parts(parts)


def _file_data(**overrides) -> FileData:
    values = {
        "file_uuid": str(uuid.uuid4()),
        "filename": "report.pdf",
        "mime_type": "application/pdf",
        "size": 1024,
    }
    values.update(overrides)
    return FileData(**values)


def test_resource_gate_accepts_built_shapes(hasher):
    validators.validate_resource(Resource.for_link(slug="abc", target_url="https://x.com"), hasher)
    validators.validate_resource(
        Resource.for_file(
            slug="files",
            file_uuid=str(uuid.uuid4()),
            filename="a.txt",
            mime_type="text/plain",
            size=10,
            password_hash=hasher.hash("secret"),
        ),
        hasher,
    )


def test_resource_gate_rejects_mismatched_shapes(hasher):
    """Exactly one sub-row, matching the type, with matching entry ids."""

    link_entry = EntryData(slug="abc", type="link")
    file_entry = EntryData(slug="abc", type="file")
    invalid = [
        Resource(entry=link_entry),
        Resource(entry=link_entry, file=_file_data()),
        Resource(entry=link_entry, link=LinkData(target_url="https://x.com"), file=_file_data()),
        Resource(entry=file_entry),
        Resource(entry=file_entry, link=LinkData(target_url="https://x.com")),
        Resource(entry=EntryData(id=3, slug="abc", type="link"), link=LinkData(entry_id=4, target_url="https://x.com")),
        Resource(entry=EntryData(id=3, slug="abc", type="file"), file=_file_data(entry_id=0)),
    ]
    for resource in invalid:
        with pytest.raises(ValidationError) as excinfo:
            validators.validate_resource(resource, hasher)
        assert excinfo.value.kind is ErrorKind.VALIDATION


def test_resource_gate_checks_fields(hasher):
    with pytest.raises(ValidationError):
        validators.validate_resource(Resource.for_link(slug="a b", target_url="https://x.com"), hasher)
    with pytest.raises(ValidationError):
        validators.validate_resource(Resource.for_link(slug="abc", target_url="nope"), hasher)
    with pytest.raises(ValidationError):
        validators.validate_resource(
            Resource.for_link(slug="abc", target_url="https://x.com", password_hash="plain"), hasher
        )
    with pytest.raises(ValidationError):
        validators.validate_resource(
            Resource(entry=EntryData(slug="abc", type="file"), file=_file_data(size=0)), hasher
        )

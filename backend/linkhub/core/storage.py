"""Object storage gateway for uploaded file content.

All objects live under ``files/<file_uuid>`` in a single bucket of an S3
compatible store. The service never moves file bytes itself: clients upload
and download through pre-signed URLs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Protocol, Sequence

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from linkhub.config import Settings
from linkhub.core.validators import validate_uuid
from linkhub.errors import NotFoundError, StorageGatewayError, ValidationError
from linkhub.schemas import CompletedPart

logger = logging.getLogger(__name__)

OBJECT_KEY_PREFIX = "files/"


@dataclass(slots=True)
class ObjectHead:
    """Metadata reported by the object store for a stored object."""

    size: int
    mime_type: str | None
    etag: str | None


class ObjectStorageGateway(Protocol):
    """Subset of object store operations the upload flow relies on."""

    def presign_put(self, file_uuid: str, mime_type: str, ttl: timedelta) -> str:
        ...

    def presign_upload_part(self, file_uuid: str, upload_id: str, part_number: int, ttl: timedelta) -> str:
        ...

    def create_multipart_upload(self, file_uuid: str, mime_type: str) -> str:
        ...

    def complete_multipart_upload(self, file_uuid: str, upload_id: str, parts: Sequence[CompletedPart]) -> None:
        ...

    def abort_multipart_upload(self, file_uuid: str, upload_id: str) -> None:
        ...

    def presign_get(self, file_uuid: str, ttl: timedelta) -> str:
        ...

    def head_object(self, file_uuid: str) -> ObjectHead:
        ...

    def delete_object(self, file_uuid: str) -> None:
        ...


def object_key(file_uuid: str) -> str:
    """Return the object key for a file, refusing anything but a v4 UUID."""

    try:
        validate_uuid(file_uuid)
    except ValidationError as exc:
        raise StorageGatewayError("refusing to build object key", cause=exc) from exc
    return f"{OBJECT_KEY_PREFIX}{file_uuid}"


def _is_not_found(exc: ClientError) -> bool:
    code = str(exc.response.get("Error", {}).get("Code", ""))
    return code in {"404", "NoSuchKey", "NotFound"}


class S3ObjectStorage:
    """:class:`ObjectStorageGateway` backed by a boto3 S3 client."""

    def __init__(self, client: Any, bucket_name: str) -> None:
        self._client = client
        self._bucket = bucket_name

    def _presign(self, operation: str, params: dict[str, Any], ttl: timedelta) -> str:
        try:
            return self._client.generate_presigned_url(
                operation,
                Params={"Bucket": self._bucket, **params},
                ExpiresIn=int(ttl.total_seconds()),
            )
        except (BotoCoreError, ClientError) as exc:
            raise StorageGatewayError(f"failed to presign {operation}", cause=exc) from exc

    def presign_put(self, file_uuid: str, mime_type: str, ttl: timedelta) -> str:
        key = object_key(file_uuid)
        return self._presign("put_object", {"Key": key, "ContentType": mime_type}, ttl)

    def presign_upload_part(self, file_uuid: str, upload_id: str, part_number: int, ttl: timedelta) -> str:
        key = object_key(file_uuid)
        return self._presign(
            "upload_part",
            {"Key": key, "UploadId": upload_id, "PartNumber": part_number},
            ttl,
        )

    def presign_get(self, file_uuid: str, ttl: timedelta) -> str:
        key = object_key(file_uuid)
        return self._presign("get_object", {"Key": key}, ttl)

    def create_multipart_upload(self, file_uuid: str, mime_type: str) -> str:
        key = object_key(file_uuid)
        try:
            response = self._client.create_multipart_upload(
                Bucket=self._bucket, Key=key, ContentType=mime_type
            )
        except (BotoCoreError, ClientError) as exc:
            raise StorageGatewayError("failed to create multipart upload", cause=exc) from exc
        upload_id = response.get("UploadId")
        if not upload_id:
            raise StorageGatewayError("object store returned no multipart upload id")
        return upload_id

    def complete_multipart_upload(self, file_uuid: str, upload_id: str, parts: Sequence[CompletedPart]) -> None:
        key = object_key(file_uuid)
        try:
            self._client.complete_multipart_upload(
                Bucket=self._bucket,
                Key=key,
                UploadId=upload_id,
                MultipartUpload={
                    "Parts": [{"PartNumber": part.part_number, "ETag": part.etag} for part in parts]
                },
            )
        except (BotoCoreError, ClientError) as exc:
            raise StorageGatewayError("failed to complete multipart upload", cause=exc) from exc

    def abort_multipart_upload(self, file_uuid: str, upload_id: str) -> None:
        key = object_key(file_uuid)
        try:
            self._client.abort_multipart_upload(Bucket=self._bucket, Key=key, UploadId=upload_id)
        except (BotoCoreError, ClientError) as exc:
            raise StorageGatewayError("failed to abort multipart upload", cause=exc) from exc

    def head_object(self, file_uuid: str) -> ObjectHead:
        key = object_key(file_uuid)
        try:
            response = self._client.head_object(Bucket=self._bucket, Key=key)
        except ClientError as exc:
            if _is_not_found(exc):
                raise NotFoundError(f"object {key} does not exist", cause=exc) from exc
            raise StorageGatewayError("failed to head object", cause=exc) from exc
        except BotoCoreError as exc:
            raise StorageGatewayError("failed to head object", cause=exc) from exc
        return ObjectHead(
            size=int(response.get("ContentLength", 0)),
            mime_type=response.get("ContentType"),
            etag=response.get("ETag"),
        )

    def delete_object(self, file_uuid: str) -> None:
        key = object_key(file_uuid)
        try:
            self._client.delete_object(Bucket=self._bucket, Key=key)
        except (BotoCoreError, ClientError) as exc:
            raise StorageGatewayError("failed to delete object", cause=exc) from exc


def build_s3_client(settings: Settings) -> Any:
    """Create a boto3 S3 client with bounded timeouts and retries."""

    config = Config(
        region_name=settings.s3_region,
        signature_version="s3v4",
        connect_timeout=settings.s3_connect_timeout_seconds,
        read_timeout=settings.s3_read_timeout_seconds,
        retries={"max_attempts": settings.s3_max_attempts, "mode": "standard"},
    )
    client = boto3.client(
        "s3",
        endpoint_url=settings.s3_endpoint_url or None,
        aws_access_key_id=settings.s3_access_key_id,
        aws_secret_access_key=settings.s3_secret_access_key,
        config=config,
    )
    logger.info("S3 client initialised for bucket '%s'", settings.s3_bucket_name)
    return client


def build_storage_gateway(settings: Settings) -> S3ObjectStorage:
    return S3ObjectStorage(build_s3_client(settings), settings.s3_bucket_name)

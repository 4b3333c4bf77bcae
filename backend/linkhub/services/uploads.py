"""Upload planning and completion for file resources.

A file resource starts pending. The client receives either one pre-signed PUT
URL (objects up to the part size) or a multipart session with one pre-signed
URL per part. Once the bytes are in the object store the client reports back,
the multipart session is completed if there is one, the object is checked and
the file is marked uploaded.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Sequence

from linkhub.core.storage import ObjectHead, ObjectStorageGateway
from linkhub.core.validators import (
    validate_completed_parts,
    validate_mime_type,
    validate_size,
    validate_upload_id,
    validate_uuid,
)
from linkhub.errors import ImmutabilityViolation, ResourceError, StorageGatewayError, ValidationError
from linkhub.models import ResourceType, UploadType
from linkhub.schemas import (
    CompletedPart,
    FileData,
    MultipartCompletion,
    MultipartUpload,
    Resource,
    SingleUpload,
    UploadPart,
    UploadPlan,
)
from linkhub.services.resource_store import ResourceStore

logger = logging.getLogger(__name__)

DEFAULT_PART_SIZE = 50 * 1024 * 1024  # 50 MiB
DEFAULT_URL_LIFETIME = timedelta(minutes=30)


def count_parts(file_size: int, part_size: int) -> int:
    """Number of parts needed to cover ``file_size`` bytes (ceiling division)."""

    return -(-file_size // part_size)


class UploadOrchestrator:
    """Chooses the upload strategy and drives the object store through it."""

    def __init__(
        self,
        gateway: ObjectStorageGateway,
        *,
        part_size: int = DEFAULT_PART_SIZE,
        url_lifetime: timedelta = DEFAULT_URL_LIFETIME,
    ) -> None:
        if part_size <= 0:
            raise ValueError("part_size must be positive")
        self._gateway = gateway
        self._part_size = part_size
        self._url_lifetime = url_lifetime

    @property
    def part_size(self) -> int:
        return self._part_size

    def generate_upload_response(self, file_size: int, mime_type: str, file_uuid: str) -> UploadPlan:
        """Build a single or multipart upload plan.

        Sizes up to and including the part size get a single PUT URL. Any
        gateway failure aborts the whole plan; no partial plan is returned
        and a multipart session opened for it is aborted best-effort.
        """

        validate_size(file_size)
        validate_mime_type(mime_type)
        validate_uuid(file_uuid)

        try:
            if file_size <= self._part_size:
                upload_url = self._gateway.presign_put(file_uuid, mime_type, self._url_lifetime)
                return UploadPlan(
                    file_uuid=file_uuid,
                    type=UploadType.SINGLE,
                    single=SingleUpload(upload_url=upload_url),
                )

            upload_id = self._gateway.create_multipart_upload(file_uuid, mime_type)
        except StorageGatewayError:
            logger.error("Failed to plan upload for file %s", file_uuid, exc_info=True)
            raise

        num_parts = count_parts(file_size, self._part_size)
        try:
            parts = [
                UploadPart(
                    part_number=part_number,
                    upload_url=self._gateway.presign_upload_part(
                        file_uuid, upload_id, part_number, self._url_lifetime
                    ),
                )
                for part_number in range(1, num_parts + 1)
            ]
        except StorageGatewayError:
            logger.error("Failed to plan upload for file %s", file_uuid, exc_info=True)
            self._abort_multipart(file_uuid, upload_id)
            raise

        return UploadPlan(
            file_uuid=file_uuid,
            type=UploadType.MULTIPART,
            multipart=MultipartUpload(upload_id=upload_id, parts=parts),
        )

    def _abort_multipart(self, file_uuid: str, upload_id: str) -> None:
        try:
            self._gateway.abort_multipart_upload(file_uuid, upload_id)
        except ResourceError:
            logger.warning("Failed to abort multipart upload %s for file %s", upload_id, file_uuid, exc_info=True)

    def complete_multipart_upload(self, file_uuid: str, upload_id: str, parts: Sequence[CompletedPart]) -> None:
        """Finalise a multipart session. On failure the session stays open."""

        validate_uuid(file_uuid)
        validate_upload_id(upload_id)
        validate_completed_parts(parts)
        try:
            self._gateway.complete_multipart_upload(file_uuid, upload_id, parts)
        except StorageGatewayError:
            logger.error("Failed to complete multipart upload %s for file %s", upload_id, file_uuid, exc_info=True)
            raise

    def verify_uploaded_object(self, file: FileData) -> ObjectHead:
        """Check that the stored object exists and has the declared size."""

        head = self._gateway.head_object(file.file_uuid)
        if head.size != file.size:
            raise ValidationError(
                f"uploaded object has {head.size} bytes but {file.size} bytes were declared"
            )
        return head

    def download_url(self, file_uuid: str) -> str:
        return self._gateway.presign_get(file_uuid, self._url_lifetime)

    def discard_object(self, file_uuid: str) -> bool:
        """Best-effort removal of an object whose resource is already gone."""

        try:
            self._gateway.delete_object(file_uuid)
        except ResourceError:
            logger.warning("Failed to delete object for file %s", file_uuid, exc_info=True)
            return False
        return True


def _discard_resource(store: ResourceStore, entry_id: int) -> None:
    try:
        store.delete_resource(entry_id)
    except ResourceError:
        logger.error(
            "Failed to clean up file resource (%d) after upload planning failure", entry_id, exc_info=True
        )


def publish_file(store: ResourceStore, orchestrator: UploadOrchestrator, resource: Resource) -> tuple[int, UploadPlan]:
    """Persist a pending file resource and hand back its upload plan.

    If planning fails after the insert committed, the new resource is deleted
    again so no permanently pending entry is left behind. That cleanup is
    best-effort: its own failure is logged and the planning error is raised.
    """

    if resource.entry.type is not ResourceType.FILE or resource.file is None:
        raise ValidationError("only file resources have uploads")

    entry_id = store.insert_resource(resource)
    try:
        plan = orchestrator.generate_upload_response(
            resource.file.size, resource.file.mime_type, resource.file.file_uuid
        )
    except Exception:
        _discard_resource(store, entry_id)
        raise
    return entry_id, plan


def finalize_upload(
    store: ResourceStore,
    orchestrator: UploadOrchestrator,
    resource: Resource,
    completion: MultipartCompletion | None = None,
) -> None:
    """Complete the multipart session (if any), verify the object and mark the file uploaded."""

    if resource.entry.type is not ResourceType.FILE or resource.file is None:
        raise ValidationError("resource is not a file")
    if not resource.file.pending:
        raise ImmutabilityViolation("file is already marked as uploaded")

    if completion is not None:
        orchestrator.complete_multipart_upload(resource.file.file_uuid, completion.upload_id, completion.parts)
    orchestrator.verify_uploaded_object(resource.file)
    store.mark_file_uploaded(resource.entry.id)
    logger.info("File resource %s marked as uploaded", resource.entry.id)

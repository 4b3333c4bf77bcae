"""Schemas describing upload plans and multipart completion."""

from __future__ import annotations

from pydantic import BaseModel, Field

from linkhub.models.enums import UploadType


class SingleUpload(BaseModel):
    upload_url: str = Field(..., description="Pre-signed PUT URL for the whole object")


class UploadPart(BaseModel):
    part_number: int = Field(..., description="1-based part index")
    upload_url: str = Field(..., description="Pre-signed URL for uploading this part")


class MultipartUpload(BaseModel):
    upload_id: str = Field(..., description="Multipart upload session id issued by the object store")
    parts: list[UploadPart]


class UploadPlan(BaseModel):
    """Instructions a client follows to put file bytes into object storage."""

    file_uuid: str
    type: UploadType
    single: SingleUpload | None = None
    multipart: MultipartUpload | None = None

    @property
    def num_parts(self) -> int:
        if self.multipart is None:
            return 1
        return len(self.multipart.parts)


class CompletedPart(BaseModel):
    part_number: int = Field(..., description="1-based part index")
    etag: str = Field(..., description="ETag returned by the object store for the part")


class MultipartCompletion(BaseModel):
    upload_id: str
    parts: list[CompletedPart]

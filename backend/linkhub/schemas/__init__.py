"""Pydantic schemas for the resource aggregate and API payloads."""

from .requests import (
    ResourceRef,
    CreateFileRequest,
    CreateLinkRequest,
    PublicFile,
    PublicLink,
    ResourceView,
    UnlockRequest,
    UpdateEntryRequest,
    UpdateLinkRequest,
    UploadCompleteRequest,
)
from .resources import REDACTED, EntryData, FileData, LinkData, Resource
from .uploads import (
    CompletedPart,
    MultipartCompletion,
    MultipartUpload,
    SingleUpload,
    UploadPart,
    UploadPlan,
)

__all__ = [
    "REDACTED",
    "EntryData",
    "LinkData",
    "FileData",
    "Resource",
    "SingleUpload",
    "UploadPart",
    "MultipartUpload",
    "UploadPlan",
    "CompletedPart",
    "MultipartCompletion",
    "CreateLinkRequest",
    "CreateFileRequest",
    "UpdateEntryRequest",
    "UpdateLinkRequest",
    "UnlockRequest",
    "UploadCompleteRequest",
    "PublicLink",
    "PublicFile",
    "ResourceView",
    "ResourceRef",
]

from __future__ import annotations

from enum import Enum


class ResourceType(str, Enum):
    """Kind of payload an entry resolves to."""

    LINK = "link"
    FILE = "file"


class UploadType(str, Enum):
    """Strategy used to move file bytes into object storage."""

    SINGLE = "single"
    MULTIPART = "multipart"

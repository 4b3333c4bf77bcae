"""Database models package."""

from .base import Base
from .enums import ResourceType, UploadType
from .resources import Entry, File, Link

__all__ = [
    "Base",
    "Entry",
    "Link",
    "File",
    "ResourceType",
    "UploadType",
]

"""Core utilities for the Linkhub backend."""

from .security import PasswordHasher, build_password_hasher
from .storage import ObjectHead, ObjectStorageGateway, S3ObjectStorage, build_storage_gateway

__all__ = [
    "PasswordHasher",
    "build_password_hasher",
    "ObjectHead",
    "ObjectStorageGateway",
    "S3ObjectStorage",
    "build_storage_gateway",
]

"""Application service helpers."""

from .resource_store import ResourceStore
from .sweeper import run_upload_sweeper, sweep_stale_uploads
from .uploads import (
    DEFAULT_PART_SIZE,
    DEFAULT_URL_LIFETIME,
    UploadOrchestrator,
    finalize_upload,
    publish_file,
)

__all__ = [
    "ResourceStore",
    "UploadOrchestrator",
    "DEFAULT_PART_SIZE",
    "DEFAULT_URL_LIFETIME",
    "publish_file",
    "finalize_upload",
    "sweep_stale_uploads",
    "run_upload_sweeper",
]

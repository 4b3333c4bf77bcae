"""Administrative endpoints for creating and managing resources."""

from __future__ import annotations

import uuid
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from linkhub.api.deps import (
    get_app_settings,
    get_password_hasher,
    get_resource_store,
    get_upload_orchestrator,
)
from linkhub.config import Settings
from linkhub.core.security import PasswordHasher
from linkhub.core.slug import canonical_slug
from linkhub.core.validators import validate_expires_at, validate_raw_password, validate_raw_slug
from linkhub.models import ResourceType, UploadType
from linkhub.schemas import (
    CreateFileRequest,
    CreateLinkRequest,
    Resource,
    ResourceRef,
    UpdateEntryRequest,
    UpdateLinkRequest,
    UploadCompleteRequest,
    UploadPlan,
)
from linkhub.schemas.resources import as_utc
from linkhub.services import ResourceStore, UploadOrchestrator, finalize_upload, publish_file

router = APIRouter(prefix="/private", tags=["private"])


def _new_slug(raw: str) -> str:
    validate_raw_slug(raw)
    return canonical_slug(raw)


def _new_password_hash(password: str | None, hasher: PasswordHasher) -> str | None:
    if password is None:
        return None
    validate_raw_password(password)
    return hasher.hash(password)


def _new_expiry(expires_at: datetime | None) -> datetime | None:
    if expires_at is not None:
        validate_expires_at(expires_at)
    return as_utc(expires_at)


@router.get("/resources", response_model=list[Resource])
def list_resources(
    page: int = Query(default=1, ge=1),
    limit: int | None = Query(default=None, ge=1),
    store: ResourceStore = Depends(get_resource_store),
    settings: Settings = Depends(get_app_settings),
) -> list[Resource]:
    """Return a page of resources with password hashes redacted."""

    page_size = limit or settings.list_default_limit
    if page_size > settings.list_max_limit:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"limit must not exceed {settings.list_max_limit}",
        )
    resources = store.list_resources(offset=(page - 1) * page_size, limit=page_size)
    return [resource.redacted() for resource in resources]


@router.delete(
    "/resources/{slug}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
)
def delete_resource(
    slug: str,
    store: ResourceStore = Depends(get_resource_store),
    orchestrator: UploadOrchestrator = Depends(get_upload_orchestrator),
) -> Response:
    """Delete a resource and, for files, its stored object."""

    resource = store.get_resource(canonical_slug(slug))
    store.delete_resource(resource.entry.id)
    if resource.type is ResourceType.FILE:
        orchestrator.discard_object(resource.file.file_uuid)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/entries/{slug}", response_model=ResourceRef)
def update_entry(
    slug: str,
    payload: UpdateEntryRequest,
    store: ResourceStore = Depends(get_resource_store),
    hasher: PasswordHasher = Depends(get_password_hasher),
) -> ResourceRef:
    """Change slug, password or expiry of any resource."""

    if payload.slug is None and payload.expires_at is None and not payload.update_password:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No changes requested")

    resource = store.get_resource(canonical_slug(slug))
    updated = resource.model_copy(deep=True)
    if payload.slug is not None:
        updated.entry.slug = _new_slug(payload.slug)
    if payload.expires_at is not None:
        updated.entry.expires_at = _new_expiry(payload.expires_at)
    if payload.update_password:
        updated.entry.password_hash = _new_password_hash(payload.password, hasher)

    store.update_resource(updated, update_password=payload.update_password)
    return ResourceRef(id=updated.entry.id, slug=updated.entry.slug)


@router.post("/links", response_model=ResourceRef, status_code=status.HTTP_201_CREATED)
def create_link(
    payload: CreateLinkRequest,
    store: ResourceStore = Depends(get_resource_store),
    hasher: PasswordHasher = Depends(get_password_hasher),
) -> ResourceRef:
    """Create a slug redirecting to ``target_url``."""

    resource = Resource.for_link(
        slug=_new_slug(payload.slug),
        target_url=payload.target_url,
        password_hash=_new_password_hash(payload.password, hasher),
        expires_at=_new_expiry(payload.expires_at),
    )
    entry_id = store.insert_resource(resource)
    return ResourceRef(id=entry_id, slug=resource.entry.slug)


@router.patch("/links/{slug}/target-url", response_model=ResourceRef)
def update_link_target(
    slug: str,
    payload: UpdateLinkRequest,
    store: ResourceStore = Depends(get_resource_store),
) -> ResourceRef:
    resource = store.get_resource(canonical_slug(slug))
    if resource.type is not ResourceType.LINK:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Resource is not a link")

    updated = resource.model_copy(deep=True)
    updated.link.target_url = payload.target_url
    store.update_resource(updated, update_password=False)
    return ResourceRef(id=updated.entry.id, slug=updated.entry.slug)


@router.post("/files", response_model=UploadPlan, status_code=status.HTTP_201_CREATED)
def create_file(
    payload: CreateFileRequest,
    store: ResourceStore = Depends(get_resource_store),
    orchestrator: UploadOrchestrator = Depends(get_upload_orchestrator),
    hasher: PasswordHasher = Depends(get_password_hasher),
) -> UploadPlan:
    """Register a pending file and return the instructions for uploading it."""

    resource = Resource.for_file(
        slug=_new_slug(payload.slug),
        file_uuid=str(uuid.uuid4()),
        filename=payload.filename,
        mime_type=payload.mime_type,
        size=payload.size,
        password_hash=_new_password_hash(payload.password, hasher),
        expires_at=_new_expiry(payload.expires_at),
    )
    _, plan = publish_file(store, orchestrator, resource)
    return plan


@router.patch(
    "/files/{slug}/mark-uploaded",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
)
def mark_file_uploaded(
    slug: str,
    payload: UploadCompleteRequest,
    store: ResourceStore = Depends(get_resource_store),
    orchestrator: UploadOrchestrator = Depends(get_upload_orchestrator),
) -> Response:
    """Finish an upload: complete the multipart session if any, then mark the file uploaded."""

    if (payload.type is UploadType.MULTIPART) != (payload.multipart is not None):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="multipart details are required for, and only for, multipart uploads",
        )

    resource = store.get_resource(canonical_slug(slug))
    finalize_upload(store, orchestrator, resource, payload.multipart)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

"""Public endpoints resolving slugs to links and downloadable files."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from linkhub.api.deps import get_password_hasher, get_resource_store, get_upload_orchestrator
from linkhub.core.security import PasswordHasher
from linkhub.core.slug import canonical_slug
from linkhub.models import ResourceType
from linkhub.schemas import PublicFile, PublicLink, Resource, ResourceView, UnlockRequest
from linkhub.services import ResourceStore, UploadOrchestrator

router = APIRouter(prefix="/public", tags=["public"])


def _resolve(slug: str, store: ResourceStore) -> Resource:
    resource = store.get_resource(canonical_slug(slug))
    if resource.is_expired():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Resource not found")
    return resource


def _to_view(resource: Resource, orchestrator: UploadOrchestrator) -> ResourceView:
    if resource.type is ResourceType.LINK:
        return ResourceView(type=ResourceType.LINK, link=PublicLink(target_url=resource.link.target_url))

    file = resource.file
    if file.pending:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="File upload is not complete yet")
    return ResourceView(
        type=ResourceType.FILE,
        file=PublicFile(
            download_url=orchestrator.download_url(file.file_uuid),
            filename=file.filename,
            mime_type=file.mime_type,
            size=file.size,
        ),
    )


@router.get("/resources/{slug}", response_model=ResourceView)
def get_resource(
    slug: str,
    store: ResourceStore = Depends(get_resource_store),
    orchestrator: UploadOrchestrator = Depends(get_upload_orchestrator),
) -> ResourceView:
    """Resolve an unprotected slug."""

    resource = _resolve(slug, store)
    if resource.entry.password_hash is not None:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Resource is password protected")
    return _to_view(resource, orchestrator)


@router.post("/resources/{slug}/unlock", response_model=ResourceView)
def unlock_resource(
    slug: str,
    payload: UnlockRequest,
    store: ResourceStore = Depends(get_resource_store),
    orchestrator: UploadOrchestrator = Depends(get_upload_orchestrator),
    hasher: PasswordHasher = Depends(get_password_hasher),
) -> ResourceView:
    """Resolve a password protected slug."""

    resource = _resolve(slug, store)
    if resource.entry.password_hash is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Resource is not password protected")
    if not hasher.verify(resource.entry.password_hash, payload.password):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid password")
    return _to_view(resource, orchestrator)

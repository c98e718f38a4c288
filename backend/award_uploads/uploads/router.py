"""FastAPI router for award image uploads.

Endpoints (relative to ``uploads.route``):

- ``POST   {route}``                      upload one image (field ``award``)
- ``GET    {route}/url?image=...``        public URL of a stored image value
- ``GET    {route}/{entity_id}``          latest upload for an entity
- ``POST   {route}/{entity_id}/replace``  drop the old image, return the new destination
- ``DELETE {route}?image=...``            best-effort delete of a stored image

The entity id travels in the ``x-ns-award-entity-id`` header on upload.
Authentication and CSRF are handled in front of this service.

Errors
------
- 400 when the entity header is missing.
- 413 when the file exceeds ``uploads.max_file_size_bytes``.
- 500 with a JSON ``{"error": "..."}`` body when persistence fails.
"""
import logging
from typing import Callable

from fastapi import APIRouter, File, HTTPException, Query, Request, UploadFile
from fastapi.responses import JSONResponse

from ..config import AppSettings, get_config
from .cleanup import CleanupCoordinator
from .errors import UploadError
from .paths import get_image_url
from .registry import FileRegistry
from .schemas import (
    DeleteImageResponse,
    ImageUrlResponse,
    ReplaceRequest,
    ReplaceResponse,
    UploadResponse,
)
from .staging import TemporaryStorageProvisioner
from .workflow import UploadWorkflow

logger = logging.getLogger(__name__)


def create_router(config_source: Callable[[], AppSettings] = get_config) -> APIRouter:
    """Build the uploads router.

    Args:
        config_source: Returns the settings to use.  Read once here for the
                       route and field name, then again on every request.
    """
    settings = config_source().uploads
    router = APIRouter(prefix=settings.route.rstrip("/"), tags=["uploads"])

    @router.post("", response_model=UploadResponse)
    async def upload_image(
        request: Request,
        file: UploadFile = File(..., alias=settings.field_name),
    ):
        """Stage, persist and register one award image.

        Returns:
            ``{ entityId: string, file: object, storage: "local" | "remote" }``
        """
        config = config_source()
        uploads = config.uploads

        entity_id = request.headers.get(uploads.entity_header)
        if not entity_id:
            raise HTTPException(
                status_code=400,
                detail=f"Missing {uploads.entity_header} header",
            )
        uid = request.headers.get(uploads.uid_header, "0")

        workflow = UploadWorkflow(config, FileRegistry.get_instance())
        try:
            staged = await TemporaryStorageProvisioner(uploads).stage(file)
            result = await workflow.run(staged, entity_id, uid=uid)
        except UploadError as exc:
            if exc.status_code >= 500:
                logger.exception("[uploads] Upload for entity %s failed: %s", entity_id, exc)
            else:
                logger.warning("[uploads] Upload for entity %s rejected: %s", entity_id, exc)
            return JSONResponse({"error": exc.message}, status_code=exc.status_code)

        logger.info(
            "[uploads] Uploaded %s for entity %s (%s)",
            staged.original_filename,
            entity_id,
            result.storage.value,
        )
        return result.to_response()

    @router.get("/url", response_model=ImageUrlResponse)
    async def image_url(image: str = Query(...)) -> ImageUrlResponse:
        """Public URL for a stored image value (filename or URL)."""
        return ImageUrlResponse(url=get_image_url(config_source().uploads, image))

    @router.get("/{entity_id}")
    async def get_upload(entity_id: str):
        """Merged descriptor of the latest upload for ``entity_id``."""
        entry = FileRegistry.get_instance().get(entity_id)
        if entry is None:
            raise HTTPException(status_code=404, detail="No upload for this entity")
        return {
            "entityId": entity_id,
            "file": entry.descriptor(),
            "storage": entry.storage.value,
        }

    @router.post("/{entity_id}/replace", response_model=ReplaceResponse)
    async def replace_image(entity_id: str, body: ReplaceRequest) -> ReplaceResponse:
        """Swap an entity's stored image for its latest upload.

        The previous image is deleted (best-effort, local files only) and the
        registry entry is dropped.  The response carries the value to store
        as the award's image.
        """
        registry = FileRegistry.get_instance()
        entry = registry.get(entity_id)
        if entry is None:
            raise HTTPException(status_code=404, detail="No upload for this entity")

        coordinator = CleanupCoordinator(config_source().uploads, registry)
        destination = await coordinator.replace_file(body.previous_image, entity_id, entry)
        return ReplaceResponse(entity_id=entity_id, destination=destination)

    @router.delete("", response_model=DeleteImageResponse)
    async def delete_image(image: str = Query(...)) -> DeleteImageResponse:
        """Best-effort delete of a stored image.  Never fails."""
        coordinator = CleanupCoordinator(config_source().uploads, FileRegistry.get_instance())
        deleted = await coordinator.delete_stored_file(image)
        return DeleteImageResponse(image=image, deleted=deleted)

    return router

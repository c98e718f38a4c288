"""Temporary storage for incoming award images.

Every upload lands in the staging directory under a generated
``award-<uuid4><ext>`` name before the pipeline decides where it goes.
Random ids keep concurrent requests from colliding without coordination.
"""
import logging
import os
import uuid
from pathlib import Path

from fastapi import UploadFile

from ..config import UploadSettings
from .errors import StagingError, UploadTooLargeError
from .schemas import StagedFile

logger = logging.getLogger(__name__)

FILENAME_PREFIX = "award-"
CHUNK_SIZE = 64 * 1024


class TemporaryStorageProvisioner:
    """Computes where an incoming file is staged and writes it there.

    Args:
        settings: Upload settings providing the staging directory and the
                  size limit.
    """

    def __init__(self, settings: UploadSettings) -> None:
        self._settings = settings

    def destination(self) -> Path:
        """Return the staging directory, creating it if needed."""
        staging_dir = Path(self._settings.staging_dir)
        staging_dir.mkdir(parents=True, exist_ok=True)
        return staging_dir

    @staticmethod
    def generate_filename(original_name: str) -> str:
        """``award-<uuid4>`` plus the original extension, if any."""
        extension = os.path.splitext(original_name or "")[1]
        return f"{FILENAME_PREFIX}{uuid.uuid4()}{extension}"

    async def stage(self, upload: UploadFile) -> StagedFile:
        """Stream an uploaded file into the staging directory.

        Raises:
            UploadTooLargeError: If the stream exceeds ``max_file_size_bytes``.
            StagingError: If reading the upload or writing to disk fails.

        The partial staging file is removed in both cases.
        """
        original_name = upload.filename or "unnamed"
        filename = self.generate_filename(original_name)
        destination = self.destination()
        path = destination / filename
        limit = self._settings.max_file_size_bytes

        size = 0
        try:
            with path.open("wb") as fh:
                while True:
                    chunk = await upload.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    size += len(chunk)
                    if size > limit:
                        break
                    fh.write(chunk)
        except OSError as exc:
            path.unlink(missing_ok=True)
            logger.error("[uploads] Staging %s failed: %s", original_name, exc)
            raise StagingError(f"Can not stage {original_name}: {exc}", cause=exc) from exc

        if size > limit:
            path.unlink(missing_ok=True)
            logger.warning(
                "[uploads] Rejected %s: more than %d bytes", original_name, limit
            )
            raise UploadTooLargeError(limit)

        logger.debug("[uploads] Staged %s as %s (%d bytes)", original_name, path, size)

        return StagedFile(
            original_filename=original_name,
            filename=filename,
            extension=os.path.splitext(original_name)[1],
            mime_type=upload.content_type or "application/octet-stream",
            size_bytes=size,
            destination=str(destination),
            path=str(path),
        )

"""Best-effort cleanup of superseded award images.

Nothing in this module raises to its caller: failed deletions are logged as
warnings and the pipeline carries on.  Remote images are left alone, since
deleting them needs the remote store's own API.
"""
import asyncio
import logging
from pathlib import Path
from typing import Optional, Union

from ..config import UploadSettings
from .paths import get_final_destination, get_upload_path, is_remote_value, is_within_upload_dir
from .pipeline import Step, run_steps
from .registry import FileRegistry
from .schemas import FileRegistryEntry, LocalReference, RemoteReference

logger = logging.getLogger(__name__)

StoredImage = Union[LocalReference, RemoteReference, str]


class CleanupCoordinator:
    """Deletes stored files and drives the replace pipeline.

    Args:
        settings: Upload settings used to resolve local filenames.
        registry: Registry whose entries are dropped on replace.
    """

    def __init__(self, settings: UploadSettings, registry: FileRegistry) -> None:
        self._settings = settings
        self._registry = registry

    def _local_path(self, reference: StoredImage) -> Optional[Path]:
        if isinstance(reference, RemoteReference):
            return None
        if isinstance(reference, LocalReference):
            return Path(reference.path)
        if is_remote_value(reference):
            return None
        return get_upload_path(self._settings, reference)

    async def delete_stored_file(self, reference: StoredImage) -> bool:
        """Delete a previously stored image.

        ``reference`` is either a persisted reference or the stored image
        value (a local filename or a URL).

        Returns:
            True when nothing was left to do or the file was removed, False
            when a local unlink failed or the path points outside the upload
            directory (either case is only logged).
        """
        path = self._local_path(reference)
        if path is None:
            logger.debug("[cleanup] Remote image %s left in place", reference)
            return True

        if not is_within_upload_dir(self._settings, path):
            logger.warning(
                "[cleanup] Refusing to delete %s: outside %s", path, self._settings.permanent_dir
            )
            return False

        try:
            await asyncio.to_thread(path.unlink)
        except OSError as exc:
            logger.warning("[cleanup] Can not delete file %s, error: %s", path, exc)
            return False

        logger.info("[cleanup] Deleted %s", path)
        return True

    async def replace_file(
        self,
        previous: Optional[StoredImage],
        entity_id: str,
        new_entry: FileRegistryEntry,
    ) -> str:
        """Drop the previous image of an entity and return the new one's destination.

        The new file must already be persisted; this only cleans up after
        the old one and computes the value to store.
        """

        async def delete_previous() -> None:
            if previous:
                await self.delete_stored_file(previous)

        async def forget_upload() -> None:
            self._registry.remove(entity_id)

        async def destination() -> str:
            return get_final_destination(new_entry)

        return await run_steps(
            [
                Step("delete_previous", delete_previous, fatal=False),
                Step("forget_upload", forget_upload, fatal=False),
                Step("destination", destination),
            ],
            label="cleanup",
        )

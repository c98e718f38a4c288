"""Persistence strategies: turn a staged file into a durable reference.

``LocalPersistence`` copies the staged bytes into the permanent upload
directory.  ``RemotePersistence`` hands the file to the registered remote
capability.  ``select_strategy`` picks one per request, based on whether a
capability is registered at that moment.
"""
import asyncio
import logging
import shutil
from abc import ABC, abstractmethod
from typing import Any, Optional

from pydantic import ValidationError

from ..config import RemoteSettings, UploadSettings
from .capability import RemoteImageCapability
from .errors import PersistenceError
from .paths import get_upload_path
from .schemas import LocalReference, RemoteReference, StagedFile, StorageKind

logger = logging.getLogger(__name__)


class PersistenceStrategy(ABC):
    """Abstract base class for persistence strategies."""

    kind: StorageKind

    @abstractmethod
    async def persist(self, staged: StagedFile, uid: Any) -> Any:
        """Persist ``staged`` and return its reference.

        Raises:
            PersistenceError: If the file could not be persisted.  No
                              reference is produced in that case.
        """


class LocalPersistence(PersistenceStrategy):
    kind = StorageKind.LOCAL

    def __init__(self, settings: UploadSettings) -> None:
        self._settings = settings

    async def persist(self, staged: StagedFile, uid: Any) -> LocalReference:
        target = get_upload_path(self._settings, staged.filename)
        try:
            await asyncio.to_thread(target.parent.mkdir, parents=True, exist_ok=True)
            await asyncio.to_thread(shutil.copyfile, staged.path, target)
        except OSError as exc:
            logger.error("[uploads] Local copy of %s failed: %s", staged.path, exc)
            raise PersistenceError(str(exc), cause=exc) from exc

        logger.info("[uploads] Stored %s locally at %s", staged.original_filename, target)
        return LocalReference(filename=staged.filename, path=str(target))


class RemotePersistence(PersistenceStrategy):
    """Delegates storage to a remote image capability.

    Args:
        capability:      The registered capability.
        timeout_seconds: Give up after this long.  ``None`` waits forever.
    """

    kind = StorageKind.REMOTE

    def __init__(
        self,
        capability: RemoteImageCapability,
        timeout_seconds: Optional[float] = None,
    ) -> None:
        self._capability = capability
        self._timeout = timeout_seconds

    async def persist(self, staged: StagedFile, uid: Any) -> RemoteReference:
        image = staged.model_dump()
        image["name"] = staged.original_filename
        payload = {"image": image, "uid": uid}

        try:
            result = await asyncio.wait_for(
                self._capability.upload_image(payload), timeout=self._timeout
            )
        except asyncio.TimeoutError as exc:
            logger.error(
                "[uploads] Remote capability %s timed out after %ss",
                self._capability.name,
                self._timeout,
            )
            raise PersistenceError(
                f"Remote image store timed out after {self._timeout}s", cause=exc
            ) from exc
        except Exception as exc:
            logger.error("[uploads] Remote capability %s failed: %s", self._capability.name, exc)
            raise PersistenceError(str(exc), cause=exc) from exc

        try:
            fields = {k: v for k, v in dict(result or {}).items() if k != "kind"}
            reference = RemoteReference(**fields)
        except (TypeError, ValueError, ValidationError) as exc:
            raise PersistenceError(
                f"Remote image store returned no name/url: {result!r}", cause=exc
            ) from exc

        logger.info(
            "[uploads] Stored %s remotely via %s at %s",
            staged.original_filename,
            self._capability.name,
            reference.url,
        )
        return reference


def select_strategy(
    uploads: UploadSettings,
    remote: RemoteSettings,
    capability: Optional[RemoteImageCapability],
) -> PersistenceStrategy:
    """Remote when a capability is registered right now, local otherwise."""
    if capability is not None:
        return RemotePersistence(capability, timeout_seconds=remote.timeout_seconds)
    return LocalPersistence(uploads)

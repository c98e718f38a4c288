"""Per-request upload coordinator.

A request moves through ``staged → persistence attempted → persisted |
failed``:

1. pick a persistence strategy (remote if a capability is registered now)
2. persist the staged file (fatal)
3. remove the staged file (best-effort; fatal only in strict mode)
4. record entity id → entry in the registry

The staged file is removed whatever the persistence outcome.  When
persistence fails nothing is written to the registry.
"""
import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional

from ..config import AppSettings
from .capability import RemoteImageCapability, get_remote_capability
from .errors import PersistenceError, StagingCleanupError
from .pipeline import Step, run_steps
from .registry import FileRegistry
from .schemas import FileRegistryEntry, StagedFile, StorageKind, UploadResponse
from .strategies import select_strategy

logger = logging.getLogger(__name__)


@dataclass
class UploadResult:
    """Outcome of a successful upload."""
    entity_id: str
    entry: FileRegistryEntry

    @property
    def storage(self) -> StorageKind:
        return self.entry.storage

    def to_response(self) -> UploadResponse:
        return UploadResponse(
            entity_id=self.entity_id,
            file=self.entry.descriptor(),
            storage=self.storage,
        )


class UploadWorkflow:
    """Stages nothing itself: takes a staged file and sees it through.

    Args:
        config: Application settings.
        registry: Where successful uploads are recorded.
        capability_lookup: Returns the currently registered remote
                           capability, or None.  Called once per request.
    """

    def __init__(
        self,
        config: AppSettings,
        registry: FileRegistry,
        capability_lookup: Callable[[], Optional[RemoteImageCapability]] = get_remote_capability,
    ) -> None:
        self._config = config
        self._registry = registry
        self._capability_lookup = capability_lookup

    async def _discard_staged(self, staged: StagedFile) -> None:
        try:
            await asyncio.to_thread(Path(staged.path).unlink)
        except OSError as exc:
            raise StagingCleanupError(
                f"Can not delete staged file {staged.path}: {exc}", cause=exc
            ) from exc
        logger.debug("[uploads] Removed staged file %s", staged.path)

    async def run(self, staged: StagedFile, entity_id: str, uid: Any = 0) -> UploadResult:
        """Persist ``staged`` for ``entity_id`` on behalf of ``uid``.

        Raises:
            PersistenceError: If the strategy failed.  The registry is untouched.
            StagingCleanupError: In strict mode, if the staged file could not
                                 be removed after persisting.
        """
        strategy = select_strategy(
            self._config.uploads,
            self._config.remote,
            self._capability_lookup(),
        )
        logger.info(
            "[uploads] Persisting %s for entity %s with %s storage",
            staged.original_filename,
            entity_id,
            strategy.kind.value,
        )

        async def discard() -> None:
            await self._discard_staged(staged)

        try:
            reference = await strategy.persist(staged, uid)
        except PersistenceError:
            await run_steps([Step("discard_staged", discard, fatal=False)], label="uploads")
            raise

        entry = FileRegistryEntry(staged=staged, reference=reference)

        async def record() -> None:
            self._registry.put(entity_id, entry)

        await run_steps(
            [
                Step("discard_staged", discard, fatal=self._config.uploads.strict_staging_cleanup),
                Step("record", record),
            ],
            label="uploads",
        )

        return UploadResult(entity_id=entity_id, entry=entry)

"""In-memory registry of the latest upload per award entity.

The registry maps a caller-supplied entity id to the most recent
``FileRegistryEntry`` uploaded for it, so that a later replace call can find
the right file.

Lifetime:
    Process-scoped.  Entries are never expired and are lost on restart; a
    durable backing store would have to be plugged in explicitly.

Concurrency:
    No locking.  ``put`` is a single dict assignment on the event loop, so
    two concurrent uploads for the same id leave exactly one of the two
    entries behind (last write wins, ordered by completion).

Usage:
    registry = FileRegistry.get_instance()
    registry.put("award-42", entry)
    entry = registry.get("award-42")
"""
import logging
from typing import Dict, Optional

from .schemas import FileRegistryEntry

logger = logging.getLogger(__name__)


class FileRegistry:
    """Singleton mapping of entity id → latest uploaded file."""

    _instance: Optional["FileRegistry"] = None

    def __init__(self) -> None:
        self._entries: Dict[str, FileRegistryEntry] = {}

    @classmethod
    def get_instance(cls) -> "FileRegistry":
        """Get or create the singleton instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Reset the singleton instance (for testing)."""
        cls._instance = None

    def put(self, entity_id: str, entry: FileRegistryEntry) -> None:
        """Associate ``entry`` with ``entity_id``, replacing any previous entry."""
        if entity_id in self._entries:
            logger.debug("[registry] Overwriting entry for %s", entity_id)
        self._entries[entity_id] = entry

    def get(self, entity_id: str) -> Optional[FileRegistryEntry]:
        entry = self._entries.get(entity_id)
        if entry is None:
            logger.warning("[registry] No file in memory for %s", entity_id)
        return entry

    def remove(self, entity_id: str) -> Optional[FileRegistryEntry]:
        """Forget ``entity_id``.  Removing an unknown id only logs a warning."""
        entry = self._entries.pop(entity_id, None)
        if entry is None:
            logger.warning("[registry] Can not delete file from memory at %s", entity_id)
        return entry

    def __contains__(self, entity_id: str) -> bool:
        return entity_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

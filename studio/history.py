"""
Persisted generation history.

Keeps the newest-first list of terminal generations under one storage
key, capped at HISTORY_LIMIT entries. Every operation is best-effort:
storage failures are logged and the call degrades to a no-op.
"""
import json
import logging
from typing import List, Optional

from studio.models import COMPLETED, FAILED, Generation
from studio.storage import JsonFileStorage

logger = logging.getLogger(__name__)

HISTORY_KEY = "video-generation-history"
HISTORY_LIMIT = 50


class HistoryStore:
    """
    History persistence boundary for the tracker.

    Args:
        storage: Key-value storage holding the JSON encoded list
        key: Storage key for the list
        limit: Maximum number of records kept
    """

    def __init__(self, storage: JsonFileStorage, key: str = HISTORY_KEY, limit: int = HISTORY_LIMIT):
        self.storage = storage
        self.key = key
        self.limit = limit

    def _read_records(self) -> List[dict]:
        raw = self.storage.get_item(self.key)
        if not raw:
            return []
        records = json.loads(raw)
        if not isinstance(records, list):
            raise ValueError("Stored history is not a list")
        return records

    def load(self) -> List[Generation]:
        """Return the persisted history, or an empty list if absent or corrupt."""
        try:
            return [Generation.from_dict(record) for record in self._read_records()]
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.error(f"Failed to load generation history: {e}")
            return []

    def save(self, generation: Generation) -> None:
        """Prepend a terminal generation and drop anything past the limit."""
        try:
            try:
                records = self._read_records()
            except ValueError as e:
                logger.warning(f"Discarding unreadable generation history: {e}")
                records = []
            records = [generation.to_dict()] + records[:self.limit - 1]
            self.storage.set_item(self.key, json.dumps(records))
        except (OSError, ValueError, TypeError) as e:
            logger.error(f"Failed to save generation to history: {e}")

    def clear(self) -> None:
        try:
            self.storage.remove_item(self.key)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to clear generation history: {e}")

    def export(self) -> str:
        """Serialize the whole history as pretty-printed JSON."""
        return json.dumps([g.to_dict() for g in self.load()], indent=2)

    def import_(self, text: str) -> bool:
        """
        Replace the history with a previously exported list.

        Returns:
            True if the data was stored, False if it was not a JSON list
            of generation records or couldn't be written
        """
        try:
            parsed = json.loads(text)
            if not isinstance(parsed, list):
                logger.warning("Rejected history import: not a list")
                return False
            records = [Generation.from_dict(item).to_dict() for item in parsed][:self.limit]
            self.storage.set_item(self.key, json.dumps(records))
            return True
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
            logger.error(f"Failed to import generation history: {e}")
            return False


def filter_history(
    history: List[Generation],
    search: Optional[str] = None,
    status: str = "all",
    sort: str = "newest"
) -> List[Generation]:
    """
    Search, filter and sort history the way the history view does.

    Args:
        history: Records to filter
        search: Case-insensitive substring matched against prompts
        status: "all", "completed" or "failed"
        sort: "newest", "oldest" or "duration" (longest first)
    """
    term = (search or "").lower()
    matches = [
        g for g in history
        if term in g.prompt.lower() and (status == "all" or g.status == status)
    ]

    if sort == "newest":
        matches.sort(key=lambda g: g.created_at, reverse=True)
    elif sort == "oldest":
        matches.sort(key=lambda g: g.created_at)
    elif sort == "duration":
        matches.sort(key=lambda g: g.config.duration, reverse=True)
    return matches


HISTORY_STATUS_FILTERS = ("all", COMPLETED, FAILED)
HISTORY_SORTS = ("newest", "oldest", "duration")

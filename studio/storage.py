"""
Local key-value storage for the studio.

A small JSON file mapping keys to string values, used the way a browser
uses localStorage. Errors are raised to the caller; HistoryStore decides
how to degrade.
"""
import json
import logging
import os
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class JsonFileStorage:
    """String key-value store persisted to a single JSON file."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Storage file {self.path} does not hold an object")
        return data

    def _write(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f)
        os.replace(tmp_path, self.path)

    def get_item(self, key: str) -> Optional[str]:
        """
        Read a value.

        Raises:
            OSError: If the file can't be read
            ValueError: If the file isn't valid storage JSON
        """
        return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        """
        Write a value, replacing any previous one.

        Raises:
            OSError: If the file can't be written
        """
        try:
            data = self._read()
        except ValueError:
            logger.warning(f"Storage file {self.path} is corrupt, starting over")
            data = {}
        data[key] = value
        self._write(data)

    def remove_item(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)

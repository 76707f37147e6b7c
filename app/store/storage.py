"""Durable key-value storage for serialized store collections."""

import json
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

from app.core.logging import logger


class KeyValueStorage(ABC):
    """Maps stable collection keys to JSON-compatible values."""
    
    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """Return the stored value, or None when the key is absent or unreadable."""
    
    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
    
    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete ``key``. Missing keys are ignored."""


class MemoryStorage(KeyValueStorage):
    """Process-local storage. Values are round-tripped through JSON so the
    behaviour matches the file backend."""
    
    def __init__(self):
        self._data: Dict[str, str] = {}
    
    def get(self, key: str) -> Optional[Any]:
        raw = self._data.get(key)
        if raw is None:
            return None
        return json.loads(raw)
    
    def set(self, key: str, value: Any) -> None:
        self._data[key] = json.dumps(value)
    
    def remove(self, key: str) -> None:
        self._data.pop(key, None)
    
    def __contains__(self, key: str) -> bool:
        return key in self._data


class JsonFileStorage(KeyValueStorage):
    """One ``<key>.json`` file per key inside ``directory``.
    
    Writes go to a temporary file that is then renamed over the target, so a
    crash mid-write leaves the previous value intact.
    """
    
    def __init__(self, directory: str):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)
    
    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"
    
    def get(self, key: str) -> Optional[Any]:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Could not read stored key '{key}': {e}")
            return None
    
    def set(self, key: str, value: Any) -> None:
        fd, tmp_path = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(value, f, ensure_ascii=False)
            os.replace(tmp_path, self._path(key))
        except OSError:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise
    
    def remove(self, key: str) -> None:
        path = self._path(key)
        if path.exists():
            path.unlink()

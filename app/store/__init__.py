"""Local-first state layer: collections, session and read models."""

from app.store.state import HospitalStore
from app.store.session import Session
from app.store.storage import JsonFileStorage, KeyValueStorage, MemoryStorage

__all__ = ["HospitalStore", "Session", "JsonFileStorage", "KeyValueStorage", "MemoryStorage"]

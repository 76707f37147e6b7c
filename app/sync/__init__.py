"""Remote store mirroring and change-feed invalidation."""

from app.sync.adapter import SyncAdapter
from app.sync.remote import MongoRemoteBackend, RemoteBackend

__all__ = ["SyncAdapter", "MongoRemoteBackend", "RemoteBackend"]

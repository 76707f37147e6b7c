"""Best-effort mirroring of store mutations to the remote store.

The local store is authoritative the moment a mutation is applied. The
adapter then repeats the change remotely; when that fails the local change
stays and the caller receives a warning. Any change announced on the remote
change feed triggers a full reload, which discards local records the remote
store does not know about.
"""

import asyncio
from contextlib import suppress
from typing import List, Optional, Sequence

from pydantic import ValidationError

from app.core.logging import get_logger
from app.models import User
from app.shared.exceptions import RemoteSyncError
from app.shared.models import Entity
from app.store.session import Session
from app.store.state import HospitalStore
from app.sync.mappers import MAPPINGS, PROFILES, RELOAD_ORDER, TableMapping, row_to_user
from app.sync.remote import RemoteBackend, Row

logger = get_logger("sync")


class SyncAdapter:
    """Mirrors local mutations remotely and reloads on remote changes."""
    
    def __init__(
        self,
        backend: RemoteBackend,
        store: HospitalStore,
        session: Session,
        watched_tables: Sequence[str] = ("profiles", "appointments", "resources"),
    ):
        self.backend = backend
        self.store = store
        self.session = session
        self.watched_tables = list(watched_tables)
        self.reload_count = 0
        self._live = True
        self._reload_lock = asyncio.Lock()
        self._listener: Optional[asyncio.Task] = None
    
    @property
    def is_live(self) -> bool:
        return self._live
    
    @staticmethod
    def _warn(mapping: TableMapping, action: str, detail: str) -> str:
        message = f"Saved locally, but the remote {mapping.table} {action} failed: {detail}"
        logger.warning(message)
        return message
    
    # ============== Id reconciliation ==============
    
    async def locate(self, mapping: TableMapping, entity: Entity) -> Optional[Row]:
        """Find the remote row for ``entity``.
        
        Tries the recorded remote id, then the local id column, then the
        table's natural key. A natural-key match already claimed by another
        local record (its ``id`` column differs) is not ours.
        """
        if entity.remote_id:
            row = await self.backend.find_one(mapping.table, {"_id": entity.remote_id})
            if row is not None:
                return row
        
        row = await self.backend.find_one(mapping.table, {"id": entity.id})
        if row is not None:
            return row
        
        natural = mapping.natural_filter(mapping.to_row(entity, self.store))
        if not natural:
            return None
        for row in await self.backend.find(mapping.table, natural):
            if row.get("id") in (None, "", entity.id):
                return row
        return None
    
    def _record_remote_id(self, mapping: TableMapping, local_id: str, remote_id: str) -> None:
        # The caller may have gone away (or the record been deleted) while we waited
        if not self._live:
            logger.debug(f"Adapter closed; not recording remote id for {local_id}")
            return
        self.store.attach_remote_id(mapping.store_key, local_id, remote_id)
    
    # ============== Mirroring ==============
    
    async def push_create(self, store_key: str, entity: Entity) -> List[str]:
        mapping = MAPPINGS[store_key]
        try:
            remote_id = await self.backend.insert(mapping.table, mapping.to_row(entity, self.store))
        except RemoteSyncError as e:
            return [self._warn(mapping, "insert", e.detail)]
        self._record_remote_id(mapping, entity.id, remote_id)
        return []
    
    async def push_update(
        self,
        store_key: str,
        entity: Entity,
        previous: Optional[Entity] = None,
    ) -> List[str]:
        """Mirror an update. ``previous`` is the record before the change, used
        to find the row when a natural-key column was edited."""
        mapping = MAPPINGS[store_key]
        try:
            row = await self.locate(mapping, previous or entity)
            if row is None:
                return [self._warn(mapping, "update", "no matching row")]
            matched = await self.backend.update(
                mapping.table, {"_id": row["_id"]}, mapping.to_row(entity, self.store),
            )
            if matched == 0:
                return [self._warn(mapping, "update", "row removed before it could be updated")]
        except RemoteSyncError as e:
            return [self._warn(mapping, "update", e.detail)]
        self._record_remote_id(mapping, entity.id, row["_id"])
        return []
    
    async def push_delete(self, store_key: str, entity: Entity) -> List[str]:
        mapping = MAPPINGS[store_key]
        try:
            row = await self.locate(mapping, entity)
            if row is None:
                return [self._warn(mapping, "delete", "no matching row")]
            await self.backend.delete(mapping.table, {"_id": row["_id"]})
        except RemoteSyncError as e:
            return [self._warn(mapping, "delete", e.detail)]
        return []
    
    async def fetch_profile(self, email: str, password: str) -> Optional[User]:
        """Look up a profile by credentials. Raises RemoteSyncError when unreachable."""
        row = await self.backend.find_one(PROFILES, {"email": email, "password": password})
        if row is None:
            return None
        return row_to_user(row, self.store)
    
    # ============== Invalidation ==============
    
    async def reload(self) -> List[str]:
        """Discard in-memory state and rebuild it from storage and the remote store.
        
        Mirrored collections are replaced by the remote rows. A table that
        cannot be read keeps its locally stored contents.
        """
        if not self._live:
            return []
        
        warnings: List[str] = []
        async with self._reload_lock:
            self.store.hydrate()
            for store_key in RELOAD_ORDER:
                mapping = MAPPINGS[store_key]
                try:
                    rows = await self.backend.select(mapping.table)
                except RemoteSyncError as e:
                    warnings.append(self._warn(mapping, "reload", e.detail))
                    continue
                if not self._live:
                    return warnings
                
                entities = []
                for row in rows:
                    try:
                        entities.append(mapping.from_row(row, self.store))
                    except ValidationError:
                        logger.warning(f"Skipping unreadable {mapping.table} row {row.get('_id')}")
                self.store.repositories()[store_key].replace_all(entities)
            
            self._refresh_session()
            self.reload_count += 1
        
        logger.info(f"Reloaded client state from remote (reload #{self.reload_count})")
        return warnings
    
    def _refresh_session(self) -> None:
        user = self.session.current_user
        if user is None:
            return
        fresh = self.store.users.get(user.id)
        if fresh is None:
            logger.info(f"Signed-in account {user.id} no longer exists; signing out")
            self.session.clear()
        else:
            self.session.set_user(fresh)
    
    # ============== Change feed ==============
    
    def start(self) -> None:
        """Start listening to the change feed in the background."""
        if self._listener is None and self.watched_tables:
            self._listener = asyncio.create_task(self._listen())
    
    async def _listen(self) -> None:
        try:
            async for table in self.backend.watch(self.watched_tables):
                if not self._live:
                    break
                logger.info(f"Remote change on '{table}'; reloading")
                try:
                    await self.reload()
                except Exception:
                    # Keep listening; the next change retries the reload
                    logger.exception(f"Reload after change on '{table}' failed")
        except RemoteSyncError as e:
            logger.warning(f"Remote change feed stopped: {e}")
    
    async def close(self) -> None:
        """Stop the listener. Later remote completions no longer touch the store."""
        self._live = False
        if self._listener is not None:
            self._listener.cancel()
            with suppress(asyncio.CancelledError):
                await self._listener
            self._listener = None

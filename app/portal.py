"""The portal context handed to every service call."""

from dataclasses import dataclass
from typing import List, Optional

from app.config import settings
from app.shared.models import Entity
from app.store.session import Session
from app.store.state import HospitalStore
from app.store.storage import JsonFileStorage, KeyValueStorage
from app.sync.adapter import SyncAdapter
from app.sync.remote import RemoteBackend


@dataclass
class Portal:
    """Store, session and (optional) remote mirror for one client."""
    
    store: HospitalStore
    session: Session
    sync: Optional[SyncAdapter] = None
    
    async def mirror_create(self, store_key: str, entity: Entity) -> List[str]:
        if self.sync is None:
            return []
        return await self.sync.push_create(store_key, entity)
    
    async def mirror_update(
        self,
        store_key: str,
        entity: Entity,
        previous: Optional[Entity] = None,
    ) -> List[str]:
        if self.sync is None:
            return []
        return await self.sync.push_update(store_key, entity, previous)
    
    async def mirror_delete(self, store_key: str, entity: Entity) -> List[str]:
        if self.sync is None:
            return []
        return await self.sync.push_delete(store_key, entity)
    
    async def close(self) -> None:
        if self.sync is not None:
            await self.sync.close()


def build_portal(
    storage: Optional[KeyValueStorage] = None,
    backend: Optional[RemoteBackend] = None,
    seed_demo_data: Optional[bool] = None,
) -> Portal:
    """Assemble a portal. Without a backend the portal runs local-only."""
    storage = storage or JsonFileStorage(settings.STORE_DIR)
    if seed_demo_data is None:
        seed_demo_data = settings.SEED_DEMO_DATA
    
    store = HospitalStore(storage, seed_demo_data=seed_demo_data)
    session = Session(storage)
    session.restore()
    if session.current_user is not None and session.current_user.id not in store.users:
        session.clear()
    
    sync = None
    if backend is not None:
        sync = SyncAdapter(backend, store, session, watched_tables=settings.watched_tables)
    return Portal(store=store, session=session, sync=sync)

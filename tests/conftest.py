"""Shared fixtures for the store, sync and API tests."""

import asyncio
import sys
from collections import defaultdict
from pathlib import Path
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.portal import Portal, build_portal
from app.shared.exceptions import RemoteSyncError
from app.store import HospitalStore, MemoryStorage, Session
from app.sync.remote import RemoteBackend


Row = Dict[str, Any]


class InMemoryRemoteBackend(RemoteBackend):
    """Remote store double: rows in dicts, server ids ``srv-N``, manual change feed."""
    
    def __init__(self):
        self.tables: Dict[str, List[Row]] = defaultdict(list)
        self.failing: set = set()
        self.calls: List[tuple] = []
        self._next_id = 0
        self._events: Optional[asyncio.Queue] = None
    
    def _check(self, table: str) -> None:
        if table in self.failing:
            raise RemoteSyncError(table, "connection refused")
    
    @staticmethod
    def _matches(row: Row, filters: Row) -> bool:
        return all(row.get(k) == v for k, v in filters.items())
    
    def seed(self, table: str, row: Row) -> str:
        self._next_id += 1
        remote_id = f"srv-{self._next_id}"
        self.tables[table].append({**row, "_id": remote_id})
        return remote_id
    
    async def select(self, table: str) -> List[Row]:
        self.calls.append(("select", table))
        self._check(table)
        return [dict(r) for r in self.tables[table]]
    
    async def find_one(self, table: str, filters: Row) -> Optional[Row]:
        self.calls.append(("find_one", table, dict(filters)))
        self._check(table)
        for row in self.tables[table]:
            if self._matches(row, filters):
                return dict(row)
        return None
    
    async def find(self, table: str, filters: Row) -> List[Row]:
        self.calls.append(("find", table, dict(filters)))
        self._check(table)
        return [dict(r) for r in self.tables[table] if self._matches(r, filters)]
    
    async def insert(self, table: str, row: Row) -> str:
        self.calls.append(("insert", table))
        self._check(table)
        return self.seed(table, {k: v for k, v in row.items() if k != "_id"})
    
    async def update(self, table: str, filters: Row, changes: Row) -> int:
        self.calls.append(("update", table))
        self._check(table)
        for row in self.tables[table]:
            if self._matches(row, filters):
                row.update({k: v for k, v in changes.items() if k != "_id"})
                return 1
        return 0
    
    async def delete(self, table: str, filters: Row) -> int:
        self.calls.append(("delete", table))
        self._check(table)
        for i, row in enumerate(self.tables[table]):
            if self._matches(row, filters):
                del self.tables[table][i]
                return 1
        return 0
    
    def _queue(self) -> asyncio.Queue:
        if self._events is None:
            self._events = asyncio.Queue()
        return self._events
    
    def notify(self, table: str) -> None:
        self._queue().put_nowait(table)
    
    async def watch(self, tables: Sequence[str]) -> AsyncIterator[str]:
        queue = self._queue()
        while True:
            table = await queue.get()
            if table in tables:
                yield table


async def wait_until(predicate, timeout: float = 2.0) -> None:
    """Yield to the event loop until ``predicate()`` is true."""
    async def poll():
        while not predicate():
            await asyncio.sleep(0.01)
    await asyncio.wait_for(poll(), timeout)


def make_patient(store: HospitalStore, session: Session, email: str = "pat@medicore.com",
                 name: str = "Pat Patient", password: str = "pw123") -> str:
    result = store.signup(session, {
        "name": name,
        "email": email,
        "password": password,
        "role": "PATIENT",
        "phone": "+91 9876543210",
        "address": "1 Ward Street",
    })
    assert result.ok
    return result.entity_id


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def store(storage):
    return HospitalStore(storage, seed_demo_data=True)


@pytest.fixture
def session(storage):
    return Session(storage)


@pytest.fixture
def portal(storage) -> Portal:
    return build_portal(storage=storage, seed_demo_data=True)

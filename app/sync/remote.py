"""Remote store backends.

Tables are addressed by name (``profiles``, ``doctors``, ``appointments``,
``resources``). Rows are plain dicts; the server-assigned primary key is
exposed as the string ``_id``.
"""

from abc import ABC, abstractmethod
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from app.core.logging import get_logger
from app.shared.exceptions import RemoteSyncError

logger = get_logger("sync")

Row = Dict[str, Any]


class RemoteBackend(ABC):
    """Async access to the remote system of record."""
    
    @abstractmethod
    async def select(self, table: str) -> List[Row]:
        """Every row of ``table``."""
    
    @abstractmethod
    async def find_one(self, table: str, filters: Row) -> Optional[Row]:
        """First row whose columns equal every value in ``filters``."""
    
    @abstractmethod
    async def find(self, table: str, filters: Row) -> List[Row]:
        """Every row whose columns equal every value in ``filters``."""
    
    @abstractmethod
    async def insert(self, table: str, row: Row) -> str:
        """Insert ``row`` and return the server-assigned id."""
    
    @abstractmethod
    async def update(self, table: str, filters: Row, changes: Row) -> int:
        """Update the first matching row. Returns the number of rows matched."""
    
    @abstractmethod
    async def delete(self, table: str, filters: Row) -> int:
        """Delete the first matching row. Returns the number of rows removed."""
    
    @abstractmethod
    def watch(self, tables: Sequence[str]) -> AsyncIterator[str]:
        """Yield the table name of every change made to one of ``tables``."""


class MongoRemoteBackend(RemoteBackend):
    """Remote store on MongoDB. Collections act as tables and change streams
    as the change feed (requires a replica set)."""
    
    def __init__(self, client: AsyncIOMotorClient, database_name: str):
        self.client = client
        self.db: AsyncIOMotorDatabase = client[database_name]
    
    @staticmethod
    def _to_query(filters: Row) -> Row:
        query = dict(filters)
        if "_id" in query and ObjectId.is_valid(query["_id"]):
            query["_id"] = ObjectId(query["_id"])
        return query
    
    @staticmethod
    def _from_document(document: Row) -> Row:
        row = dict(document)
        row["_id"] = str(row["_id"])
        return row
    
    async def select(self, table: str) -> List[Row]:
        try:
            documents = await self.db[table].find({}).to_list(length=None)
        except PyMongoError as e:
            raise RemoteSyncError(table, str(e)) from e
        return [self._from_document(d) for d in documents]
    
    async def find_one(self, table: str, filters: Row) -> Optional[Row]:
        try:
            document = await self.db[table].find_one(self._to_query(filters))
        except PyMongoError as e:
            raise RemoteSyncError(table, str(e)) from e
        return self._from_document(document) if document else None
    
    async def find(self, table: str, filters: Row) -> List[Row]:
        try:
            documents = await self.db[table].find(self._to_query(filters)).to_list(length=None)
        except PyMongoError as e:
            raise RemoteSyncError(table, str(e)) from e
        return [self._from_document(d) for d in documents]
    
    async def insert(self, table: str, row: Row) -> str:
        payload = {k: v for k, v in row.items() if k != "_id"}
        try:
            result = await self.db[table].insert_one(payload)
        except PyMongoError as e:
            raise RemoteSyncError(table, str(e)) from e
        return str(result.inserted_id)
    
    async def update(self, table: str, filters: Row, changes: Row) -> int:
        payload = {k: v for k, v in changes.items() if k != "_id"}
        try:
            result = await self.db[table].update_one(self._to_query(filters), {"$set": payload})
        except PyMongoError as e:
            raise RemoteSyncError(table, str(e)) from e
        return result.matched_count
    
    async def delete(self, table: str, filters: Row) -> int:
        try:
            result = await self.db[table].delete_one(self._to_query(filters))
        except PyMongoError as e:
            raise RemoteSyncError(table, str(e)) from e
        return result.deleted_count
    
    async def watch(self, tables: Sequence[str]) -> AsyncIterator[str]:
        pipeline = [{"$match": {"ns.coll": {"$in": list(tables)}}}]
        try:
            async with self.db.watch(pipeline=pipeline) as stream:
                logger.info(f"Watching remote changes on: {', '.join(tables)}")
                async for change in stream:
                    yield change["ns"]["coll"]
        except PyMongoError as e:
            raise RemoteSyncError(",".join(tables), str(e)) from e

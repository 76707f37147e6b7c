import uuid
from typing import Optional
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def new_id() -> str:
    """Generate a fresh collision-resistant local identifier."""
    return uuid.uuid4().hex


class StoreModel(BaseModel):
    """Base model for records kept in the local store.
    
    Records are persisted with camelCase keys (``patientId``, ``totalStock``)
    and may be built from either the alias or the field name.
    """
    
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )
    
    def to_storage(self) -> dict:
        """Serialize to the JSON-ready shape written to the backing store."""
        return self.model_dump(mode="json", by_alias=True)


class Entity(StoreModel):
    """A stored record with a local id and, once mirrored, a remote id."""
    
    id: str
    remote_id: Optional[str] = None  # canonical id assigned by the remote store

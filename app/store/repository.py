"""In-memory entity collections bound to durable storage."""

from typing import Any, Callable, Dict, Generic, Iterable, Iterator, List, Optional, Tuple, Type, TypeVar

from pydantic import ValidationError

from app.core.logging import logger
from app.shared.models import Entity, new_id
from app.store.storage import KeyValueStorage


T = TypeVar("T", bound=Entity)


class Repository(Generic[T]):
    """One collection of records keyed by id.
    
    The in-memory dict is the authority. Every mutation writes the whole
    collection to ``storage`` under ``key`` before returning.
    """
    
    def __init__(
        self,
        key: str,
        model: Type[T],
        storage: KeyValueStorage,
        default: Optional[Callable[[], List[T]]] = None,
    ):
        self.key = key
        self.model = model
        self.storage = storage
        self._default = default or list
        self._items: Dict[str, T] = {}
    
    # ---------- Loading / persistence ----------
    
    def load(self) -> None:
        """Replace in-memory state with the stored collection (or the default)."""
        raw = self.storage.get(self.key)
        if raw is None:
            self._set_items(self._default())
            self.persist()
            return
        
        items: List[T] = []
        for record in raw if isinstance(raw, list) else []:
            try:
                items.append(self.model.model_validate(record))
            except ValidationError as e:
                logger.warning(f"Skipping unreadable {self.key} record: {e.error_count()} error(s)")
        self._set_items(items)
    
    def persist(self) -> None:
        self.storage.set(self.key, [item.to_storage() for item in self._items.values()])
    
    def _set_items(self, items: Iterable[T]) -> None:
        self._items = {item.id: item for item in items}
    
    def replace_all(self, items: Iterable[T]) -> None:
        """Swap the whole collection, e.g. after a remote reload."""
        self._set_items(items)
        self.persist()
    
    # ---------- Reads ----------
    
    def list(self) -> Tuple[T, ...]:
        return tuple(self._items.values())
    
    def __iter__(self) -> Iterator[T]:
        return iter(self.list())
    
    def __len__(self) -> int:
        return len(self._items)
    
    def __contains__(self, entity_id: str) -> bool:
        return entity_id in self._items
    
    def get(self, entity_id: str) -> Optional[T]:
        return self._items.get(entity_id)
    
    def find(self, predicate: Callable[[T], bool]) -> Iterator[T]:
        return (item for item in self.list() if predicate(item))
    
    def first(self, predicate: Callable[[T], bool]) -> Optional[T]:
        return next(self.find(predicate), None)
    
    # ---------- Mutations ----------
    
    def _fresh_id(self) -> str:
        entity_id = new_id()
        while entity_id in self._items:
            entity_id = new_id()
        return entity_id
    
    def add(self, data: Dict[str, Any]) -> T:
        """Create a record from ``data`` (without id) under a fresh id.
        
        Raises ValidationError before anything changes when ``data`` does not
        describe a valid record.
        """
        fields = {k: v for k, v in data.items() if k != "id"}
        entity = self.model.model_validate({**fields, "id": self._fresh_id()})
        self._items[entity.id] = entity
        self.persist()
        return entity
    
    def insert(self, entity: T) -> T:
        """Store a record that already carries its id (imported records)."""
        self._items[entity.id] = entity
        self.persist()
        return entity
    
    def update(self, entity: T) -> bool:
        """Replace the record with the same id. Returns False if absent."""
        if entity.id not in self._items:
            return False
        self._items[entity.id] = entity
        self.persist()
        return True
    
    def patch(self, entity_id: str, **changes: Any) -> Optional[T]:
        """Apply field changes to one record and return the new version."""
        current = self._items.get(entity_id)
        if current is None:
            return None
        updated = current.model_copy(update=changes)
        self._items[entity_id] = updated
        self.persist()
        return updated
    
    def patch_where(self, predicate: Callable[[T], bool], **changes: Any) -> List[T]:
        """Apply the same field changes to every matching record, persisting once."""
        changed: List[T] = []
        for entity_id, item in list(self._items.items()):
            if predicate(item):
                updated = item.model_copy(update=changes)
                self._items[entity_id] = updated
                changed.append(updated)
        if changed:
            self.persist()
        return changed
    
    def remove(self, entity_id: str) -> Optional[T]:
        """Delete a record. Returns the removed record, or None if absent."""
        removed = self._items.pop(entity_id, None)
        if removed is not None:
            self.persist()
        return removed

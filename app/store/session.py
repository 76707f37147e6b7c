"""Session context: at most one signed-in user per portal instance."""

from typing import FrozenSet, Optional

from pydantic import ValidationError

from app.core.logging import logger
from app.models import Role, User
from app.store.storage import KeyValueStorage


CURRENT_USER_KEY = "currentUser"

# Operations each role is allowed to reach. Checked by the HTTP layer;
# the store itself does not enforce them.
ADMIN_CAPABILITIES: FrozenSet[str] = frozenset({
    "doctors:write",
    "appointments:approve",
    "appointments:cancel",
    "appointments:complete",
    "appointments:delete",
    "appointments:read_all",
    "patients:read",
    "patients:delete",
    "patients:export",
    "resources:write",
    "resource_requests:pay",
    "resource_requests:cancel",
    "resource_requests:delete",
    "resource_requests:read_all",
    "assistant:bio",
    "profile:write",
})

PATIENT_CAPABILITIES: FrozenSet[str] = frozenset({
    "appointments:book",
    "appointments:cancel",
    "appointments:delete",
    "resource_requests:create",
    "resource_requests:cancel",
    "assistant:ask",
    "profile:write",
    "account:delete",
})


class Session:
    """Holds the current user and persists it under ``currentUser``.
    
    Passed explicitly to the operations that act on behalf of a user.
    """
    
    def __init__(self, storage: KeyValueStorage):
        self.storage = storage
        self._current_user: Optional[User] = None
    
    @property
    def current_user(self) -> Optional[User]:
        return self._current_user
    
    @property
    def is_authenticated(self) -> bool:
        return self._current_user is not None
    
    def restore(self) -> None:
        """Load the persisted current user, if any."""
        raw = self.storage.get(CURRENT_USER_KEY)
        if not raw:
            self._current_user = None
            return
        try:
            self._current_user = User.model_validate(raw)
        except ValidationError:
            logger.warning("Discarding unreadable stored session")
            self._current_user = None
            self.storage.remove(CURRENT_USER_KEY)
    
    def set_user(self, user: User) -> None:
        self._current_user = user
        self.storage.set(CURRENT_USER_KEY, user.to_storage())
    
    def clear(self) -> None:
        self._current_user = None
        self.storage.remove(CURRENT_USER_KEY)
    
    def is_current(self, user_id: str) -> bool:
        return self._current_user is not None and self._current_user.id == user_id
    
    def can(self, capability: str) -> bool:
        """Advisory capability check for the signed-in role."""
        if self._current_user is None:
            return False
        if self._current_user.role == Role.ADMIN:
            return capability in ADMIN_CAPABILITIES
        return capability in PATIENT_CAPABILITIES

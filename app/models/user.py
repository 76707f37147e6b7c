"""User account model."""

from enum import Enum
from typing import Optional

from app.shared.models import Entity


class Role(str, Enum):
    """Account role. Decides which dashboard and operations apply."""
    ADMIN = "ADMIN"
    PATIENT = "PATIENT"


class User(Entity):
    """A portal account, administrator or patient."""
    
    name: str
    email: str
    role: Role = Role.PATIENT
    # Stored and compared in plain text to match the existing accounts.
    # Must be replaced with salted hashing before any production use.
    password: Optional[str] = None
    avatar: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    
    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

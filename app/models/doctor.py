"""Doctor profile model."""

from typing import List

from pydantic import Field

from app.shared.models import Entity


class Doctor(Entity):
    """A bookable specialist. Managed by administrators only."""
    
    name: str
    specialty: str
    bio: str = ""
    image: str = ""
    experience: int = 0  # years
    available_days: List[str] = Field(default_factory=list)  # e.g. ["Mon", "Wed"]
    time_slots: List[str] = Field(default_factory=list)  # e.g. ["09:00", "10:00"]

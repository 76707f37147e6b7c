"""Appointment model and its status machine."""

from enum import Enum
from typing import Dict, FrozenSet, Optional

from app.shared.models import Entity


class AppointmentStatus(str, Enum):
    """Status of an appointment."""
    PENDING = "pending"
    UPCOMING = "upcoming"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


APPOINTMENT_TRANSITIONS: Dict[AppointmentStatus, FrozenSet[AppointmentStatus]] = {
    AppointmentStatus.PENDING: frozenset({AppointmentStatus.UPCOMING, AppointmentStatus.CANCELLED}),
    AppointmentStatus.UPCOMING: frozenset({AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED}),
    AppointmentStatus.COMPLETED: frozenset(),
    AppointmentStatus.CANCELLED: frozenset(),
}


class Appointment(Entity):
    """A booking of a doctor by a patient.
    
    ``patient_name`` and ``doctor_name`` are snapshots taken at booking time
    and are not updated when the referenced user or doctor is renamed.
    """
    
    patient_id: str
    patient_name: str
    doctor_id: str
    doctor_name: str
    date: str
    time: str
    status: AppointmentStatus = AppointmentStatus.PENDING
    notes: Optional[str] = None
    
    def can_transition(self, target: AppointmentStatus) -> bool:
        return target in APPOINTMENT_TRANSITIONS[self.status]
    
    @property
    def is_terminal(self) -> bool:
        return not APPOINTMENT_TRANSITIONS[self.status]

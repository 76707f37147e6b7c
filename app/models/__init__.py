"""Store record models."""

from app.models.user import User, Role
from app.models.doctor import Doctor
from app.models.appointment import Appointment, AppointmentStatus, APPOINTMENT_TRANSITIONS
from app.models.resource import (
    HospitalResource,
    ResourceRequest,
    ResourceRequestStatus,
    RESOURCE_REQUEST_TRANSITIONS,
)

__all__ = [
    "User",
    "Role",
    "Doctor",
    "Appointment",
    "AppointmentStatus",
    "APPOINTMENT_TRANSITIONS",
    "HospitalResource",
    "ResourceRequest",
    "ResourceRequestStatus",
    "RESOURCE_REQUEST_TRANSITIONS",
]

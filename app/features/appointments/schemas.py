# Appointments Feature - Schemas

from typing import List, Optional
from pydantic import BaseModel, Field

from app.models import Appointment


class BookAppointmentRequest(BaseModel):
    """Request schema for booking a doctor."""
    doctor_id: str
    date: str = Field(..., min_length=1, description="e.g. 2024-06-01")
    time: str = Field(..., min_length=1, description="One of the doctor's time slots")
    notes: Optional[str] = "Online booking"


class AppointmentListResponse(BaseModel):
    appointments: List[Appointment]
    total: int


class AppointmentResultResponse(BaseModel):
    appointment: Optional[Appointment] = None
    message: Optional[str] = None
    warnings: List[str] = Field(default_factory=list)

# Doctors Feature - Schemas

from typing import List, Optional
from pydantic import BaseModel, Field

from app.models import Doctor


class DoctorCreate(BaseModel):
    """Schema for adding a doctor."""
    name: str = Field(..., min_length=1, max_length=100)
    specialty: str = Field(..., min_length=1, max_length=100)
    bio: str = ""
    image: Optional[str] = None
    experience: int = Field(5, ge=0)
    available_days: List[str] = Field(default_factory=lambda: ["Mon", "Wed", "Fri"])
    time_slots: List[str] = Field(default_factory=lambda: ["09:00", "10:00", "11:00"])


class DoctorUpdate(BaseModel):
    """Schema for editing a doctor. Only provided fields change."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    specialty: Optional[str] = Field(None, min_length=1, max_length=100)
    bio: Optional[str] = None
    image: Optional[str] = None
    experience: Optional[int] = Field(None, ge=0)
    available_days: Optional[List[str]] = None
    time_slots: Optional[List[str]] = None


class DoctorListResponse(BaseModel):
    doctors: List[Doctor]
    total: int


class DoctorResultResponse(BaseModel):
    doctor: Optional[Doctor] = None
    warnings: List[str] = Field(default_factory=list)

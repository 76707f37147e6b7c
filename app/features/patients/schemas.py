# Patient Management Feature - Schemas

from typing import List
from pydantic import BaseModel, Field

from app.features.auth.schemas import UserResponse


class PatientListResponse(BaseModel):
    """Response schema for list of patients."""
    patients: List[UserResponse]
    total: int


class PatientDeleteResponse(BaseModel):
    message: str
    warnings: List[str] = Field(default_factory=list)

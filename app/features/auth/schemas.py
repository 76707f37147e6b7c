import re
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from app.models import Role, User


PHONE_PREFIX = "+91"


def normalize_phone(value: str) -> str:
    """Strip everything but digits and require exactly ten of them."""
    digits = re.sub(r"\D", "", value)
    if len(digits) != 10:
        raise ValueError("Invalid number: Phone number must be exactly 10 digits.")
    return f"{PHONE_PREFIX} {digits}"


def default_avatar(name: str) -> str:
    return f"https://ui-avatars.com/api/?name={name}&background=random"


# Request Schemas
class SignupRequest(BaseModel):
    """Signup request schema."""
    
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=100)
    phone: str
    address: Optional[str] = Field(None, max_length=500)
    role: Role = Role.PATIENT
    
    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str) -> str:
        return normalize_phone(v)
    
    @model_validator(mode="after")
    def drop_admin_address(self) -> "SignupRequest":
        # Only patients keep an address on file
        if self.role == Role.ADMIN:
            self.address = None
        return self
    
    def to_user_data(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "email": str(self.email),
            "password": self.password,
            "phone": self.phone,
            "address": self.address,
            "role": self.role,
            "avatar": default_avatar(self.name),
        }


class LoginRequest(BaseModel):
    """Login request schema."""
    
    email: EmailStr
    password: str


class UpdateProfileRequest(BaseModel):
    """Update profile request schema."""
    
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = None
    address: Optional[str] = Field(None, max_length=500)
    avatar: Optional[str] = None
    
    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return normalize_phone(v)


# Response Schemas
class UserResponse(BaseModel):
    """User response schema. Never carries the password."""
    
    id: str
    name: str
    email: str
    role: Role
    avatar: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    
    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            role=user.role,
            avatar=user.avatar,
            phone=user.phone,
            address=user.address,
        )


class SessionResponse(BaseModel):
    """Signed-in user plus any remote-sync warnings."""
    
    user: UserResponse
    warnings: List[str] = Field(default_factory=list)


class MessageResponse(BaseModel):
    """Generic message response."""
    
    message: str
    warnings: List[str] = Field(default_factory=list)

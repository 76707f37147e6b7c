"""FastAPI routers."""

from app.routers.health import router as health_router
from app.features.auth.router import router as auth_router
from app.features.doctors.router import router as doctors_router
from app.features.appointments.router import router as appointments_router
from app.features.resources.router import router as resources_router
from app.features.resources.router import requests_router as resource_requests_router
from app.features.patients.router import router as patients_router
from app.features.assistant.router import router as assistant_router

__all__ = [
    "health_router",
    "auth_router",
    "doctors_router",
    "appointments_router",
    "resources_router",
    "resource_requests_router",
    "patients_router",
    "assistant_router",
]

# Doctors Feature - Service

from typing import List, Optional

from app.features.auth.schemas import default_avatar
from app.features.doctors.schemas import DoctorCreate, DoctorUpdate
from app.models import Doctor
from app.portal import Portal
from app.shared.schemas import NOT_FOUND, OperationResult
from app.store import projections
from app.store.state import DOCTORS_KEY


class DoctorService:
    """Service class for doctor management. Administrators only."""
    
    @staticmethod
    def list_doctors(portal: Portal, query: Optional[str] = None) -> List[Doctor]:
        return projections.doctors_matching(portal.store.doctors, query)
    
    @staticmethod
    async def add_doctor(portal: Portal, data: DoctorCreate) -> OperationResult:
        fields = data.model_dump()
        if not fields.get("image"):
            fields["image"] = default_avatar(data.name)
        
        result = portal.store.add_doctor(fields)
        if not result.ok:
            return result
        doctor = portal.store.doctors.get(result.entity_id)
        return result.with_warnings(await portal.mirror_create(DOCTORS_KEY, doctor))
    
    @staticmethod
    async def update_doctor(portal: Portal, doctor_id: str, data: DoctorUpdate) -> OperationResult:
        previous = portal.store.doctors.get(doctor_id)
        if previous is None:
            return OperationResult.failure("Doctor not found", NOT_FOUND, entity_id=doctor_id)
        
        updated = previous.model_copy(update=data.model_dump(exclude_unset=True))
        result = portal.store.update_doctor(updated)
        if not result.ok:
            return result
        return result.with_warnings(await portal.mirror_update(DOCTORS_KEY, updated, previous))
    
    @staticmethod
    async def delete_doctor(portal: Portal, doctor_id: str) -> OperationResult:
        previous = portal.store.doctors.get(doctor_id)
        result = portal.store.delete_doctor(doctor_id)
        if not result.ok:
            return result
        return result.with_warnings(await portal.mirror_delete(DOCTORS_KEY, previous))

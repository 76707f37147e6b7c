# Patient Management Feature - Service

from typing import List, Optional

from app.features.auth.service import AuthService
from app.models import Role, User
from app.portal import Portal
from app.shared.schemas import NOT_FOUND, OperationResult
from app.store import projections


class PatientService:
    """Service class for the administrator's patient list."""
    
    @staticmethod
    def search(portal: Portal, query: Optional[str] = None) -> List[User]:
        return projections.patients(portal.store.users, query)
    
    @staticmethod
    def export_csv(portal: Portal) -> str:
        """All patients as CSV (name, email, phone, address)."""
        return projections.patients_csv(projections.patients(portal.store.users))
    
    @staticmethod
    async def delete_patient(portal: Portal, patient_id: str) -> OperationResult:
        """Delete a patient account; its appointments are cancelled, not removed."""
        user = portal.store.users.get(patient_id)
        if user is None or user.role != Role.PATIENT:
            return OperationResult.failure("Patient not found", NOT_FOUND, entity_id=patient_id)
        return await AuthService.delete_user(portal, patient_id)

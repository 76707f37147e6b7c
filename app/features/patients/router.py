# Patient Management Feature - Router

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from app.dependencies import get_portal, raise_for_result, require
from app.features.auth.schemas import UserResponse
from app.features.patients.schemas import PatientDeleteResponse, PatientListResponse
from app.features.patients.service import PatientService
from app.models import User
from app.portal import Portal
from app.store.projections import CSV_FILENAME


router = APIRouter(prefix="/patients", tags=["Patients"])


@router.get("", response_model=PatientListResponse)
async def list_patients(
    search: Optional[str] = Query(None, description="Match on name, email or phone"),
    portal: Portal = Depends(get_portal),
    current_user: User = Depends(require("patients:read")),
):
    """List patient accounts."""
    patients = PatientService.search(portal, search)
    return PatientListResponse(
        patients=[UserResponse.from_user(p) for p in patients],
        total=len(patients),
    )


@router.get("/export")
async def export_patients(
    portal: Portal = Depends(get_portal),
    current_user: User = Depends(require("patients:export")),
):
    """Download every patient as CSV."""
    return Response(
        content=PatientService.export_csv(portal),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{CSV_FILENAME}"'},
    )


@router.delete("/{patient_id}", response_model=PatientDeleteResponse)
async def delete_patient(
    patient_id: str,
    portal: Portal = Depends(get_portal),
    current_user: User = Depends(require("patients:delete")),
):
    """Delete a patient. Their appointments are kept as cancelled."""
    result = raise_for_result(await PatientService.delete_patient(portal, patient_id))
    return PatientDeleteResponse(message="Patient deleted", warnings=result.warnings)

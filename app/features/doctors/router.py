# Doctors Feature - Router

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from app.dependencies import get_current_user, get_portal, raise_for_result, require
from app.features.doctors.schemas import (
    DoctorCreate,
    DoctorListResponse,
    DoctorResultResponse,
    DoctorUpdate,
)
from app.features.doctors.service import DoctorService
from app.models import User
from app.portal import Portal
from app.shared.exceptions import NotFoundException


router = APIRouter(prefix="/doctors", tags=["Doctors"])


@router.get("", response_model=DoctorListResponse)
async def list_doctors(
    search: Optional[str] = Query(None, description="Match on name or specialty"),
    portal: Portal = Depends(get_portal),
    current_user: User = Depends(get_current_user),
):
    """List doctors, optionally filtered."""
    doctors = DoctorService.list_doctors(portal, search)
    return DoctorListResponse(doctors=doctors, total=len(doctors))


@router.get("/{doctor_id}", response_model=DoctorResultResponse)
async def get_doctor(
    doctor_id: str,
    portal: Portal = Depends(get_portal),
    current_user: User = Depends(get_current_user),
):
    doctor = portal.store.doctors.get(doctor_id)
    if doctor is None:
        raise NotFoundException("Doctor not found")
    return DoctorResultResponse(doctor=doctor)


@router.post("", response_model=DoctorResultResponse, status_code=status.HTTP_201_CREATED)
async def add_doctor(
    data: DoctorCreate,
    portal: Portal = Depends(get_portal),
    current_user: User = Depends(require("doctors:write")),
):
    """Add a doctor. Image defaults to a generated avatar."""
    result = raise_for_result(await DoctorService.add_doctor(portal, data))
    return DoctorResultResponse(doctor=portal.store.doctors.get(result.entity_id), warnings=result.warnings)


@router.patch("/{doctor_id}", response_model=DoctorResultResponse)
async def update_doctor(
    doctor_id: str,
    data: DoctorUpdate,
    portal: Portal = Depends(get_portal),
    current_user: User = Depends(require("doctors:write")),
):
    result = raise_for_result(await DoctorService.update_doctor(portal, doctor_id, data))
    return DoctorResultResponse(doctor=portal.store.doctors.get(doctor_id), warnings=result.warnings)


@router.delete("/{doctor_id}", response_model=DoctorResultResponse)
async def delete_doctor(
    doctor_id: str,
    portal: Portal = Depends(get_portal),
    current_user: User = Depends(require("doctors:write")),
):
    result = raise_for_result(await DoctorService.delete_doctor(portal, doctor_id))
    return DoctorResultResponse(warnings=result.warnings)

# Appointments Feature - Router

from fastapi import APIRouter, Depends, status

from app.dependencies import get_current_user, get_portal, raise_for_result, require
from app.features.appointments.schemas import (
    AppointmentListResponse,
    AppointmentResultResponse,
    BookAppointmentRequest,
)
from app.features.appointments.service import AppointmentService
from app.models import User
from app.portal import Portal
from app.shared.schemas import OperationResult


router = APIRouter(prefix="/appointments", tags=["Appointments"])


def _result_response(portal: Portal, result: OperationResult) -> AppointmentResultResponse:
    return AppointmentResultResponse(
        appointment=portal.store.appointments.get(result.entity_id) if result.entity_id else None,
        message=result.message,
        warnings=result.warnings,
    )


@router.get("", response_model=AppointmentListResponse)
async def list_appointments(
    portal: Portal = Depends(get_portal),
    current_user: User = Depends(get_current_user),
):
    """Administrators see every appointment, patients their own."""
    appointments = AppointmentService.list_appointments(portal)
    return AppointmentListResponse(appointments=appointments, total=len(appointments))


@router.post("", response_model=AppointmentResultResponse, status_code=status.HTTP_201_CREATED)
async def book_appointment(
    request: BookAppointmentRequest,
    portal: Portal = Depends(get_portal),
    current_user: User = Depends(require("appointments:book")),
):
    """Request an appointment. It starts as pending until an administrator approves it."""
    result = raise_for_result(await AppointmentService.book(portal, request))
    return _result_response(portal, result)


@router.post("/{appointment_id}/approve", response_model=AppointmentResultResponse)
async def approve_appointment(
    appointment_id: str,
    portal: Portal = Depends(get_portal),
    current_user: User = Depends(require("appointments:approve")),
):
    result = raise_for_result(await AppointmentService.approve(portal, appointment_id))
    return _result_response(portal, result)


@router.post("/{appointment_id}/decline", response_model=AppointmentResultResponse)
async def decline_appointment(
    appointment_id: str,
    portal: Portal = Depends(get_portal),
    current_user: User = Depends(require("appointments:approve")),
):
    result = raise_for_result(await AppointmentService.decline(portal, appointment_id))
    return _result_response(portal, result)


@router.post("/{appointment_id}/cancel", response_model=AppointmentResultResponse)
async def cancel_appointment(
    appointment_id: str,
    portal: Portal = Depends(get_portal),
    current_user: User = Depends(require("appointments:cancel")),
):
    """Cancel an appointment. Cancelling twice is harmless."""
    result = raise_for_result(await AppointmentService.cancel(portal, appointment_id))
    return _result_response(portal, result)


@router.post("/{appointment_id}/complete", response_model=AppointmentResultResponse)
async def complete_appointment(
    appointment_id: str,
    portal: Portal = Depends(get_portal),
    current_user: User = Depends(require("appointments:complete")),
):
    """Mark an upcoming appointment as completed."""
    result = raise_for_result(await AppointmentService.complete(portal, appointment_id))
    return _result_response(portal, result)


@router.delete("/{appointment_id}", response_model=AppointmentResultResponse)
async def delete_appointment(
    appointment_id: str,
    portal: Portal = Depends(get_portal),
    current_user: User = Depends(require("appointments:delete")),
):
    result = raise_for_result(await AppointmentService.delete(portal, appointment_id))
    return AppointmentResultResponse(message=result.message, warnings=result.warnings)

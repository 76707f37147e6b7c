# Appointments Feature - Service

from typing import Callable, List

from app.features.appointments.schemas import BookAppointmentRequest
from app.models import Appointment, Role
from app.portal import Portal
from app.shared.schemas import FORBIDDEN, NOT_FOUND, UNAUTHENTICATED, OperationResult
from app.store import projections
from app.store.state import APPOINTMENTS_KEY


class AppointmentService:
    """Service class for appointment booking and the approval workflow."""
    
    @staticmethod
    def list_appointments(portal: Portal) -> List[Appointment]:
        """All appointments for administrators, own appointments for patients."""
        user = portal.session.current_user
        if user is None:
            return []
        if user.role == Role.ADMIN:
            return list(portal.store.appointments)
        return projections.appointments_for_patient(portal.store.appointments, user.id)
    
    @staticmethod
    async def book(portal: Portal, request: BookAppointmentRequest) -> OperationResult:
        result = portal.store.book_appointment(
            portal.session,
            doctor_id=request.doctor_id,
            date=request.date,
            time=request.time,
            notes=request.notes,
        )
        if not result.ok:
            return result
        appointment = portal.store.appointments.get(result.entity_id)
        return result.with_warnings(await portal.mirror_create(APPOINTMENTS_KEY, appointment))
    
    @staticmethod
    def _check_owner(portal: Portal, appointment_id: str) -> OperationResult:
        user = portal.session.current_user
        if user is None:
            return OperationResult.failure("Not signed in", UNAUTHENTICATED)
        appointment = portal.store.appointments.get(appointment_id)
        if appointment is None:
            return OperationResult.failure("Appointment not found", NOT_FOUND, entity_id=appointment_id)
        if user.role == Role.PATIENT and appointment.patient_id != user.id:
            return OperationResult.failure("Not your appointment", FORBIDDEN, entity_id=appointment_id)
        return OperationResult.success(entity_id=appointment_id)
    
    @staticmethod
    async def _transition(
        portal: Portal,
        appointment_id: str,
        apply: Callable[[str], OperationResult],
    ) -> OperationResult:
        previous = portal.store.appointments.get(appointment_id)
        result = apply(appointment_id)
        if not result.ok:
            return result
        
        current = portal.store.appointments.get(appointment_id)
        if previous is None or current is None or current.status == previous.status:
            return result
        return result.with_warnings(await portal.mirror_update(APPOINTMENTS_KEY, current, previous))
    
    @staticmethod
    async def approve(portal: Portal, appointment_id: str) -> OperationResult:
        return await AppointmentService._transition(
            portal, appointment_id, portal.store.approve_appointment,
        )
    
    @staticmethod
    async def decline(portal: Portal, appointment_id: str) -> OperationResult:
        """Administrator declines a request; same terminal state as a cancel."""
        return await AppointmentService._transition(
            portal, appointment_id, portal.store.cancel_appointment,
        )
    
    @staticmethod
    async def cancel(portal: Portal, appointment_id: str) -> OperationResult:
        check = AppointmentService._check_owner(portal, appointment_id)
        if not check.ok:
            return check
        return await AppointmentService._transition(
            portal, appointment_id, portal.store.cancel_appointment,
        )
    
    @staticmethod
    async def complete(portal: Portal, appointment_id: str) -> OperationResult:
        return await AppointmentService._transition(
            portal, appointment_id, portal.store.complete_appointment,
        )
    
    @staticmethod
    async def delete(portal: Portal, appointment_id: str) -> OperationResult:
        check = AppointmentService._check_owner(portal, appointment_id)
        if not check.ok:
            return check
        previous = portal.store.appointments.get(appointment_id)
        result = portal.store.delete_appointment(appointment_id)
        if not result.ok:
            return result
        return result.with_warnings(await portal.mirror_delete(APPOINTMENTS_KEY, previous))

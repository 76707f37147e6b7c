"""The hospital store: five collections plus the operations that mutate them.

Every operation applies its change in memory, persists the affected
collection and returns an :class:`OperationResult`. Nothing here raises for
a missing record or an illegal transition.
"""

from typing import Any, Dict, Optional

from pydantic import ValidationError

from app.core.logging import logger
from app.models import (
    Appointment,
    AppointmentStatus,
    Doctor,
    HospitalResource,
    ResourceRequest,
    ResourceRequestStatus,
    Role,
    User,
)
from app.shared.schemas import (
    CONFLICT,
    FORBIDDEN,
    INVALID,
    NOT_FOUND,
    UNAUTHENTICATED,
    OperationResult,
)
from app.store import seed
from app.store.repository import Repository
from app.store.session import Session
from app.store.storage import KeyValueStorage


USERS_KEY = "users"
DOCTORS_KEY = "doctors"
APPOINTMENTS_KEY = "appointments"
RESOURCE_REQUESTS_KEY = "resourceRequests"
HOSPITAL_RESOURCES_KEY = "hospitalResources"

INVALID_CREDENTIALS = "Invalid credentials."


def _invalid(what: str, error: ValidationError) -> OperationResult:
    fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in error.errors())
    logger.info(f"Rejected {what}: invalid {fields}")
    return OperationResult.failure(f"Invalid {what} details: {fields}", INVALID)


class HospitalStore:
    """Owner of users, doctors, appointments, resource requests and the resource catalog."""
    
    def __init__(self, storage: KeyValueStorage, seed_demo_data: bool = True):
        self.storage = storage
        
        self.users: Repository[User] = Repository(
            USERS_KEY, User, storage,
            default=(lambda: [seed.demo_admin()]) if seed_demo_data else None,
        )
        self.doctors: Repository[Doctor] = Repository(
            DOCTORS_KEY, Doctor, storage,
            default=seed.demo_doctors if seed_demo_data else None,
        )
        self.appointments: Repository[Appointment] = Repository(
            APPOINTMENTS_KEY, Appointment, storage,
        )
        self.resource_requests: Repository[ResourceRequest] = Repository(
            RESOURCE_REQUESTS_KEY, ResourceRequest, storage,
        )
        self.hospital_resources: Repository[HospitalResource] = Repository(
            HOSPITAL_RESOURCES_KEY, HospitalResource, storage,
            default=seed.demo_resources if seed_demo_data else None,
        )
        self.hydrate()
    
    def hydrate(self) -> None:
        """Re-read every collection from durable storage."""
        for repository in self.repositories().values():
            repository.load()
    
    def repositories(self) -> Dict[str, Repository]:
        return {
            USERS_KEY: self.users,
            DOCTORS_KEY: self.doctors,
            APPOINTMENTS_KEY: self.appointments,
            RESOURCE_REQUESTS_KEY: self.resource_requests,
            HOSPITAL_RESOURCES_KEY: self.hospital_resources,
        }
    
    def attach_remote_id(self, key: str, local_id: str, remote_id: str) -> bool:
        """Record the remote canonical id on a local record, if it still exists."""
        repository = self.repositories()[key]
        current = repository.get(local_id)
        if current is None:
            return False
        if current.remote_id == remote_id:
            return True
        repository.patch(local_id, remote_id=remote_id)
        return True
    
    # ============== Session ==============
    
    def login(self, session: Session, email: str, password: str) -> OperationResult:
        matches = list(self.users.find(lambda u: u.email == email and u.password == password))
        if len(matches) != 1:
            logger.info("Login rejected")
            return OperationResult.failure(INVALID_CREDENTIALS, UNAUTHENTICATED)
        
        user = matches[0]
        session.set_user(user)
        logger.info(f"User {user.id} signed in as {user.role.value}")
        return OperationResult.success(entity_id=user.id)
    
    def email_taken(self, email: str, exclude_id: Optional[str] = None) -> bool:
        wanted = email.strip().lower()
        return self.users.first(
            lambda u: u.email.strip().lower() == wanted and u.id != exclude_id
        ) is not None
    
    def signup(self, session: Session, data: Dict[str, Any]) -> OperationResult:
        """Create an account and sign it in."""
        if self.email_taken(data.get("email", "")):
            return OperationResult.failure("An account with this email already exists", CONFLICT)
        
        try:
            user = self.users.add(data)
        except ValidationError as e:
            return _invalid("account", e)
        session.set_user(user)
        logger.info(f"New {user.role.value} account {user.id}")
        return OperationResult.success("Account created", entity_id=user.id)
    
    def import_user(self, session: Session, user: User) -> OperationResult:
        """Adopt an account known to the remote store and sign it in."""
        existing = self.users.get(user.id)
        if existing is None and self.email_taken(user.email):
            return OperationResult.failure("An account with this email already exists", CONFLICT)
        self.users.insert(user)
        session.set_user(user)
        logger.info(f"Imported remote account {user.id}")
        return OperationResult.success(entity_id=user.id)
    
    def logout(self, session: Session) -> OperationResult:
        session.clear()
        return OperationResult.success()
    
    def update_user(self, session: Session, user: User) -> OperationResult:
        if user.id not in self.users:
            return OperationResult.failure("User not found", NOT_FOUND, entity_id=user.id)
        if self.email_taken(user.email, exclude_id=user.id):
            return OperationResult.failure("An account with this email already exists", CONFLICT)
        
        self.users.update(user)
        if session.is_current(user.id):
            session.set_user(user)
        return OperationResult.success("Profile updated", entity_id=user.id)
    
    def delete_user(self, user_id: str) -> OperationResult:
        """Remove an account and cancel (never delete) its appointments."""
        removed = self.users.remove(user_id)
        if removed is None:
            return OperationResult.failure("User not found", NOT_FOUND, entity_id=user_id)
        
        cancelled = self.appointments.patch_where(
            lambda a: a.patient_id == user_id and a.status != AppointmentStatus.CANCELLED,
            status=AppointmentStatus.CANCELLED,
        )
        logger.info(f"Deleted user {user_id}; cancelled {len(cancelled)} appointment(s)")
        return OperationResult.success("User deleted", entity_id=user_id)
    
    def delete_account(self, session: Session) -> OperationResult:
        """Self-deletion: cascade like :meth:`delete_user`, then sign out."""
        user = session.current_user
        if user is None:
            return OperationResult.failure("Not signed in", UNAUTHENTICATED)
        result = self.delete_user(user.id)
        session.clear()
        return result
    
    # ============== Doctors ==============
    
    def add_doctor(self, data: Dict[str, Any]) -> OperationResult:
        try:
            doctor = self.doctors.add(data)
        except ValidationError as e:
            return _invalid("doctor", e)
        return OperationResult.success("Doctor added", entity_id=doctor.id)
    
    def update_doctor(self, doctor: Doctor) -> OperationResult:
        if not self.doctors.update(doctor):
            return OperationResult.failure("Doctor not found", NOT_FOUND, entity_id=doctor.id)
        return OperationResult.success("Doctor updated", entity_id=doctor.id)
    
    def delete_doctor(self, doctor_id: str) -> OperationResult:
        if self.doctors.remove(doctor_id) is None:
            return OperationResult.failure("Doctor not found", NOT_FOUND, entity_id=doctor_id)
        return OperationResult.success("Doctor deleted", entity_id=doctor_id)
    
    # ============== Appointments ==============
    
    def book_appointment(
        self,
        session: Session,
        doctor_id: str,
        date: str,
        time: str,
        notes: Optional[str] = None,
    ) -> OperationResult:
        patient = session.current_user
        if patient is None:
            return OperationResult.failure("Not signed in", UNAUTHENTICATED)
        doctor = self.doctors.get(doctor_id)
        if doctor is None:
            return OperationResult.failure("Doctor not found", NOT_FOUND, entity_id=doctor_id)
        
        appointment = self.appointments.add({
            "patient_id": patient.id,
            "patient_name": patient.name,
            "doctor_id": doctor.id,
            "doctor_name": doctor.name,
            "date": date,
            "time": time,
            "status": AppointmentStatus.PENDING,
            "notes": notes,
        })
        logger.info(f"Appointment {appointment.id} requested with {doctor.id}")
        return OperationResult.success(
            "Appointment requested! Waiting for admin approval.",
            entity_id=appointment.id,
        )
    
    def _transition_appointment(
        self,
        appointment_id: str,
        target: AppointmentStatus,
    ) -> OperationResult:
        appointment = self.appointments.get(appointment_id)
        if appointment is None:
            return OperationResult.failure("Appointment not found", NOT_FOUND, entity_id=appointment_id)
        if appointment.status == target:
            return OperationResult.success(entity_id=appointment_id)
        if not appointment.can_transition(target):
            logger.debug(
                f"Ignoring {appointment.status.value} -> {target.value} for appointment {appointment_id}"
            )
            return OperationResult.failure(
                f"Cannot move a {appointment.status.value} appointment to {target.value}",
                entity_id=appointment_id,
            )
        self.appointments.patch(appointment_id, status=target)
        return OperationResult.success(entity_id=appointment_id)
    
    def approve_appointment(self, appointment_id: str) -> OperationResult:
        return self._transition_appointment(appointment_id, AppointmentStatus.UPCOMING)
    
    def cancel_appointment(self, appointment_id: str) -> OperationResult:
        return self._transition_appointment(appointment_id, AppointmentStatus.CANCELLED)
    
    def complete_appointment(self, appointment_id: str) -> OperationResult:
        """Administrative edit ``upcoming -> completed``. Never applied automatically."""
        return self._transition_appointment(appointment_id, AppointmentStatus.COMPLETED)
    
    def delete_appointment(self, appointment_id: str) -> OperationResult:
        if self.appointments.remove(appointment_id) is None:
            return OperationResult.failure("Appointment not found", NOT_FOUND, entity_id=appointment_id)
        return OperationResult.success("Appointment deleted", entity_id=appointment_id)
    
    # ============== Hospital resources ==============
    
    def add_resource(self, data: Dict[str, Any]) -> OperationResult:
        try:
            resource = self.hospital_resources.add(data)
        except ValidationError as e:
            return _invalid("resource", e)
        return OperationResult.success("Resource added", entity_id=resource.id)
    
    def update_resource(self, resource: HospitalResource) -> OperationResult:
        if not self.hospital_resources.update(resource):
            return OperationResult.failure("Resource not found", NOT_FOUND, entity_id=resource.id)
        return OperationResult.success("Resource updated", entity_id=resource.id)
    
    def delete_resource(self, resource_id: str) -> OperationResult:
        if self.hospital_resources.remove(resource_id) is None:
            return OperationResult.failure("Resource not found", NOT_FOUND, entity_id=resource_id)
        return OperationResult.success("Resource deleted", entity_id=resource_id)
    
    # ============== Resource requests ==============
    
    def request_resource(
        self,
        session: Session,
        resource_id: str,
        date: str,
        time: Optional[str] = None,
    ) -> OperationResult:
        patient = session.current_user
        if patient is None:
            return OperationResult.failure("Not signed in", UNAUTHENTICATED)
        resource = self.hospital_resources.get(resource_id)
        if resource is None:
            return OperationResult.failure("Resource not found", NOT_FOUND, entity_id=resource_id)
        
        request = self.resource_requests.add({
            "patient_id": patient.id,
            "patient_name": patient.name,
            "resource_id": resource.id,
            "type": resource.name,
            "price": resource.price,
            "date": date,
            "time": time,
            "status": ResourceRequestStatus.PENDING,
        })
        return OperationResult.success("Resource requested", entity_id=request.id)
    
    def _transition_request(
        self,
        request_id: str,
        target: ResourceRequestStatus,
    ) -> OperationResult:
        request = self.resource_requests.get(request_id)
        if request is None:
            return OperationResult.failure("Resource request not found", NOT_FOUND, entity_id=request_id)
        if request.status == target:
            return OperationResult.success(entity_id=request_id)
        if not request.can_transition(target):
            return OperationResult.failure(
                f"Cannot move a {request.status.value} request to {target.value}",
                entity_id=request_id,
            )
        self.resource_requests.patch(request_id, status=target)
        return OperationResult.success(entity_id=request_id)
    
    def mark_request_paid(self, request_id: str) -> OperationResult:
        return self._transition_request(request_id, ResourceRequestStatus.PAID)
    
    def cancel_resource_request(
        self,
        request_id: str,
        actor: Optional[User] = None,
    ) -> OperationResult:
        """Cancel a request. A patient actor may only cancel their own pending one."""
        request = self.resource_requests.get(request_id)
        if request is None:
            return OperationResult.failure("Resource request not found", NOT_FOUND, entity_id=request_id)
        if actor is not None and actor.role == Role.PATIENT:
            if request.patient_id != actor.id:
                return OperationResult.failure("Not your request", FORBIDDEN, entity_id=request_id)
            if request.status == ResourceRequestStatus.PAID:
                return OperationResult.failure("Paid requests cannot be cancelled", INVALID, entity_id=request_id)
        return self._transition_request(request_id, ResourceRequestStatus.CANCELLED)
    
    def delete_resource_request(self, request_id: str) -> OperationResult:
        if self.resource_requests.remove(request_id) is None:
            return OperationResult.failure("Resource request not found", NOT_FOUND, entity_id=request_id)
        return OperationResult.success("Resource request deleted", entity_id=request_id)

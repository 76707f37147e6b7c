"""Conversions between store records and remote table rows."""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from app.models import (
    Appointment,
    AppointmentStatus,
    Doctor,
    ResourceRequest,
    ResourceRequestStatus,
    Role,
    User,
)
from app.shared.models import Entity
from app.store.state import (
    APPOINTMENTS_KEY,
    DOCTORS_KEY,
    RESOURCE_REQUESTS_KEY,
    USERS_KEY,
    HospitalStore,
)
from app.sync.remote import Row


PROFILES = "profiles"
DOCTORS = "doctors"
APPOINTMENTS = "appointments"
RESOURCES = "resources"


def _identity(row: Row) -> Dict[str, Any]:
    remote_id = row.get("_id")
    return {"id": row.get("id") or remote_id, "remote_id": remote_id}


def _patient_email(store: HospitalStore, patient_id: str) -> Optional[str]:
    user = store.users.get(patient_id)
    return user.email if user else None


# ============== profiles ==============

def user_to_row(user: User, store: HospitalStore) -> Row:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "phone": user.phone,
        "role": user.role.value.lower(),
        "address": user.address,
        "avatar_url": user.avatar,
        "password": user.password,
    }


def row_to_user(row: Row, store: HospitalStore) -> User:
    return User(
        **_identity(row),
        name=row.get("name") or "",
        email=row.get("email") or "",
        phone=row.get("phone"),
        role=Role.ADMIN if str(row.get("role", "")).lower() == "admin" else Role.PATIENT,
        address=row.get("address"),
        avatar=row.get("avatar_url"),
        password=row.get("password"),
    )


# ============== doctors ==============

def doctor_to_row(doctor: Doctor, store: HospitalStore) -> Row:
    return {
        "id": doctor.id,
        "name": doctor.name,
        "specialty": doctor.specialty,
        "bio": doctor.bio,
        "image": doctor.image,
        "experience": doctor.experience,
        "available_days": list(doctor.available_days),
        "time_slots": list(doctor.time_slots),
    }


def row_to_doctor(row: Row, store: HospitalStore) -> Doctor:
    return Doctor(
        **_identity(row),
        name=row.get("name") or "",
        specialty=row.get("specialty") or "",
        bio=row.get("bio") or "",
        image=row.get("image") or "",
        experience=row.get("experience") or 0,
        available_days=row.get("available_days") or [],
        time_slots=row.get("time_slots") or [],
    )


# ============== appointments ==============

def appointment_to_row(appointment: Appointment, store: HospitalStore) -> Row:
    return {
        "id": appointment.id,
        "patient_id": appointment.patient_id,
        "patient_email": _patient_email(store, appointment.patient_id),
        "patient_name": appointment.patient_name,
        "doctor_id": appointment.doctor_id,
        "doctor_name": appointment.doctor_name,
        "appointment_date": appointment.date,
        "appointment_time": appointment.time,
        "status": appointment.status.value,
        "notes": appointment.notes,
    }


def row_to_appointment(row: Row, store: HospitalStore) -> Appointment:
    doctor_id = row.get("doctor_id")
    if not doctor_id:
        # Rows written by older clients only carry the doctor's name
        doctor = store.doctors.first(lambda d: d.name == row.get("doctor_name"))
        doctor_id = doctor.id if doctor else ""
    
    patient_name = row.get("patient_name")
    if not patient_name:
        patient = store.users.get(row.get("patient_id", ""))
        patient_name = patient.name if patient else row.get("patient_email") or ""
    
    try:
        status = AppointmentStatus(row.get("status") or AppointmentStatus.PENDING.value)
    except ValueError:
        status = AppointmentStatus.PENDING
    
    return Appointment(
        **_identity(row),
        patient_id=row.get("patient_id") or "",
        patient_name=patient_name,
        doctor_id=doctor_id,
        doctor_name=row.get("doctor_name") or "",
        date=row.get("appointment_date") or "",
        time=row.get("appointment_time") or "",
        status=status,
        notes=row.get("notes"),
    )


# ============== resources ==============

def request_to_row(request: ResourceRequest, store: HospitalStore) -> Row:
    return {
        "id": request.id,
        "patient_id": request.patient_id,
        "patient_email": _patient_email(store, request.patient_id),
        "patient_name": request.patient_name,
        "resource_id": request.resource_id,
        "resource_selected": request.type,
        "date": request.date,
        "time": request.time,
        "price": request.price,
        "status": request.status.value,
    }


def row_to_request(row: Row, store: HospitalStore) -> ResourceRequest:
    resource_id = row.get("resource_id")
    if not resource_id:
        resource = store.hospital_resources.first(lambda r: r.name == row.get("resource_selected"))
        resource_id = resource.id if resource else None
    
    try:
        status = ResourceRequestStatus(row.get("status") or ResourceRequestStatus.PENDING.value)
    except ValueError:
        status = ResourceRequestStatus.PENDING
    
    return ResourceRequest(
        **_identity(row),
        patient_id=row.get("patient_id") or "",
        patient_name=row.get("patient_name") or row.get("patient_email") or "",
        resource_id=resource_id,
        type=row.get("resource_selected") or "",
        price=row.get("price") or 0,
        date=row.get("date") or "",
        time=row.get("time"),
        status=status,
    )


@dataclass(frozen=True)
class TableMapping:
    """How one store collection is mirrored to one remote table."""
    table: str
    store_key: str
    to_row: Callable[[Entity, HospitalStore], Row]
    from_row: Callable[[Row, HospitalStore], Entity]
    natural_key: List[str]
    
    def natural_filter(self, row: Row) -> Optional[Row]:
        """Secondary lookup filter, or None when a key column is empty."""
        values = {column: row.get(column) for column in self.natural_key}
        if any(v in (None, "") for v in values.values()):
            return None
        return values


MAPPINGS: Dict[str, TableMapping] = {
    USERS_KEY: TableMapping(PROFILES, USERS_KEY, user_to_row, row_to_user, ["email"]),
    DOCTORS_KEY: TableMapping(DOCTORS, DOCTORS_KEY, doctor_to_row, row_to_doctor, ["name"]),
    APPOINTMENTS_KEY: TableMapping(
        APPOINTMENTS, APPOINTMENTS_KEY, appointment_to_row, row_to_appointment,
        ["patient_id", "appointment_date", "appointment_time"],
    ),
    RESOURCE_REQUESTS_KEY: TableMapping(
        RESOURCES, RESOURCE_REQUESTS_KEY, request_to_row, row_to_request,
        ["patient_id", "resource_selected", "date", "time"],
    ),
}

# Reload order: appointments and requests resolve names against users and doctors
RELOAD_ORDER = [USERS_KEY, DOCTORS_KEY, APPOINTMENTS_KEY, RESOURCE_REQUESTS_KEY]

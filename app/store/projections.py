"""Read-model views computed from the store on every call."""

import math
from typing import Iterable, List, Optional

from pydantic import BaseModel

from app.models import (
    Appointment,
    Doctor,
    HospitalResource,
    ResourceRequest,
    ResourceRequestStatus,
    Role,
    User,
)


CSV_FILENAME = "MediCore_Patients_List.csv"
CSV_HEADERS = ["Name", "Email", "Phone", "Address"]


class ResourceOccupancy(BaseModel):
    """Occupancy of one catalog resource."""
    resource_id: str
    name: str
    type: str
    price: float
    total_stock: int
    occupied: int
    percentage: int


def patients(users: Iterable[User], query: Optional[str] = None) -> List[User]:
    """Patient accounts, optionally filtered by a case-insensitive substring
    of name, email or phone."""
    result = [u for u in users if u.role == Role.PATIENT]
    if not query:
        return result
    
    needle = query.lower()
    return [
        u for u in result
        if needle in u.name.lower()
        or needle in u.email.lower()
        or needle in (u.phone or "").lower()
    ]


def doctors_matching(doctors: Iterable[Doctor], query: Optional[str] = None) -> List[Doctor]:
    """Doctors whose name or specialty contains ``query`` (case-insensitive)."""
    if not query:
        return list(doctors)
    needle = query.lower()
    return [d for d in doctors if needle in d.name.lower() or needle in d.specialty.lower()]


def appointments_for_patient(appointments: Iterable[Appointment], patient_id: str) -> List[Appointment]:
    return [a for a in appointments if a.patient_id == patient_id]


def requests_for_patient(requests: Iterable[ResourceRequest], patient_id: str) -> List[ResourceRequest]:
    return [r for r in requests if r.patient_id == patient_id]


def occupied_count(resource: HospitalResource, requests: Iterable[ResourceRequest]) -> int:
    """Paid requests booked against ``resource``. Pending and cancelled never count."""
    return sum(
        1 for r in requests
        if r.status == ResourceRequestStatus.PAID and r.refers_to(resource)
    )


def occupancy_percentage(occupied: int, total_stock: int) -> int:
    """Whole-number percentage, rounded half up and capped at 100."""
    if total_stock <= 0:
        return 100 if occupied > 0 else 0
    return min(100, math.floor(100 * occupied / total_stock + 0.5))


def resource_occupancy(
    resources: Iterable[HospitalResource],
    requests: Iterable[ResourceRequest],
) -> List[ResourceOccupancy]:
    requests = list(requests)
    rows = []
    for resource in resources:
        occupied = occupied_count(resource, requests)
        rows.append(ResourceOccupancy(
            resource_id=resource.id,
            name=resource.name,
            type=resource.type,
            price=resource.price,
            total_stock=resource.total_stock,
            occupied=occupied,
            percentage=occupancy_percentage(occupied, resource.total_stock),
        ))
    return rows


def resource_display_name(request: ResourceRequest, resources: Iterable[HospitalResource]) -> str:
    """Current catalog name for a request, falling back to the booking-time name."""
    if request.resource_id:
        for resource in resources:
            if resource.id == request.resource_id:
                return resource.name
    return request.type


def _csv_field(value: Optional[str]) -> str:
    return '"' + (value or "").replace('"', '""') + '"'


def patients_csv(patient_list: Iterable[User]) -> str:
    """Patients as CSV: plain header row, every data field quoted, rows joined by newlines."""
    lines = [",".join(CSV_HEADERS)]
    for p in patient_list:
        lines.append(",".join(_csv_field(v) for v in (p.name, p.email, p.phone, p.address)))
    return "\n".join(lines)

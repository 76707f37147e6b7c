"""Hospital resource catalog and resource request models."""

from enum import Enum
from typing import Dict, FrozenSet, Optional

from app.shared.models import Entity


class HospitalResource(Entity):
    """Catalog entry for a bookable resource (bed, oxygen, equipment)."""
    
    name: str
    type: str = "General"  # display styling only
    price: float = 0  # per day
    total_stock: int = 0


class ResourceRequestStatus(str, Enum):
    """Status of a resource request."""
    PENDING = "pending"
    PAID = "paid"
    CANCELLED = "cancelled"


RESOURCE_REQUEST_TRANSITIONS: Dict[ResourceRequestStatus, FrozenSet[ResourceRequestStatus]] = {
    ResourceRequestStatus.PENDING: frozenset({ResourceRequestStatus.PAID, ResourceRequestStatus.CANCELLED}),
    ResourceRequestStatus.PAID: frozenset(),
    ResourceRequestStatus.CANCELLED: frozenset(),
}


class ResourceRequest(Entity):
    """A patient's booking of a hospital resource.
    
    ``resource_id`` is the reference used for occupancy. ``type`` is the
    resource name at booking time, kept for display and for older records
    that were saved before the id was stored.
    """
    
    patient_id: str
    patient_name: str
    resource_id: Optional[str] = None
    type: str
    price: float = 0  # copied from the catalog at booking time
    date: str
    time: Optional[str] = None
    status: ResourceRequestStatus = ResourceRequestStatus.PENDING
    
    def can_transition(self, target: ResourceRequestStatus) -> bool:
        return target in RESOURCE_REQUEST_TRANSITIONS[self.status]
    
    def refers_to(self, resource: HospitalResource) -> bool:
        """Whether this request books the given catalog resource."""
        if self.resource_id:
            return self.resource_id == resource.id
        return self.type == resource.name

# Resources Feature - Service

from typing import Callable, List

from app.features.resources.schemas import ResourceCreate, ResourceRequestCreate, ResourceUpdate
from app.models import ResourceRequest, Role
from app.portal import Portal
from app.shared.schemas import NOT_FOUND, OperationResult
from app.store import projections
from app.store.projections import ResourceOccupancy
from app.store.state import RESOURCE_REQUESTS_KEY


class ResourceService:
    """Service class for the resource catalog and patient resource requests.
    
    The catalog is local only; requests are mirrored to the ``resources`` table.
    """
    
    # ============== Catalog ==============
    
    @staticmethod
    def add_resource(portal: Portal, data: ResourceCreate) -> OperationResult:
        return portal.store.add_resource(data.model_dump())
    
    @staticmethod
    def update_resource(portal: Portal, resource_id: str, data: ResourceUpdate) -> OperationResult:
        previous = portal.store.hospital_resources.get(resource_id)
        if previous is None:
            return OperationResult.failure("Resource not found", NOT_FOUND, entity_id=resource_id)
        return portal.store.update_resource(previous.model_copy(update=data.model_dump(exclude_unset=True)))
    
    @staticmethod
    def delete_resource(portal: Portal, resource_id: str) -> OperationResult:
        return portal.store.delete_resource(resource_id)
    
    @staticmethod
    def occupancy(portal: Portal) -> List[ResourceOccupancy]:
        return projections.resource_occupancy(
            portal.store.hospital_resources, portal.store.resource_requests,
        )
    
    # ============== Requests ==============
    
    @staticmethod
    def list_requests(portal: Portal) -> List[ResourceRequest]:
        """All requests for administrators, own requests for patients."""
        user = portal.session.current_user
        if user is None:
            return []
        if user.role == Role.ADMIN:
            return list(portal.store.resource_requests)
        return projections.requests_for_patient(portal.store.resource_requests, user.id)
    
    @staticmethod
    async def request_resource(portal: Portal, data: ResourceRequestCreate) -> OperationResult:
        result = portal.store.request_resource(
            portal.session, resource_id=data.resource_id, date=data.date, time=data.time,
        )
        if not result.ok:
            return result
        request = portal.store.resource_requests.get(result.entity_id)
        return result.with_warnings(await portal.mirror_create(RESOURCE_REQUESTS_KEY, request))
    
    @staticmethod
    async def _transition(
        portal: Portal,
        request_id: str,
        apply: Callable[[str], OperationResult],
    ) -> OperationResult:
        previous = portal.store.resource_requests.get(request_id)
        result = apply(request_id)
        if not result.ok:
            return result
        
        current = portal.store.resource_requests.get(request_id)
        if previous is None or current is None or current.status == previous.status:
            return result
        return result.with_warnings(await portal.mirror_update(RESOURCE_REQUESTS_KEY, current, previous))
    
    @staticmethod
    async def mark_paid(portal: Portal, request_id: str) -> OperationResult:
        return await ResourceService._transition(
            portal, request_id, portal.store.mark_request_paid,
        )
    
    @staticmethod
    async def cancel(portal: Portal, request_id: str) -> OperationResult:
        actor = portal.session.current_user
        return await ResourceService._transition(
            portal, request_id,
            lambda rid: portal.store.cancel_resource_request(rid, actor=actor),
        )
    
    @staticmethod
    async def delete(portal: Portal, request_id: str) -> OperationResult:
        previous = portal.store.resource_requests.get(request_id)
        result = portal.store.delete_resource_request(request_id)
        if not result.ok:
            return result
        return result.with_warnings(await portal.mirror_delete(RESOURCE_REQUESTS_KEY, previous))

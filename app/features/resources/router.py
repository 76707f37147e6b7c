# Resources Feature - Router

from fastapi import APIRouter, Depends, status

from app.dependencies import get_current_user, get_portal, raise_for_result, require
from app.features.resources.schemas import (
    OccupancyResponse,
    ResourceCreate,
    ResourceListResponse,
    ResourceRequestCreate,
    ResourceRequestListResponse,
    ResourceRequestResultResponse,
    ResourceResultResponse,
    ResourceUpdate,
)
from app.features.resources.service import ResourceService
from app.models import User
from app.portal import Portal
from app.shared.schemas import OperationResult


router = APIRouter(prefix="/resources", tags=["Resources"])
requests_router = APIRouter(prefix="/resource-requests", tags=["Resource Requests"])


# ============== Catalog ==============

@router.get("", response_model=ResourceListResponse)
async def list_resources(
    portal: Portal = Depends(get_portal),
    current_user: User = Depends(get_current_user),
):
    resources = list(portal.store.hospital_resources)
    return ResourceListResponse(resources=resources, total=len(resources))


@router.get("/occupancy", response_model=OccupancyResponse)
async def get_occupancy(
    portal: Portal = Depends(get_portal),
    current_user: User = Depends(get_current_user),
):
    """Paid requests per resource and the percentage of stock in use (capped at 100)."""
    return OccupancyResponse(resources=ResourceService.occupancy(portal))


@router.post("", response_model=ResourceResultResponse, status_code=status.HTTP_201_CREATED)
async def add_resource(
    data: ResourceCreate,
    portal: Portal = Depends(get_portal),
    current_user: User = Depends(require("resources:write")),
):
    result = raise_for_result(ResourceService.add_resource(portal, data))
    return ResourceResultResponse(
        resource=portal.store.hospital_resources.get(result.entity_id),
        message=result.message,
    )


@router.patch("/{resource_id}", response_model=ResourceResultResponse)
async def update_resource(
    resource_id: str,
    data: ResourceUpdate,
    portal: Portal = Depends(get_portal),
    current_user: User = Depends(require("resources:write")),
):
    result = raise_for_result(ResourceService.update_resource(portal, resource_id, data))
    return ResourceResultResponse(
        resource=portal.store.hospital_resources.get(resource_id),
        message=result.message,
    )


@router.delete("/{resource_id}", response_model=ResourceResultResponse)
async def delete_resource(
    resource_id: str,
    portal: Portal = Depends(get_portal),
    current_user: User = Depends(require("resources:write")),
):
    result = raise_for_result(ResourceService.delete_resource(portal, resource_id))
    return ResourceResultResponse(message=result.message)


# ============== Requests ==============

def _request_response(portal: Portal, result: OperationResult) -> ResourceRequestResultResponse:
    return ResourceRequestResultResponse(
        request=portal.store.resource_requests.get(result.entity_id) if result.entity_id else None,
        message=result.message,
        warnings=result.warnings,
    )


@requests_router.get("", response_model=ResourceRequestListResponse)
async def list_requests(
    portal: Portal = Depends(get_portal),
    current_user: User = Depends(get_current_user),
):
    requests = ResourceService.list_requests(portal)
    return ResourceRequestListResponse(requests=requests, total=len(requests))


@requests_router.post("", response_model=ResourceRequestResultResponse, status_code=status.HTTP_201_CREATED)
async def request_resource(
    data: ResourceRequestCreate,
    portal: Portal = Depends(get_portal),
    current_user: User = Depends(require("resource_requests:create")),
):
    """Book a resource. The price is copied from the catalog."""
    result = raise_for_result(await ResourceService.request_resource(portal, data))
    return _request_response(portal, result)


@requests_router.post("/{request_id}/pay", response_model=ResourceRequestResultResponse)
async def mark_paid(
    request_id: str,
    portal: Portal = Depends(get_portal),
    current_user: User = Depends(require("resource_requests:pay")),
):
    result = raise_for_result(await ResourceService.mark_paid(portal, request_id))
    return _request_response(portal, result)


@requests_router.post("/{request_id}/cancel", response_model=ResourceRequestResultResponse)
async def cancel_request(
    request_id: str,
    portal: Portal = Depends(get_portal),
    current_user: User = Depends(require("resource_requests:cancel")),
):
    """Cancel a request. Patients may only cancel their own pending requests."""
    result = raise_for_result(await ResourceService.cancel(portal, request_id))
    return _request_response(portal, result)


@requests_router.delete("/{request_id}", response_model=ResourceRequestResultResponse)
async def delete_request(
    request_id: str,
    portal: Portal = Depends(get_portal),
    current_user: User = Depends(require("resource_requests:delete")),
):
    result = raise_for_result(await ResourceService.delete(portal, request_id))
    return ResourceRequestResultResponse(message=result.message, warnings=result.warnings)

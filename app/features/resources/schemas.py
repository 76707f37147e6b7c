# Resources Feature - Schemas

from typing import List, Optional
from pydantic import BaseModel, Field

from app.models import HospitalResource, ResourceRequest
from app.store.projections import ResourceOccupancy


# ============== Catalog ==============

class ResourceCreate(BaseModel):
    """Schema for adding a catalog resource."""
    name: str = Field(..., min_length=1, max_length=100)
    type: str = Field("General", max_length=50)
    price: float = Field(..., ge=0, description="Price per day")
    total_stock: int = Field(..., ge=0)


class ResourceUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    type: Optional[str] = Field(None, max_length=50)
    price: Optional[float] = Field(None, ge=0)
    total_stock: Optional[int] = Field(None, ge=0)


class ResourceListResponse(BaseModel):
    resources: List[HospitalResource]
    total: int


class OccupancyResponse(BaseModel):
    resources: List[ResourceOccupancy]


class ResourceResultResponse(BaseModel):
    resource: Optional[HospitalResource] = None
    message: Optional[str] = None


# ============== Requests ==============

class ResourceRequestCreate(BaseModel):
    """Request schema for booking a resource."""
    resource_id: str
    date: str = Field(..., min_length=1)
    time: Optional[str] = None


class ResourceRequestListResponse(BaseModel):
    requests: List[ResourceRequest]
    total: int


class ResourceRequestResultResponse(BaseModel):
    request: Optional[ResourceRequest] = None
    message: Optional[str] = None
    warnings: List[str] = Field(default_factory=list)

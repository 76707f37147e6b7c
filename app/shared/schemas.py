from pydantic import BaseModel, Field
from typing import Optional, Any, Dict, List


NOT_FOUND = "not_found"
CONFLICT = "conflict"
INVALID = "invalid"
UNAUTHENTICATED = "unauthenticated"
FORBIDDEN = "forbidden"
UNAVAILABLE = "unavailable"


class OperationResult(BaseModel):
    """Outcome of a store or service mutation.
    
    ``ok`` reflects the local mutation only. Remote mirroring problems are
    reported in ``warnings`` and never flip ``ok``.
    """
    
    ok: bool = True
    message: Optional[str] = None
    reason: Optional[str] = None  # see the constants above
    entity_id: Optional[str] = None
    warnings: List[str] = Field(default_factory=list)
    
    @classmethod
    def success(cls, message: Optional[str] = None, entity_id: Optional[str] = None) -> "OperationResult":
        return cls(ok=True, message=message, entity_id=entity_id)
    
    @classmethod
    def failure(
        cls,
        message: str,
        reason: str = INVALID,
        entity_id: Optional[str] = None,
    ) -> "OperationResult":
        return cls(ok=False, message=message, reason=reason, entity_id=entity_id)
    
    def with_warnings(self, warnings: List[str]) -> "OperationResult":
        self.warnings.extend(warnings)
        return self


class BaseResponse(BaseModel):
    """Base response model."""
    
    success: bool = True
    message: Optional[str] = None
    warnings: List[str] = Field(default_factory=list)
    data: Optional[Any] = None


class ErrorResponse(BaseModel):
    """Error response model."""
    
    success: bool = False
    message: str
    detail: Optional[Dict[str, Any]] = None

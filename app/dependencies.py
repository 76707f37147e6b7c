"""
Shared dependencies across the application.

The portal lives on ``app.state``; routes reach it (and the signed-in user)
through these dependency functions.
"""

from typing import Callable

from fastapi import Depends, Request

from app.models import User
from app.portal import Portal
from app.shared.exceptions import (
    BadRequestException,
    ConflictException,
    CredentialsException,
    ForbiddenException,
    NotFoundException,
    ServiceUnavailableException,
)
from app.shared.schemas import (
    CONFLICT,
    FORBIDDEN,
    NOT_FOUND,
    UNAUTHENTICATED,
    UNAVAILABLE,
    OperationResult,
)


def get_portal(request: Request) -> Portal:
    """Dependency returning the portal context of this application."""
    return request.app.state.portal


def get_current_user(portal: Portal = Depends(get_portal)) -> User:
    """
    Dependency to get the signed-in user.
    
    The portal holds a single session for the whole process: whoever signed
    in last is the current user for every caller. Role checks built on it
    are advisory; run one process per operator, or put real per-request
    authentication in front, before exposing the API to several clients.
    
    Raises:
        CredentialsException: If nobody is signed in
    """
    user = portal.session.current_user
    if user is None:
        raise CredentialsException("Not signed in")
    return user


def require(capability: str) -> Callable[..., User]:
    """Dependency factory gating a route on a role capability."""
    
    def checker(
        portal: Portal = Depends(get_portal),
        current_user: User = Depends(get_current_user),
    ) -> User:
        if not portal.session.can(capability):
            raise ForbiddenException(f"{current_user.role.value.title()} accounts cannot do this")
        return current_user
    
    return checker


_FAILURES = {
    NOT_FOUND: NotFoundException,
    CONFLICT: ConflictException,
    UNAUTHENTICATED: CredentialsException,
    FORBIDDEN: ForbiddenException,
    UNAVAILABLE: ServiceUnavailableException,
}


def raise_for_result(result: OperationResult) -> OperationResult:
    """Turn a failed outcome into the matching HTTP exception."""
    if result.ok:
        return result
    exception = _FAILURES.get(result.reason, BadRequestException)
    raise exception(result.message or "Request failed")

from fastapi import APIRouter, Depends, status

from app.dependencies import get_current_user, get_portal, raise_for_result, require
from app.features.auth.schemas import (
    LoginRequest,
    MessageResponse,
    SessionResponse,
    SignupRequest,
    UpdateProfileRequest,
    UserResponse,
)
from app.features.auth.service import AuthService
from app.models import User
from app.portal import Portal


router = APIRouter(prefix="/auth", tags=["Authentication"])


def _session_response(portal: Portal, warnings) -> SessionResponse:
    return SessionResponse(
        user=UserResponse.from_user(portal.session.current_user),
        warnings=warnings,
    )


@router.post("/signup", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def signup(signup_data: SignupRequest, portal: Portal = Depends(get_portal)):
    """
    Register a new account and sign it in.
    
    - **phone**: any formatting; exactly 10 digits required
    - **role**: ADMIN or PATIENT (address is only kept for patients)
    """
    result = raise_for_result(await AuthService.signup(portal, signup_data))
    return _session_response(portal, result.warnings)


@router.post("/login", response_model=SessionResponse)
async def login(login_data: LoginRequest, portal: Portal = Depends(get_portal)):
    """Sign in with email and password."""
    result = raise_for_result(
        await AuthService.login(portal, str(login_data.email), login_data.password)
    )
    return _session_response(portal, result.warnings)


@router.post("/logout", response_model=MessageResponse)
async def logout(portal: Portal = Depends(get_portal)):
    """Sign out. Stored data is kept."""
    AuthService.logout(portal)
    return MessageResponse(message="Signed out")


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: User = Depends(get_current_user)):
    """Get the signed-in user."""
    return UserResponse.from_user(current_user)


@router.put("/me", response_model=SessionResponse)
async def update_me(
    request: UpdateProfileRequest,
    portal: Portal = Depends(get_portal),
    current_user: User = Depends(require("profile:write")),
):
    """Update name, phone, address or avatar of the signed-in user."""
    result = raise_for_result(await AuthService.update_profile(portal, request))
    return _session_response(portal, result.warnings)


@router.delete("/me", response_model=MessageResponse)
async def delete_me(
    portal: Portal = Depends(get_portal),
    current_user: User = Depends(require("account:delete")),
):
    """Delete the signed-in patient account. Its appointments are cancelled."""
    result = raise_for_result(await AuthService.delete_account(portal))
    return MessageResponse(message="Account deleted", warnings=result.warnings)

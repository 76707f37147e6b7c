from typing import Dict, List, Optional

from app.core.logging import logger
from app.features.auth.schemas import SignupRequest, UpdateProfileRequest
from app.models import Appointment, AppointmentStatus, User
from app.portal import Portal
from app.shared.exceptions import RemoteSyncError
from app.shared.schemas import NOT_FOUND, UNAUTHENTICATED, UNAVAILABLE, OperationResult
from app.store.state import APPOINTMENTS_KEY, INVALID_CREDENTIALS, USERS_KEY


class AuthService:
    """Authentication and account service."""
    
    @staticmethod
    async def signup(portal: Portal, signup_data: SignupRequest) -> OperationResult:
        """Create an account locally, sign it in, then mirror the profile."""
        result = portal.store.signup(portal.session, signup_data.to_user_data())
        if not result.ok:
            return result
        
        user = portal.store.users.get(result.entity_id)
        return result.with_warnings(await portal.mirror_create(USERS_KEY, user))
    
    @staticmethod
    async def login(portal: Portal, email: str, password: str) -> OperationResult:
        """
        Sign in by exact email and password match.
        
        With a remote store configured, the credentials are checked there
        first and a matching profile unknown to this client is imported.
        """
        if portal.sync is None:
            return portal.store.login(portal.session, email, password)
        
        try:
            profile = await portal.sync.fetch_profile(email, password)
        except RemoteSyncError as e:
            logger.error(f"Remote login check failed: {e}")
            return OperationResult.failure("Something went wrong. Try again.", UNAVAILABLE)
        
        if profile is None:
            logger.info("Remote login rejected")
            return OperationResult.failure(INVALID_CREDENTIALS, UNAUTHENTICATED)
        
        result = portal.store.login(portal.session, email, password)
        if result.ok:
            portal.store.attach_remote_id(USERS_KEY, result.entity_id, profile.remote_id)
            return result
        
        local = portal.store.users.first(lambda u: u.email == email)
        if local is None:
            return portal.store.import_user(portal.session, profile)
        
        # Known locally under another password: the remote profile wins
        refreshed = local.model_copy(update={"password": password, "remote_id": profile.remote_id})
        portal.store.update_user(portal.session, refreshed)
        return portal.store.login(portal.session, email, password)
    
    @staticmethod
    def logout(portal: Portal) -> OperationResult:
        return portal.store.logout(portal.session)
    
    @staticmethod
    async def update_profile(portal: Portal, request: UpdateProfileRequest) -> OperationResult:
        """Update the signed-in user's contact fields and avatar."""
        current = portal.session.current_user
        if current is None:
            return OperationResult.failure("Not signed in", UNAUTHENTICATED)
        previous = portal.store.users.get(current.id)
        if previous is None:
            return OperationResult.failure("User not found", NOT_FOUND)
        
        changes = request.model_dump(exclude_unset=True)
        updated = previous.model_copy(update=changes)
        result = portal.store.update_user(portal.session, updated)
        if not result.ok:
            return result
        return result.with_warnings(await portal.mirror_update(USERS_KEY, updated, previous))
    
    @staticmethod
    def _open_appointments(portal: Portal, user_id: str) -> Dict[str, Appointment]:
        return {
            a.id: a for a in portal.store.appointments.find(
                lambda a: a.patient_id == user_id and a.status != AppointmentStatus.CANCELLED
            )
        }
    
    @staticmethod
    async def _mirror_removal(portal: Portal, user: User, affected: Dict[str, Appointment]) -> List[str]:
        warnings = await portal.mirror_delete(USERS_KEY, user)
        for appointment_id, before in affected.items():
            after = portal.store.appointments.get(appointment_id)
            if after is not None:
                warnings += await portal.mirror_update(APPOINTMENTS_KEY, after, before)
        return warnings
    
    @staticmethod
    async def delete_user(portal: Portal, user_id: str) -> OperationResult:
        """Administrative delete: removes the account and cancels its appointments."""
        user = portal.store.users.get(user_id)
        affected = AuthService._open_appointments(portal, user_id)
        result = portal.store.delete_user(user_id)
        if not result.ok:
            return result
        return result.with_warnings(await AuthService._mirror_removal(portal, user, affected))
    
    @staticmethod
    async def delete_account(portal: Portal) -> OperationResult:
        """Self-deletion, which also signs the user out."""
        current: Optional[User] = portal.session.current_user
        if current is None:
            return OperationResult.failure("Not signed in", UNAUTHENTICATED)
        
        user = portal.store.users.get(current.id) or current
        affected = AuthService._open_appointments(portal, current.id)
        result = portal.store.delete_account(portal.session)
        if not result.ok:
            return result
        return result.with_warnings(await AuthService._mirror_removal(portal, user, affected))

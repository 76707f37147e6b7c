"""External services used by the portal."""

from app.services.assistant_service import AssistantService

__all__ = ["AssistantService"]

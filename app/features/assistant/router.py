# Assistant Feature - Router

from fastapi import APIRouter, Depends, Request

from app.dependencies import require
from app.features.assistant.schemas import AskRequest, AssistantResponse, BioRequest
from app.models import User
from app.services.assistant_service import AssistantService


router = APIRouter(prefix="/assistant", tags=["Assistant"])


def get_assistant(request: Request) -> AssistantService:
    return request.app.state.assistant


@router.post("/doctor-bio", response_model=AssistantResponse)
async def generate_doctor_bio(
    data: BioRequest,
    assistant: AssistantService = Depends(get_assistant),
    current_user: User = Depends(require("assistant:bio")),
):
    """Draft a short doctor biography for the add/edit doctor form."""
    return AssistantResponse(text=await assistant.generate_doctor_bio(data.name, data.specialty))


@router.post("/ask", response_model=AssistantResponse)
async def ask(
    data: AskRequest,
    assistant: AssistantService = Depends(get_assistant),
    current_user: User = Depends(require("assistant:ask")),
):
    """Answer a patient's health question (not medical advice)."""
    return AssistantResponse(text=await assistant.ask_health_assistant(data.query))

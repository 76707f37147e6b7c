# Assistant Feature - Schemas

from pydantic import BaseModel, Field


class BioRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    specialty: str = Field(..., min_length=1, max_length=100)


class AskRequest(BaseModel):
    query: str = Field(..., min_length=1, max_length=2000)


class AssistantResponse(BaseModel):
    text: str

"""OpenAI text generation for doctor bios and the patient health assistant."""

from typing import Optional

from openai import AsyncOpenAI, OpenAIError

from app.config import settings
from app.core.logging import get_logger

logger = get_logger("assistant")

DEFAULT_BIO = "Experienced specialist dedicated to patient care."
UNAVAILABLE_ANSWER = "AI Service unavailable. Please check API Key."
FAILED_ANSWER = "I'm sorry, I cannot answer that right now."


class AssistantService:
    """Service for short generated texts. Never touches the store.
    
    Every method returns usable text: without an API key, or when the call
    fails, a fixed fallback is returned instead.
    """
    
    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None):
        api_key = settings.OPENAI_API_KEY if api_key is None else api_key
        self.model = model or settings.OPENAI_MODEL
        self.client = AsyncOpenAI(api_key=api_key) if api_key else None
        if self.client is None:
            logger.warning("OPENAI_API_KEY is missing; assistant will use fallback text")
    
    async def _complete(self, prompt: str) -> str:
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            max_tokens=300,
        )
        return (response.choices[0].message.content or "").strip()
    
    async def generate_doctor_bio(self, name: str, specialty: str) -> str:
        """Two-sentence professional biography for a doctor."""
        if self.client is None:
            return DEFAULT_BIO
        
        prompt = (
            f"Write a professional, short (2 sentences) biography for a doctor named {name} "
            f"who specializes in {specialty}. Tone: Trustworthy and skilled."
        )
        try:
            text = await self._complete(prompt)
        except OpenAIError as e:
            logger.error(f"Bio generation failed: {e}")
            return f"Specialist in {specialty} with a focus on patient well-being."
        return text or DEFAULT_BIO
    
    async def ask_health_assistant(self, query: str) -> str:
        """Brief answer to a patient's health question, with a disclaimer."""
        if self.client is None:
            return UNAVAILABLE_ANSWER
        
        prompt = (
            "You are a helpful medical assistant in a hospital app. Answer this query briefly "
            f'and professionally: "{query}". Always include a disclaimer that this is not '
            "professional medical advice."
        )
        try:
            text = await self._complete(prompt)
        except OpenAIError as e:
            logger.error(f"Health assistant failed: {e}")
            return FAILED_ANSWER
        return text or FAILED_ANSWER

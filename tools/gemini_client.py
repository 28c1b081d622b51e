import logging
from typing import Optional

from google import genai
from google.genai import errors, types

logger = logging.getLogger(__name__)


def is_rate_limited(error: Exception) -> bool:
    """True for quota errors, which should move on to the next model instead of retrying."""
    if isinstance(error, errors.APIError) and error.code == 429:
        return True
    message = str(error)
    return "429" in message or "RESOURCE_EXHAUSTED" in message or "rate limit" in message.lower()


class GeminiClient:
    """Async access to Gemini for multimodal and text generation."""

    def __init__(self, api_key: str, client: Optional[genai.Client] = None):
        self.api_key = api_key
        self._client = client

    @property
    def configured(self) -> bool:
        return self._client is not None or bool(self.api_key)

    @property
    def client(self) -> genai.Client:
        if self._client is None:
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    async def generate_from_image(self, model: str, prompt: str, image: bytes, mime_type: str) -> str:
        response = await self.client.aio.models.generate_content(
            model=model,
            contents=[types.Part.from_bytes(data=image, mime_type=mime_type), prompt],
            config=types.GenerateContentConfig(
                response_mime_type="application/json",
                temperature=0.2,
            ),
        )
        return response.text or ""

    async def generate_text(self, model: str, prompt: str, system_instruction: Optional[str] = None) -> str:
        response = await self.client.aio.models.generate_content(
            model=model,
            contents=prompt,
            config=types.GenerateContentConfig(
                system_instruction=system_instruction,
                temperature=0.7,
                max_output_tokens=300,
            ),
        )
        return (response.text or "").strip()

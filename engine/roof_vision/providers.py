import json
import logging
import re
from typing import Any, Dict

from engine.errors import VisionAnalysisError
from models.schemas import RoofImage
from tools.gemini_client import GeminiClient

logger = logging.getLogger(__name__)

JSON_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")


def parse_json_object(text: str) -> Dict[str, Any]:
    """Pull the first JSON object out of a model reply, tolerating markdown fences and prose."""
    match = JSON_OBJECT_PATTERN.search(text or "")
    if not match:
        raise VisionAnalysisError("Vision model reply contains no JSON object", service="vision")
    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise VisionAnalysisError(f"Vision model returned invalid JSON: {e}", service="vision") from e
    if not isinstance(parsed, dict):
        raise VisionAnalysisError("Vision model reply is not a JSON object", service="vision")
    return parsed


class GeminiVisionProvider:
    """One model in the vision chain. Returns the raw parsed reply; sanitising happens upstream."""

    def __init__(self, client: GeminiClient, model_name: str):
        self.client = client
        self.model_name = model_name

    async def analyze(self, image: RoofImage, prompt: str) -> Dict[str, Any]:
        logger.info(f"[{self.model_name}] Sending {len(image.data)} byte {image.mime_type} image")
        text = await self.client.generate_from_image(self.model_name, prompt, image.data, image.mime_type)
        return parse_json_object(text)

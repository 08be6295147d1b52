"""Gemini 2.5 Flash for structured scene analysis."""

import io
import json
import logging
import re
from typing import Optional

from pydantic import ValidationError

from soundscape.config import GEMINI_MODEL, GOOGLE_API_KEY, SCENE_ANALYSIS_PROMPT
from soundscape.errors import VisionFailed, VisionUnconfigured
from soundscape.models import SceneDescription

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$")


def parse_scene_reply(text: str) -> SceneDescription:
    """Strict parse of the model's JSON reply. Anything off raises VisionFailed."""
    if not text or not text.strip():
        raise VisionFailed("Empty reply from vision model")
    json_text = _FENCE_RE.sub("", text.strip())
    try:
        data = json.loads(json_text)
    except json.JSONDecodeError as e:
        raise VisionFailed(f"Vision reply is not JSON: {e}") from e
    if not isinstance(data, dict):
        raise VisionFailed("Vision reply is not a JSON object")
    try:
        return SceneDescription.model_validate(data)
    except ValidationError as e:
        raise VisionFailed(f"Vision reply failed validation: {e.error_count()} errors") from e


class GeminiClient:
    """Scene analysis via Gemini. Satisfies the SceneAnalyzer contract."""

    def __init__(self, api_key: Optional[str] = None, model: str = GEMINI_MODEL):
        self.api_key = api_key if api_key is not None else GOOGLE_API_KEY
        self.model_name = model
        self._client = None
        if self.api_key:
            import google.generativeai as genai
            genai.configure(api_key=self.api_key)
            self._client = genai.GenerativeModel(model)

    def is_configured(self) -> bool:
        return self._client is not None

    async def analyze(self, image_bytes: bytes) -> SceneDescription:
        """JPEG bytes -> validated SceneDescription."""
        if not self._client:
            raise VisionUnconfigured("Google API key not configured")
        try:
            from PIL import Image
            img = Image.open(io.BytesIO(image_bytes))
            response = await self._client.generate_content_async([SCENE_ANALYSIS_PROMPT, img])
            text = response.text
        except Exception as e:
            logger.error("Gemini analysis error: %s", e)
            raise VisionFailed("Vision analysis failed") from e

        scene = parse_scene_reply(text)
        logger.debug("📸 Scene: %s", scene.model_dump_json())
        return scene

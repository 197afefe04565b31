"""
Gemini structured generation and Imagen cover images.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from notion_forge.errors import ConfigurationError, GenerationError
from notion_forge.settings import Settings, get_settings

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


FENCE = re.compile(r"```(?:json)?\s*(.*?)\s*```", re.DOTALL | re.IGNORECASE)


def parse_candidate_json(raw: str) -> dict | None:
    """Recover a JSON object from model text: fenced, bare, or embedded in prose."""
    fenced = FENCE.search(raw)
    text = fenced.group(1) if fenced else raw.strip()
    candidates = [text]
    if "{" in text and "}" in text:
        candidates.append(text[text.index("{") : text.rindex("}") + 1])
    for candidate in candidates:
        try:
            data = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(data, dict):
            return data
    return None


def _response_text(resp) -> str | None:
    if getattr(resp, "text", None):
        return resp.text
    for cand in getattr(resp, "candidates", None) or []:
        for part in getattr(getattr(cand, "content", None), "parts", None) or []:
            if getattr(part, "text", None):
                return part.text
    return None


def coerce_response(resp, schema: Type[T]) -> Optional[T]:
    """Turn a generate_content response into a `schema` instance, or None."""
    parsed = getattr(resp, "parsed", None)
    if isinstance(parsed, schema):
        return parsed
    raw = _response_text(resp)
    if not raw:
        logger.warning("Gemini returned no content | schema=%s", schema.__name__)
        return None
    data = parse_candidate_json(raw)
    if data is None:
        logger.error("Gemini output missing JSON block. Snippet: %s", raw[:200])
        return None
    try:
        return schema.model_validate(data)
    except ValidationError as e:
        logger.warning("Gemini output failed %s validation: %s", schema.__name__, e)
        return None


class GeminiGenerator:
    """Generation backend: structured records via Gemini, images via Imagen.

    Each call is a single attempt; callers decide whether a missing result
    is fatal.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.5-flash",
        image_model: str = "imagen-4.0-generate-001",
    ):
        self.api_key = api_key
        self.model = model
        self.image_model = image_model
        self._client = None

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "GeminiGenerator":
        settings = settings or get_settings()
        if not settings.GEMINI_API_KEY:
            raise ConfigurationError("GEMINI_API_KEY")
        return cls(settings.GEMINI_API_KEY, settings.GEMINI_MODEL, settings.GEMINI_IMAGE_MODEL)

    @property
    def client(self):
        if self._client is None:
            # Lazy import to avoid hard dependency at module import time during tests
            from google import genai

            self._client = genai.Client(api_key=self.api_key)
        return self._client

    def generate_structured(self, input: str, instructions: str, schema: Type[T]) -> Optional[T]:
        from google.genai import errors, types

        logger.info("Generating %s | model=%s input_chars=%d", schema.__name__, self.model, len(input))
        try:
            resp = self.client.models.generate_content(
                model=self.model,
                contents=input,
                config=types.GenerateContentConfig(
                    system_instruction=instructions,
                    response_mime_type="application/json",
                    response_schema=schema,
                ),
            )
        except errors.APIError as e:
            raise GenerationError(f"Gemini request failed: {e}") from e
        result = coerce_response(resp, schema)
        if result is not None:
            logger.debug(
                "Generated %s: %s",
                schema.__name__,
                json.dumps(result.model_dump(), ensure_ascii=False, indent=2),
            )
        return result

    def generate_image(self, prompt: str) -> bytes:
        from google.genai import errors, types

        logger.info("Generating image | model=%s", self.image_model)
        try:
            resp = self.client.models.generate_images(
                model=self.image_model,
                prompt=prompt,
                config=types.GenerateImagesConfig(number_of_images=1),
            )
        except errors.APIError as e:
            raise GenerationError(f"Image generation failed: {e}") from e
        images = getattr(resp, "generated_images", None) or []
        image = images[0].image if images else None
        if image is None or not image.image_bytes:
            raise GenerationError("Image model returned no image bytes")
        return image.image_bytes

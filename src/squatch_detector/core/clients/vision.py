"""OpenAI vision client.

API docs: https://platform.openai.com/docs/api-reference/chat/create
Sends one image with a fixed prompt and asks for a strict JSON description
that the scoring engine understands.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from ..models import AnalysisRecord
from ..parsing import parse_analysis_response

logger = logging.getLogger(__name__)

API_BASE = "https://api.openai.com/v1"
DEFAULT_MODEL = "gpt-4o"
DEFAULT_MAX_TOKENS = 500
DEFAULT_TIMEOUT_SECONDS = 30.0

VISION_PROMPT = """Analyze this image for potential Bigfoot/Sasquatch detection. Respond with ONLY valid JSON (no markdown, no explanation). Use this exact structure:
{
  "environment": "forest|indoor|urban|outdoor|woods|etc",
  "blurry": 0-10,
  "humanoid": true|false,
  "humanoidSquatchLike": true|false,
  "wearingClothes": true|false,
  "hairyOrFurry": true|false,
  "knownPrimate": true|false,
  "primateType": "orangutan|gorilla|chimpanzee|monkey|gibbon|baboon|none",
  "animal": true|false,
  "animalType": "bear|deer|nothing|etc if animal detected",
  "lighting": "low|medium|bright|well-lit|dark",
  "objectsDetected": ["list", "of", "objects"],
  "creatureConfidence": 0-1,
  "description": "brief one-line description",
  "operatorProfileMatch": true|false
}

IMPORTANT: humanoidSquatchLike = true ONLY if the figure looks ape-like, hairy, unclothed, or cryptid-like, NOT a normal clothed person. wearingClothes = true if the humanoid figure is wearing shirts, pants, jackets, hats, etc. A regular hiker in a forest should have wearingClothes=true and humanoidSquatchLike=false.

knownPrimate = true if the image clearly shows a real, identifiable primate species (orangutan, gorilla, chimpanzee, monkey, gibbon, baboon). Set primateType to the species.

CRITICAL: operatorProfileMatch = true ONLY if the image shows a man who appears to be in his early 60s (approximately 60-65 years old) with whitish-blonde or blonde hair and white/Caucasian ethnicity. This must match all these traits. Do NOT set true for other men, younger people, or different hair/ethnicity."""


@dataclass(frozen=True)
class VisionResult:
    """Raw model reply plus the record parsed from it."""

    raw_content: str
    analysis: AnalysisRecord


def build_request_payload(
    image_b64: str,
    media_type: str = "image/jpeg",
    model: str = DEFAULT_MODEL,
    max_tokens: int = DEFAULT_MAX_TOKENS,
) -> dict:
    """Build a chat completions request carrying the prompt and one inline image."""
    return {
        "model": model,
        "max_tokens": max_tokens,
        "messages": [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": VISION_PROMPT},
                    {
                        "type": "image_url",
                        "image_url": {"url": f"data:{media_type or 'image/jpeg'};base64,{image_b64}"},
                    },
                ],
            }
        ],
    }


def _first_message_content(data: dict) -> str:
    choices = data.get("choices") or []
    if not choices:
        return "{}"
    message = choices[0].get("message") or {}
    content = message.get("content")
    if not isinstance(content, str):
        return "{}"
    return content.strip() or "{}"


async def analyze_image(
    api_key: str,
    image_b64: str,
    media_type: str = "image/jpeg",
    *,
    model: str = DEFAULT_MODEL,
    max_tokens: int = DEFAULT_MAX_TOKENS,
    api_base: str = API_BASE,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> VisionResult:
    """Describe an image with the vision model.

    Args:
        api_key: OpenAI API key.
        image_b64: Base64-encoded image bytes.
        media_type: MIME type of the image, e.g. 'image/png'.
        model: Vision-capable chat model.
        max_tokens: Reply token cap.
        api_base: Base URL of an OpenAI-compatible API.
        timeout: Overall request timeout in seconds.
        transport: Optional httpx transport (used by tests).

    Raises:
        httpx.HTTPStatusError: The API answered with an error status.
    """
    payload = build_request_payload(image_b64, media_type, model, max_tokens)
    headers = {"Authorization": f"Bearer {api_key}"}
    url = f"{api_base.rstrip('/')}/chat/completions"

    logger.info("Calling vision model %s (base64 length %d)", model, len(image_b64))
    async with httpx.AsyncClient(timeout=httpx.Timeout(timeout, connect=10.0), transport=transport) as client:
        response = await client.post(url, json=payload, headers=headers)
        response.raise_for_status()
        data = response.json()

    content = _first_message_content(data)
    logger.info("Vision response received (%d chars)", len(content))
    return VisionResult(raw_content=content, analysis=parse_analysis_response(content))

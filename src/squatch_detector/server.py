"""Squatch Detector MCP Server.

FastMCP server with image analysis, scoring, and progress-message tools.
Run: squatch-detector-mcp
"""

from __future__ import annotations

import base64
import binascii
import logging
import os
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import httpx
from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations

from . import __version__
from .core.clients import vision
from .core.models import AnalysisRecord, ScoreReport
from .core.progress import PROGRESS_MESSAGES, progress_message
from .core.scoring import generate_report, score_contributions

logger = logging.getLogger(__name__)

READ_ONLY = ToolAnnotations(readOnlyHint=True, destructiveHint=False, idempotentHint=True, openWorldHint=False)
VISION_CALL = ToolAnnotations(readOnlyHint=True, destructiveHint=False, idempotentHint=False, openWorldHint=True)


@asynccontextmanager
async def lifespan(server: FastMCP) -> AsyncIterator[None]:
    """Configure logging for the server process."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    logger.info("Squatch Detector %s starting", __version__)
    yield


mcp = FastMCP(
    "Squatch Detector",
    instructions="Analyze a photo for Bigfoot/Sasquatch evidence. Returns a 0-100 Squatch score and a scientific-sounding verdict.",
    lifespan=lifespan,
)


# ─── Configuration ───────────────────────────────────────────────────────────


def _get_openai_key() -> str:
    key = os.environ.get("OPENAI_API_KEY", "")
    if not key:
        raise ValueError("OPENAI_API_KEY environment variable is required. Set it and restart the server.")
    return key


def _vision_settings() -> dict:
    """Vision client overrides from the environment."""
    return {
        "model": os.environ.get("SQUATCH_VISION_MODEL", vision.DEFAULT_MODEL),
        "max_tokens": int(os.environ.get("SQUATCH_VISION_MAX_TOKENS", str(vision.DEFAULT_MAX_TOKENS))),
        "timeout": float(os.environ.get("SQUATCH_VISION_TIMEOUT", str(vision.DEFAULT_TIMEOUT_SECONDS))),
        "api_base": os.environ.get("OPENAI_API_BASE", vision.API_BASE),
    }


def _decode_image(image_base64: str) -> bytes:
    data = image_base64.strip()
    # Accept full data URLs as well as bare base64
    if data.startswith("data:") and "," in data:
        data = data.split(",", 1)[1]
    try:
        raw = base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError("image_base64 is not valid base64 image data") from exc
    if not raw:
        raise ValueError("image_base64 is empty. Please provide an image (JPEG, PNG, etc.)")
    return raw


def _report_payload(analysis: AnalysisRecord, report: ScoreReport) -> dict:
    contributions = [] if report.is_override_match else score_contributions(analysis)
    return {
        "analysis": analysis.to_wire(),
        **report.to_wire(),
        "contributions": [{"rule": name, "delta": delta} for name, delta in contributions],
        "summary": _report_summary(report),
    }


def _report_summary(report: ScoreReport) -> str:
    if report.is_override_match:
        return f"Squatch score {report.score}/100. {report.verdict}"
    return f"Squatch score {report.score}/100 — {report.verdict}."


# ─── Tool 1: Analyze Image ───────────────────────────────────────────────────


@mcp.tool(annotations=VISION_CALL)
async def squatch_analyze_image(image_base64: str, media_type: str = "image/jpeg") -> dict:
    """Analyze a photo for Squatch evidence with the vision model, then score it.

    Args:
        image_base64: Base64-encoded image bytes (a data: URL is also accepted).
        media_type: Image MIME type, e.g. 'image/jpeg' or 'image/png'. Default 'image/jpeg'.
    """
    logger.info("Analyze request received (media type %s)", media_type)
    if not media_type or not media_type.startswith("image/"):
        raise ValueError("Please upload an image file (JPEG, PNG, etc.)")

    raw = _decode_image(image_base64)
    api_key = _get_openai_key()
    encoded = base64.b64encode(raw).decode("ascii")
    logger.info("Image decoded: %d bytes", len(raw))

    try:
        result = await vision.analyze_image(api_key, encoded, media_type, **_vision_settings())
    except httpx.HTTPStatusError as exc:
        logger.error("Vision API returned status %s: %s", exc.response.status_code, exc.response.text[:200])
        raise
    except httpx.HTTPError as exc:
        logger.error("Vision API request failed: %s", exc)
        raise

    report = generate_report(result.analysis)
    logger.info("Squatch report: score=%d override=%s", report.score, bool(report.is_override_match))
    return _report_payload(result.analysis, report)


# ─── Tool 2: Score Analysis ──────────────────────────────────────────────────


@mcp.tool(annotations=READ_ONLY)
async def squatch_score_analysis(analysis: Optional[dict] = None) -> dict:
    """Score an existing image analysis without calling the vision model.

    Args:
        analysis: Analysis object using the vision JSON keys (environment, blurry,
            humanoid, humanoidSquatchLike, wearingClothes, hairyOrFurry, knownPrimate,
            primateType, animal, animalType, lighting, objectsDetected,
            creatureConfidence, description, operatorProfileMatch). All optional.
    """
    record = AnalysisRecord.from_payload(analysis or {})
    return _report_payload(record, generate_report(record))


# ─── Tool 3: Progress Message ────────────────────────────────────────────────


@mcp.tool(annotations=READ_ONLY)
async def squatch_progress_message(index: int = 0) -> dict:
    """Progress message for the given tick while an analysis is running.

    Args:
        index: Non-negative tick counter. Messages repeat every cycle_length ticks.
    """
    if index < 0:
        raise ValueError("index must be non-negative")
    return {
        "index": index,
        "message": progress_message(index),
        "cycle_length": len(PROGRESS_MESSAGES),
    }


# ─── Tool 4: Health ──────────────────────────────────────────────────────────


@mcp.tool(annotations=READ_ONLY)
async def squatch_health() -> dict:
    """Report whether the server is configured to call the vision model."""
    return {
        "ok": True,
        "api_key_set": bool(os.environ.get("OPENAI_API_KEY")),
        "model": os.environ.get("SQUATCH_VISION_MODEL", vision.DEFAULT_MODEL),
        "version": __version__,
    }


def main():
    """Entry point for the CLI command."""
    mcp.run()


if __name__ == "__main__":
    main()

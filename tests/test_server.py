"""MCP tool tests — tools called directly, vision client mocked.

Invariants:
    - squatch_score_analysis never fails, whatever the analysis payload
    - squatch_analyze_image validates input before calling the vision model
    - the override report carries no rule contributions
"""

import base64

import pytest

from squatch_detector import server
from squatch_detector.core.clients import vision
from squatch_detector.core.models import AnalysisRecord

IMAGE_B64 = base64.b64encode(b"\xff\xd8\xff\xe0fake-jpeg").decode("ascii")


@pytest.fixture
def fake_vision(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test-fake-key")
    monkeypatch.delenv("SQUATCH_VISION_MODEL", raising=False)
    calls = []

    async def _analyze(api_key, image_b64, media_type="image/jpeg", **kwargs):
        calls.append({"api_key": api_key, "image_b64": image_b64, "media_type": media_type, **kwargs})
        analysis = AnalysisRecord.model_validate({"environment": "forest", "blurry": 9, "humanoidSquatchLike": True})
        return vision.VisionResult(raw_content="{}", analysis=analysis)

    monkeypatch.setattr(vision, "analyze_image", _analyze)
    return calls


# --- squatch_score_analysis ---------------------------------------------------

@pytest.mark.asyncio
async def test_score_empty_analysis():
    result = await server.squatch_score_analysis({})
    assert result["score"] == 10
    assert result["verdict"] == "Definitely not a Squatch"
    assert result["contributions"] == []
    assert "isOverrideMatch" not in result
    assert "easterEgg" not in result


@pytest.mark.asyncio
async def test_score_none_analysis():
    result = await server.squatch_score_analysis(None)
    assert result["score"] == 10


@pytest.mark.asyncio
async def test_score_reports_contributions():
    result = await server.squatch_score_analysis({"environment": "forest", "wearingClothes": True})
    assert result["score"] == 0
    assert result["contributions"] == [
        {"rule": "environment", "delta": 15},
        {"rule": "clothing", "delta": -50},
    ]
    assert result["analysis"]["wearingClothes"] is True


@pytest.mark.asyncio
async def test_score_override():
    result = await server.squatch_score_analysis({"operatorProfileMatch": True, "environment": "indoor"})
    assert result["score"] == 100
    assert result["verdict"] == "Definitely a squatch, no explanation needed."
    assert result["isOverrideMatch"] is True
    assert result["contributions"] == []


@pytest.mark.asyncio
async def test_score_tolerates_malformed_fields():
    result = await server.squatch_score_analysis({"blurry": "lots", "humanoid": [1, 2], "environment": "woods"})
    assert result["score"] == 25


# --- squatch_analyze_image ----------------------------------------------------

@pytest.mark.asyncio
async def test_analyze_image_scores_vision_result(fake_vision):
    result = await server.squatch_analyze_image(IMAGE_B64, "image/jpeg")
    assert result["score"] == 90
    assert result["verdict"] == "Highly probable Squatch encounter"
    assert result["analysis"]["environment"] == "forest"
    assert fake_vision[0]["api_key"] == "sk-test-fake-key"
    assert fake_vision[0]["image_b64"] == IMAGE_B64
    assert fake_vision[0]["model"] == vision.DEFAULT_MODEL


@pytest.mark.asyncio
async def test_analyze_image_accepts_data_url(fake_vision):
    await server.squatch_analyze_image(f"data:image/png;base64,{IMAGE_B64}", "image/png")
    assert fake_vision[0]["image_b64"] == IMAGE_B64
    assert fake_vision[0]["media_type"] == "image/png"


@pytest.mark.asyncio
async def test_analyze_image_uses_env_overrides(fake_vision, monkeypatch):
    monkeypatch.setenv("SQUATCH_VISION_MODEL", "gpt-4o-mini")
    monkeypatch.setenv("SQUATCH_VISION_MAX_TOKENS", "256")
    await server.squatch_analyze_image(IMAGE_B64)
    assert fake_vision[0]["model"] == "gpt-4o-mini"
    assert fake_vision[0]["max_tokens"] == 256


@pytest.mark.asyncio
async def test_analyze_image_rejects_non_image(fake_vision):
    with pytest.raises(ValueError, match="image file"):
        await server.squatch_analyze_image(IMAGE_B64, "application/pdf")
    assert fake_vision == []


@pytest.mark.asyncio
async def test_analyze_image_rejects_bad_base64(fake_vision):
    with pytest.raises(ValueError, match="base64"):
        await server.squatch_analyze_image("not base64!!", "image/jpeg")
    assert fake_vision == []


@pytest.mark.asyncio
async def test_analyze_image_requires_api_key(fake_vision, monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    with pytest.raises(ValueError, match="OPENAI_API_KEY"):
        await server.squatch_analyze_image(IMAGE_B64)
    assert fake_vision == []


# --- squatch_progress_message / squatch_health --------------------------------

@pytest.mark.asyncio
async def test_progress_message_cycles():
    first = await server.squatch_progress_message(1)
    later = await server.squatch_progress_message(10)
    assert first["message"] == later["message"] == "Enhancing blur…"
    assert first["cycle_length"] == 9


@pytest.mark.asyncio
async def test_progress_message_rejects_negative_index():
    with pytest.raises(ValueError):
        await server.squatch_progress_message(-1)


@pytest.mark.asyncio
async def test_health(monkeypatch):
    monkeypatch.delenv("SQUATCH_VISION_MODEL", raising=False)
    result = await server.squatch_health()
    assert result["ok"] is True
    assert result["api_key_set"] is True
    assert result["model"] == vision.DEFAULT_MODEL

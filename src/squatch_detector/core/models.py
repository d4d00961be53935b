"""Pydantic data models — the shared business objects.

The vision client, the scoring engine, and the MCP server all speak in
these models. ``AnalysisRecord`` mirrors the JSON schema the vision prompt
requests; ``ScoreReport`` is what gets rendered back to the user.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    ValidatorFunctionWrapHandler,
    field_validator,
)

logger = logging.getLogger(__name__)


class Verdict(str, Enum):
    """Fixed verdict vocabulary, one per score bracket."""

    HIGHLY_PROBABLE = "Highly probable Squatch encounter"
    SUSPICIOUS = "Suspiciously Squatchy"
    INCONCLUSIVE = "Inconclusive – classic blurry evidence"
    PROBABLY_NOT = "Probably not a Squatch"
    DEFINITELY_NOT = "Definitely not a Squatch"


OVERRIDE_VERDICT = "Definitely a squatch, no explanation needed."


class AnalysisRecord(BaseModel):
    """Structured description of an image, as reported by the vision classifier.

    Every field is optional. Values that cannot be coerced fall back to the
    field default instead of failing the whole record.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    environment: Optional[str] = Field(None, description="Scene label, e.g. 'forest', 'indoor'")
    blur: Optional[float] = Field(
        None,
        validation_alias=AliasChoices("blurry", "blurImage"),
        serialization_alias="blurry",
        allow_inf_nan=False,
        description="Blur intensity from 0 (sharp) to 10 (smeared)",
    )
    humanoid: Optional[bool] = Field(None, validation_alias=AliasChoices("humanoid", "isHumanoidFigure"))
    squatch_like_humanoid: Optional[bool] = Field(
        None,
        validation_alias=AliasChoices("humanoidSquatchLike", "isSquatchLikeHumanoid"),
        serialization_alias="humanoidSquatchLike",
    )
    wearing_clothes: Optional[bool] = Field(
        None,
        validation_alias=AliasChoices("wearingClothes", "isWearingClothes"),
        serialization_alias="wearingClothes",
    )
    hairy_or_furry: Optional[bool] = Field(
        None,
        validation_alias=AliasChoices("hairyOrFurry", "isHairyOrFurry"),
        serialization_alias="hairyOrFurry",
    )
    known_primate: Optional[bool] = Field(
        None,
        validation_alias=AliasChoices("knownPrimate", "isKnownPrimate"),
        serialization_alias="knownPrimate",
    )
    primate_type: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("primateType", "primateTypeLabel"),
        serialization_alias="primateType",
    )
    animal: Optional[bool] = Field(None, validation_alias=AliasChoices("animal", "isAnimalPresent"))
    animal_type: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("animalType", "animalTypeLabel"),
        serialization_alias="animalType",
    )
    lighting: Optional[str] = Field(None, validation_alias=AliasChoices("lighting", "lightingLabel"))
    objects_detected: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("objectsDetected", "detectedObjectLabels"),
        serialization_alias="objectsDetected",
    )
    creature_confidence: Optional[float] = Field(
        None,
        validation_alias="creatureConfidence",
        serialization_alias="creatureConfidence",
        allow_inf_nan=False,
        description="Classifier confidence that a creature is present, 0-1",
    )
    description: Optional[str] = Field(None, description="One-line description, never scored")
    operator_profile_match: Optional[bool] = Field(
        None,
        validation_alias=AliasChoices("operatorProfileMatch", "isOperatorProfileMatch"),
        serialization_alias="operatorProfileMatch",
    )

    @field_validator("*", mode="wrap")
    @classmethod
    def _default_on_invalid(cls, value: Any, handler: ValidatorFunctionWrapHandler, info: ValidationInfo) -> Any:
        try:
            return handler(value)
        except ValidationError:
            logger.debug("Discarding invalid %s value: %r", info.field_name, value)
            return cls.model_fields[info.field_name].get_default(call_default_factory=True)

    @classmethod
    def from_payload(cls, payload: Any) -> AnalysisRecord:
        """Build a record from decoded JSON. Anything but an object yields the empty record."""
        if not isinstance(payload, dict):
            if payload is not None:
                logger.warning("Analysis payload is %s, not an object; using empty record", type(payload).__name__)
            return cls()
        return cls.model_validate(payload)

    @property
    def objects_text(self) -> str:
        """Detected object labels joined and lower-cased for substring matching."""
        return " ".join(self.objects_detected).lower()

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class ScoreReport(BaseModel):
    """Final score and verdict for one analysis record."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    score: int = Field(ge=0, le=100, description="Cryptid probability from 0 to 100")
    verdict: str = Field(description="Human-readable verdict")
    easter_egg: Optional[str] = Field(None, serialization_alias="easterEgg")
    is_override_match: Optional[bool] = Field(None, serialization_alias="isOverrideMatch")

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)

"""Squatch probability scoring engine.

Turns a neutral vision analysis into a scientific-sounding Squatch score.
Only squatch-like humanoids (hairy, unclothed) get high scores. Clothed
people in forests and known primates (zoo animals, not cryptids) should not.

The score is a fold over an ordered tuple of rules. Each rule looks at the
record and returns a signed contribution; the sum starts at ``BASE_SCORE``
and is clamped to [0, 100].
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable

from .models import OVERRIDE_VERDICT, AnalysisRecord, ScoreReport, Verdict

logger = logging.getLogger(__name__)

BASE_SCORE = 10
MIN_SCORE = 0
MAX_SCORE = 100
CONFIDENCE_BOUND = 1e6

PRIMATE_VOCABULARY = ("orangutan", "gorilla", "chimpanzee", "chimp", "monkey", "gibbon", "baboon")

# (exclusive lower bound, verdict), checked top to bottom
VERDICT_BRACKETS: tuple[tuple[int, Verdict], ...] = (
    (80, Verdict.HIGHLY_PROBABLE),
    (60, Verdict.SUSPICIOUS),
    (40, Verdict.INCONCLUSIVE),
    (20, Verdict.PROBABLY_NOT),
)


@dataclass(frozen=True)
class _Evidence:
    """Normalized view of a record: lower-cased text, neutral defaults."""

    record: AnalysisRecord
    environment: str
    blur: float
    lighting: str
    animal_type: str
    primate_label_match: bool

    @classmethod
    def from_record(cls, record: AnalysisRecord) -> _Evidence:
        primate_type = (record.primate_type or "").lower()
        return cls(
            record=record,
            environment=(record.environment or "").lower(),
            blur=record.blur if record.blur is not None else 0.0,
            lighting=(record.lighting or "").lower(),
            animal_type=(record.animal_type or "").lower(),
            primate_label_match=any(word in primate_type for word in PRIMATE_VOCABULARY),
        )

    @property
    def suppressed(self) -> bool:
        """Known primates never earn humanoid bonuses."""
        return bool(self.record.known_primate) or self.primate_label_match


Rule = Callable[[_Evidence], int]


def _known_primate(ev: _Evidence) -> int:
    # A sharp photo of a known primate is almost certainly just the primate
    if not ev.record.known_primate:
        return 0
    return -70 if ev.blur < 4 else -50


def _primate_label(ev: _Evidence) -> int:
    # Catches primates the classifier named but forgot to flag
    if not ev.primate_label_match or ev.record.known_primate:
        return 0
    return -65 if ev.blur < 4 else -45


def _environment(ev: _Evidence) -> int:
    delta = 0
    if "forest" in ev.environment or "woods" in ev.environment:
        delta += 15
    if "indoor" in ev.environment or "inside" in ev.environment:
        delta -= 40
    return delta


def _clothing(ev: _Evidence) -> int:
    return -50 if ev.record.wearing_clothes else 0


def _humanoid(ev: _Evidence) -> int:
    if ev.suppressed:
        return 0
    r = ev.record
    delta = 0
    if r.squatch_like_humanoid:
        delta += 45
    if r.hairy_or_furry and r.humanoid:
        delta += 35
    # Generic humanoid without squatch traits gets a much smaller bonus
    if r.humanoid and not r.wearing_clothes and not r.squatch_like_humanoid and not r.hairy_or_furry:
        delta += 15
    return delta


def _blur(ev: _Evidence) -> int:
    delta = 0
    if ev.blur > 7:
        delta += 20
    if ev.blur < 3 and "bright" in ev.lighting:
        delta -= 15
    return delta


def _animal(ev: _Evidence) -> int:
    delta = 0
    if ev.record.animal:
        delta += 10
    if "bear" in ev.animal_type:
        delta += 8
    return delta


def _lighting(ev: _Evidence) -> int:
    if "bright" in ev.lighting or "well-lit" in ev.lighting:
        return -10
    return 0


def _confidence(ev: _Evidence) -> int:
    confidence = ev.record.creature_confidence
    if confidence is None:
        return 0
    # Keeps the product finite; beyond the bound the final clamp saturates
    confidence = max(-CONFIDENCE_BOUND, min(CONFIDENCE_BOUND, confidence))
    return _round_half_up(confidence * 15)


RULES: tuple[tuple[str, Rule], ...] = (
    ("known_primate", _known_primate),
    ("primate_label", _primate_label),
    ("environment", _environment),
    ("clothing", _clothing),
    ("humanoid", _humanoid),
    ("blur", _blur),
    ("animal", _animal),
    ("lighting", _lighting),
    ("confidence", _confidence),
)


def _round_half_up(value: float) -> int:
    floor = math.floor(value)
    return int(floor) + (1 if value - floor >= 0.5 else 0)


def _clamp(score: int) -> int:
    return max(MIN_SCORE, min(MAX_SCORE, score))


def score_contributions(record: AnalysisRecord) -> list[tuple[str, int]]:
    """Named, non-zero rule contributions in evaluation order."""
    ev = _Evidence.from_record(record)
    contributions = []
    for name, rule in RULES:
        delta = rule(ev)
        if delta:
            contributions.append((name, delta))
    return contributions


def calculate_score(record: AnalysisRecord) -> int:
    """Compute the Squatch score for a record, clamped to [0, 100]."""
    raw = BASE_SCORE + sum(delta for _, delta in score_contributions(record))
    score = _clamp(raw)
    logger.debug("Squatch score %d (raw %d)", score, raw)
    return score


def verdict_for_score(score: int) -> Verdict:
    """Map a score to its verdict. Bracket bounds are exclusive: 80 is 'Suspiciously Squatchy'."""
    for lower_bound, verdict in VERDICT_BRACKETS:
        if score > lower_bound:
            return verdict
    return Verdict.DEFINITELY_NOT


def generate_report(record: AnalysisRecord) -> ScoreReport:
    """Full report for one record.

    An operator profile match short-circuits every rule and reports a
    certain Squatch.
    """
    if record.operator_profile_match:
        return ScoreReport(score=MAX_SCORE, verdict=OVERRIDE_VERDICT, is_override_match=True)

    score = calculate_score(record)
    return ScoreReport(score=score, verdict=verdict_for_score(score).value)

"""Progress messages shown while an image is being analyzed."""

from __future__ import annotations

PROGRESS_MESSAGES: tuple[str, ...] = (
    "Scanning for fur density…",
    "Enhancing blur…",
    "Measuring bipedal stride…",
    "Analyzing footprint depth…",
    "Cross-referencing Bigfoot databases…",
    "Calculating forest adjacency…",
    "Running blur-to-Squatch algorithm…",
    "Verifying eyewitness credibility…",
    "Finalizing scientific report…",
)


def progress_message(index: int) -> str:
    """Return the message for a progress tick, cycling through the list.

    ``index`` is expected to be non-negative.
    """
    return PROGRESS_MESSAGES[index % len(PROGRESS_MESSAGES)]

"""Progress message cycler tests."""

import pytest

from squatch_detector.core.progress import PROGRESS_MESSAGES, progress_message


def test_cycle_length_is_nine():
    assert len(PROGRESS_MESSAGES) == 9


def test_first_and_last_messages():
    assert progress_message(0) == "Scanning for fur density…"
    assert progress_message(8) == "Finalizing scientific report…"


@pytest.mark.parametrize("index", [0, 1, 4, 8, 9, 17, 1000])
def test_messages_repeat_every_cycle(index):
    assert progress_message(index) == progress_message(index + 9)


def test_wraps_around():
    assert progress_message(9) == progress_message(0)
    assert progress_message(10) == "Enhancing blur…"

import pytest

from models.enums import WorkoutSplit
from models.split_keywords import SPLIT_KEYWORDS
from services.split_detector import WorkoutSplitDetector


@pytest.fixture
def detector():
    return WorkoutSplitDetector()


def _first_split_containing(keyword):
    """The split the detector should pick given declaration order."""
    for split, keywords in SPLIT_KEYWORDS.items():
        if any(k in keyword for k in keywords):
            return split
    return None


@pytest.mark.parametrize(
    "split,keyword",
    [(split, keyword) for split, keywords in SPLIT_KEYWORDS.items() for keyword in keywords],
)
def test_every_keyword_is_detected(detector, split, keyword):
    expected = _first_split_containing(keyword)

    assert detector.detect(keyword) == expected
    # Only "тяга становая" is shadowed by the earlier "тяга".
    if keyword != "тяга становая":
        assert expected == split


def test_empty_text_detects_nothing(detector):
    assert detector.detect("") is None


def test_unrelated_text_detects_nothing(detector):
    assert detector.detect("cardio on the bike") is None


def test_matching_is_case_insensitive(detector):
    assert detector.detect("Сегодня НОГИ") == WorkoutSplit.LEGS


def test_keyword_inside_a_longer_word_counts(detector):
    assert detector.detect("приседания") == WorkoutSplit.LEGS


def test_first_declared_split_wins(detector):
    assert detector.detect("руки и спина") == WorkoutSplit.BACK_TRAPS


def test_custom_keyword_table():
    detector = WorkoutSplitDetector({WorkoutSplit.ARMS: ("curl",)})

    assert detector.detect("Hammer CURL") == WorkoutSplit.ARMS
    assert detector.detect("ноги") is None

import pytest

from permit_fees.rules.processing_days import (
    DEFAULT_PROCESSING_DAYS,
    STATUTORY_PROCESSING_DAYS,
    is_known_level,
    normalise_level,
    processing_days_for_level,
)


@pytest.mark.parametrize(
    "level, expected",
    [
        ("2.1", 30),
        ("2.2", 60),
        ("2.3", 60),
        ("2.4", 60),
        ("3", 90),
        ("Level 2.1", 30),
        (" level 3 ", 90),
        ("3.0", 90),
    ],
)
def test_statutory_levels(level: str, expected: int) -> None:
    assert processing_days_for_level(level) == expected


@pytest.mark.parametrize("level", ["1", "2", "4", "2.5", "", None, "category A"])
def test_unrecognised_levels_get_the_longest_window(level) -> None:
    assert processing_days_for_level(level) == DEFAULT_PROCESSING_DAYS
    assert DEFAULT_PROCESSING_DAYS == max(STATUTORY_PROCESSING_DAYS)
    assert not is_known_level(level)


def test_normalise_level() -> None:
    assert normalise_level("Level 2.4") == "2.4"
    assert normalise_level(None) == ""
    assert STATUTORY_PROCESSING_DAYS == {30, 60, 90}

"""Statutory processing-day allowances by activity level.

The authority commits to deciding an application within a fixed number of
working days, set by the level of the prescribed activity:

  - Level 2.1: 30 days
  - Level 2.2, 2.3 and 2.4: 60 days
  - Level 3: 90 days

Levels outside this table get DEFAULT_PROCESSING_DAYS, the longest
statutory window, so an estimate never under-states the review period.
"""
from __future__ import annotations

from typing import Dict, Optional

PROCESSING_DAYS_BY_LEVEL: Dict[str, int] = {
    "2.1": 30,
    "2.2": 60,
    "2.3": 60,
    "2.4": 60,
    "3": 90,
}

# Applied to unrecognised levels
DEFAULT_PROCESSING_DAYS: int = 90

STATUTORY_PROCESSING_DAYS = frozenset(PROCESSING_DAYS_BY_LEVEL.values()) | {DEFAULT_PROCESSING_DAYS}


def normalise_level(activity_level: Optional[str]) -> str:
    """Canonical form of a level string: "Level 2.1 " -> "2.1", "3.0" -> "3"."""

    txt = (activity_level or "").strip().lower()
    if txt.startswith("level"):
        txt = txt[len("level"):].strip()
    if txt.endswith(".0"):
        txt = txt[:-2]
    return txt


def is_known_level(activity_level: Optional[str]) -> bool:
    return normalise_level(activity_level) in PROCESSING_DAYS_BY_LEVEL


def processing_days_for_level(activity_level: Optional[str]) -> int:
    """Processing days for ``activity_level``; unknown levels get the default."""

    level = normalise_level(activity_level)
    if level in PROCESSING_DAYS_BY_LEVEL:
        return PROCESSING_DAYS_BY_LEVEL[level]
    return DEFAULT_PROCESSING_DAYS

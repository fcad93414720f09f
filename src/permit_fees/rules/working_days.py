"""Statutory working-day calendar.

Processing days are working days: weekends and public holidays of the
configured country (Papua New Guinea by default) do not count towards the
authority's decision deadline.
"""
from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Dict, List, Mapping, Optional

import holidays

from .processing_days import processing_days_for_level

logger = logging.getLogger(__name__)

DEFAULT_HOLIDAY_COUNTRY = "PG"


def public_holidays(country: str = DEFAULT_HOLIDAY_COUNTRY) -> Mapping[date, str]:
    """Public holidays for ``country``; weekends only if the country is unsupported."""
    try:
        return holidays.country_holidays(country.upper())
    except NotImplementedError:
        logger.warning("No public holiday calendar for %s; counting weekends only", country)
        return {}


def is_working_day(on: date, holiday_calendar: Mapping[date, str]) -> bool:
    return on.weekday() < 5 and on not in holiday_calendar


def add_working_days(
    start: date,
    days: int,
    holiday_calendar: Optional[Mapping[date, str]] = None,
) -> date:
    """Date of the ``days``-th working day after ``start`` (``start`` itself not counted)."""
    if days < 0:
        raise ValueError("days must not be negative")
    calendar = public_holidays() if holiday_calendar is None else holiday_calendar
    current = start
    remaining = days
    while remaining > 0:
        current += timedelta(days=1)
        if is_working_day(current, calendar):
            remaining -= 1
    return current


def holidays_between(start: date, end: date, holiday_calendar: Mapping[date, str]) -> List[Dict[str, str]]:
    """Weekday holidays strictly after ``start`` up to and including ``end``."""
    entries: List[Dict[str, str]] = []
    current = start + timedelta(days=1)
    while current <= end:
        if current.weekday() < 5 and current in holiday_calendar:
            entries.append({"name": str(holiday_calendar.get(current, "")), "date": current.isoformat()})
        current += timedelta(days=1)
    return entries


def statutory_due_date(
    submitted_on: date,
    activity_level: Optional[str],
    holiday_calendar: Optional[Mapping[date, str]] = None,
) -> date:
    return add_working_days(submitted_on, processing_days_for_level(activity_level), holiday_calendar)

"""
Bell schedule lookups.

A school runs either one bell schedule for every grade or two (low and high
grades). Grids and conflict checks must see every period that exists in
either schedule, so lookups take the whole SchoolInfo rather than one
schedule. Nothing here validates times; it is a lookup table.
"""

from __future__ import annotations

from typing import Optional

from .data.models import BellSchedule, PeriodKind, PeriodSlot, SchoolInfo


LOW_GRADES = [1, 2]
HIGH_GRADES = [3, 4, 5, 6]
ALL_GRADES = LOW_GRADES + HIGH_GRADES


def all_period_numbers(school: SchoolInfo) -> list[int]:
    """Sorted union of the periods of every configured bell schedule."""
    periods: set[int] = set()
    for schedule in school.bell_schedules:
        periods.update(schedule.periods.keys())
    return sorted(periods)


def period_info(school: SchoolInfo, schedule_index: int, period: int) -> Optional[PeriodSlot]:
    """Period details from one schedule, or None if it has no such period."""
    if not 0 <= schedule_index < len(school.bell_schedules):
        return None
    return school.bell_schedules[schedule_index].periods.get(period)


def active_schedules(school: SchoolInfo) -> list[BellSchedule]:
    """Schedules the grids show: the first, plus the second when distinct."""
    if school.has_distinct_schedules:
        return school.bell_schedules[:2]
    return school.bell_schedules[:1]


def schedule_for_grade(school: SchoolInfo, grade: int) -> Optional[BellSchedule]:
    """The bell schedule a grade follows."""
    if not school.bell_schedules:
        return None
    if school.has_distinct_schedules:
        for schedule in school.bell_schedules:
            if grade in schedule.target_grades:
                return schedule
    return school.bell_schedules[0]


def blocked_period_label(school: SchoolInfo, period: int) -> Optional[str]:
    """
    Label of a non-class block (break, lunch, ...) at this period.

    Returns None when the period is an ordinary lesson in every active
    schedule. Placements are not meant to go into blocked periods.
    """
    for schedule in active_schedules(school):
        slot = schedule.periods.get(period)
        if slot is not None and slot.type is PeriodKind.ETC:
            return slot.name or "기타"
    return None


def set_distinct_schedules(school: SchoolInfo, enabled: bool) -> SchoolInfo:
    """
    Switch between one shared schedule and a low/high grade pair.

    Returns a new SchoolInfo; period tables are kept, only names and target
    grades of the first two schedules are reset to the defaults.
    """
    schedules = [s.model_copy(deep=True) for s in school.bell_schedules]

    if enabled:
        if len(schedules) > 0:
            schedules[0].name = "시정표 A (저학년)"
            schedules[0].target_grades = list(LOW_GRADES)
        if len(schedules) > 1:
            schedules[1].name = "시정표 B (고학년)"
            schedules[1].target_grades = list(HIGH_GRADES)
    elif schedules:
        schedules[0].name = "기본 시정표"
        schedules[0].target_grades = list(ALL_GRADES)

    return school.model_copy(update={
        "has_distinct_schedules": enabled,
        "bell_schedules": schedules,
    })

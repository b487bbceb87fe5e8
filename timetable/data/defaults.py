"""
Starting data for a new project.

A new project is a six-grade elementary school with four classes per grade,
a handful of specialist rooms and teachers, the usual subject catalog and a
shared bell schedule (plus a second one for when the school splits low and
high grades).

Usage:
    from timetable.data.defaults import default_document

    document = default_document(name="행복초등학교", classes_per_grade=5)
"""

from __future__ import annotations

from ..config import get_settings
from .models import (
    BellSchedule,
    PeriodKind,
    PeriodSlot,
    Room,
    SchoolInfo,
    Teacher,
    TeacherAssignment,
    TeacherLayoutConfig,
    TimetableDocument,
)


# =============================================================================
# Catalog
# =============================================================================

DEFAULT_SUBJECTS = ["국어", "수학", "사회", "과학", "영어", "체육", "음악", "미술", "도덕", "실과", "창체"]

DEFAULT_ROOMS = [
    {"id": "gym", "name": "강당", "capacity": 2},
    {"id": "sci1", "name": "과학실1", "capacity": 1},
    {"id": "sci2", "name": "과학실2", "capacity": 1},
    {"id": "eng1", "name": "영어1실", "capacity": 1},
    {"id": "eng2", "name": "영어2실", "capacity": 1},
    {"id": "com", "name": "컴퓨터실", "capacity": 1},
    {"id": "playground", "name": "운동장", "capacity": 3},
]

DEFAULT_TEACHERS = [
    {"id": "t1", "name": "영어A", "color": "pastel-purple", "subject": "영어", "room_id": "eng1"},
    {"id": "t2", "name": "체육A", "color": "pastel-green", "subject": "체육", "room_id": "gym"},
    {"id": "t3", "name": "과학A", "color": "pastel-blue", "subject": "과학", "room_id": "sci1"},
]

GRADES = [1, 2, 3, 4, 5, 6]
DEFAULT_MAX_PERIODS = {1: 5, 2: 5, 3: 6, 4: 6, 5: 6, 6: 6}

# (start, end) per period; schedule B has a later lunch
SCHEDULE_A_TIMES = [
    ("09:00", "09:40"), ("09:50", "10:30"), ("10:40", "11:20"),
    ("11:30", "12:10"), ("13:00", "13:40"), ("13:50", "14:30"),
]
SCHEDULE_B_TIMES = [
    ("09:00", "09:40"), ("09:50", "10:30"), ("10:40", "11:20"),
    ("11:30", "12:10"), ("13:10", "13:50"), ("14:00", "14:40"),
]


# =============================================================================
# Builders
# =============================================================================

def build_bell_schedule(
    schedule_id: str,
    name: str,
    target_grades: list[int],
    times: list[tuple[str, str]],
) -> BellSchedule:
    """Bell schedule with periods numbered from 1 in the order given."""
    periods = {
        number: PeriodSlot(start=start, end=end, name=f"{number}교시", type=PeriodKind.CLASS)
        for number, (start, end) in enumerate(times, start=1)
    }
    return BellSchedule(id=schedule_id, name=name, target_grades=target_grades, periods=periods)


def default_bell_schedules() -> list[BellSchedule]:
    return [
        build_bell_schedule("schedule-a", "기본 시정표", list(GRADES), SCHEDULE_A_TIMES),
        build_bell_schedule("schedule-b", "시정표 B", [3, 4, 5, 6], SCHEDULE_B_TIMES),
    ]


def default_teachers() -> list[Teacher]:
    return [
        Teacher(
            id=entry["id"],
            name=entry["name"],
            color=entry["color"],
            assignments=[TeacherAssignment(subject=entry["subject"], room_id=entry["room_id"])],
        )
        for entry in DEFAULT_TEACHERS
    ]


def default_document(
    name: str = "행복초등학교",
    classes_per_grade: int = 4,
    with_teachers: bool = True,
) -> TimetableDocument:
    """A new, empty-timetable project."""
    school = SchoolInfo(
        name=name,
        classes_per_grade={grade: classes_per_grade for grade in GRADES},
        max_periods=dict(DEFAULT_MAX_PERIODS),
        bell_schedules=default_bell_schedules(),
        has_distinct_schedules=False,
    )

    return TimetableDocument(
        school_info=school,
        teachers=default_teachers() if with_teachers else [],
        rooms=[Room(**entry) for entry in DEFAULT_ROOMS],
        subjects=list(DEFAULT_SUBJECTS),
        teacher_config=TeacherLayoutConfig(grades=[str(g) for g in GRADES]),
        version=get_settings().document_version,
    )

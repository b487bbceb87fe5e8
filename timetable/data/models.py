"""
Pydantic models for the timetable document.

Field names are snake_case in Python and camelCase in saved JSON, so a
document written by the editor loads as-is and dumps back with the same keys.

Conventions:
- Days are the Korean weekday symbols 월, 화, 수, 목, 금
- Periods are small positive integers (1-15); which ones exist depends on
  the bell schedules
- Times inside a bell schedule are "HH:MM" strings
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from ..identifiers import ClassRef, parse_class_id


# =============================================================================
# Constants and Enums
# =============================================================================

class Day(str, Enum):
    """Weekday of a placement."""
    MON = "월"
    TUE = "화"
    WED = "수"
    THU = "목"
    FRI = "금"


DAYS: list[Day] = [Day.MON, Day.TUE, Day.WED, Day.THU, Day.FRI]
MAX_PERIOD = 15


class PeriodKind(str, Enum):
    """Whether a bell-schedule period is a lesson or a non-class block."""
    CLASS = "CLASS"
    ETC = "ETC"


# =============================================================================
# Helper Functions
# =============================================================================

def time_to_minutes(time_str: str) -> int:
    """Convert HH:MM format to minutes from midnight."""
    h, m = map(int, time_str.split(":"))
    return h * 60 + m


def new_placement_id() -> str:
    return uuid4().hex[:12]


class DocumentModel(BaseModel):
    """Base for every persisted record: camelCase on disk, snake_case in code."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


# =============================================================================
# Bell Schedules
# =============================================================================

class PeriodSlot(DocumentModel):
    """Start/end times and label of one period in a bell schedule."""
    start: str = Field(pattern=r"^\d{1,2}:\d{2}$", description="Start time (HH:MM)")
    end: str = Field(pattern=r"^\d{1,2}:\d{2}$", description="End time (HH:MM)")
    name: Optional[str] = Field(default=None, description="Display label, e.g. '1교시'")
    type: PeriodKind = Field(default=PeriodKind.CLASS, description="Lesson or break/lunch block")

    @property
    def is_class(self) -> bool:
        return self.type is PeriodKind.CLASS

    @property
    def duration_minutes(self) -> int:
        return time_to_minutes(self.end) - time_to_minutes(self.start)

    def __str__(self) -> str:
        label = self.name or self.type.value
        return f"{label} ({self.start}-{self.end})"


class BellSchedule(DocumentModel):
    """A timetable variant: which periods exist and which grades follow it."""
    id: str = Field(min_length=1)
    name: str
    target_grades: list[int] = Field(default_factory=list)
    periods: dict[int, PeriodSlot] = Field(default_factory=dict)


class SchoolInfo(DocumentModel):
    """School-wide configuration."""
    name: str = ""
    classes_per_grade: dict[int, int] = Field(default_factory=dict, description="Grade -> class count")
    max_periods: dict[int, int] = Field(default_factory=dict, description="Grade -> last period")
    bell_schedules: list[BellSchedule] = Field(default_factory=list)
    has_distinct_schedules: bool = Field(default=False, description="Separate low/high grade schedules")


# =============================================================================
# Registries
# =============================================================================

class Room(DocumentModel):
    """Special-purpose room."""
    id: str = Field(min_length=1)
    name: str
    capacity: int = Field(default=1, ge=0, description="Placements it can host at once")

    def __str__(self) -> str:
        return f"{self.name} ({self.capacity})"


class TeacherAssignment(DocumentModel):
    """One subject a teacher is responsible for, and for whom."""
    subject: str
    room_id: Optional[str] = Field(default=None, description="Fixed room for this subject")
    targets: list[str] = Field(default_factory=list, description="Grades or classes; empty means all")
    hours: Optional[int] = Field(default=None, ge=0, description="Weekly sessions per target class")

    @field_validator("targets", mode="before")
    @classmethod
    def none_means_all(cls, value: Any) -> Any:
        return [] if value is None else value


class Teacher(DocumentModel):
    """Specialist teacher."""
    id: str = Field(min_length=1)
    name: str
    color: str = ""
    assignments: list[TeacherAssignment] = Field(default_factory=list)
    max_hours: Optional[int] = Field(default=None, ge=0, description="Weekly teaching cap")
    memo: Optional[str] = None

    @property
    def subjects(self) -> list[str]:
        return [a.subject for a in self.assignments]

    def __str__(self) -> str:
        return f"{self.name} ({self.id})"


class SubjectConfig(DocumentModel):
    """Per-subject overlap policy."""
    allow_overlap: bool = False
    allow_overlap_by_grade: list[int] = Field(default_factory=list)
    sync_grade_classes: bool = False


class TeacherLayoutConfig(DocumentModel):
    """Row/class layout of the teacher-management grid."""
    grades: list[str] = Field(default_factory=lambda: ["1", "2", "3", "4", "5", "6"])
    extra_class_counts: dict[str, int] = Field(default_factory=dict)
    custom_labels: dict[str, str] = Field(default_factory=dict)
    hidden_level: list[str] = Field(default_factory=list)
    level_class_counts: dict[str, int] = Field(default_factory=dict)


# =============================================================================
# Placements
# =============================================================================

class Placement(DocumentModel):
    """
    A filled timetable cell: at (day, period) class C does subject S.

    With neither teacher nor room it is a homeroom placement, taught by the
    class's own teacher in its own room.
    """
    id: str = Field(default_factory=new_placement_id, min_length=1)
    day: Day
    period: int = Field(ge=1, le=MAX_PERIOD)
    class_id: str
    subject: str
    teacher_id: Optional[str] = None
    room_id: Optional[str] = None
    custom_text: Optional[str] = None
    # Cosmetic payload, copied through untouched
    custom_style: Optional[dict[str, Any]] = None
    rich_text: Optional[list[dict[str, Any]]] = None

    @property
    def class_ref(self) -> ClassRef:
        return parse_class_id(self.class_id)

    @property
    def is_homeroom(self) -> bool:
        return self.teacher_id is None and self.room_id is None

    def same_slot(self, other: Placement) -> bool:
        return self.day == other.day and self.period == other.period

    def __str__(self) -> str:
        who = f" / {self.teacher_id}" if self.teacher_id else ""
        return f"{self.day.value}{self.period} {self.class_id} {self.subject}{who}"


# =============================================================================
# Document
# =============================================================================

class TimetableDocument(DocumentModel):
    """Complete saved project."""
    school_info: SchoolInfo = Field(default_factory=SchoolInfo)
    teachers: list[Teacher] = Field(default_factory=list)
    rooms: list[Room] = Field(default_factory=list)
    subjects: list[str] = Field(default_factory=list)
    timetable: list[Placement] = Field(default_factory=list)
    subject_styles: dict[str, dict[str, Any]] = Field(default_factory=dict)
    subject_hours: dict[str, int] = Field(default_factory=dict)
    teacher_config: TeacherLayoutConfig = Field(default_factory=TeacherLayoutConfig)
    subject_configs: dict[str, SubjectConfig] = Field(default_factory=dict)
    # Opaque hash, only meaningful to the read-only viewer
    project_password: Optional[str] = None
    version: str = "1.4"

    @model_validator(mode="after")
    def validate_no_duplicate_ids(self) -> "TimetableDocument":
        """Ensure no duplicate IDs within each entity type."""
        errors: list[str] = []

        def check_duplicates(items: list, entity_name: str) -> None:
            seen: set[str] = set()
            for item in items:
                if item.id in seen:
                    errors.append(f"Duplicate {entity_name} ID: '{item.id}'")
                seen.add(item.id)

        check_duplicates(self.teachers, "teacher")
        check_duplicates(self.rooms, "room")
        check_duplicates(self.timetable, "placement")
        check_duplicates(self.school_info.bell_schedules, "bell schedule")

        if errors:
            raise ValueError("Duplicate ID validation failed:\n" + "\n".join(f"  - {e}" for e in errors))

        return self

    def reference_warnings(self) -> list[str]:
        """
        Dangling references in the document.

        These are not errors: the conflict engine treats an unknown room as
        unconstrained and an unknown teacher as just another id.
        """
        warnings: list[str] = []
        teacher_ids = {t.id for t in self.teachers}
        room_ids = {r.id for r in self.rooms}
        subjects = set(self.subjects)

        for placement in self.timetable:
            if placement.teacher_id and placement.teacher_id not in teacher_ids:
                warnings.append(f"Placement {placement.id}: unknown teacher '{placement.teacher_id}'")
            if placement.room_id and placement.room_id not in room_ids:
                warnings.append(f"Placement {placement.id}: unknown room '{placement.room_id}'")
            if subjects and not placement.custom_text and placement.subject not in subjects:
                warnings.append(f"Placement {placement.id}: subject '{placement.subject}' not in catalog")

        for teacher in self.teachers:
            for assignment in teacher.assignments:
                if assignment.room_id and assignment.room_id not in room_ids:
                    warnings.append(f"Teacher {teacher.id}: unknown room '{assignment.room_id}'")

        return warnings

    def summary(self) -> dict[str, Any]:
        return {
            "school_name": self.school_info.name,
            "teachers": len(self.teachers),
            "rooms": len(self.rooms),
            "subjects": len(self.subjects),
            "placements": len(self.timetable),
            "bell_schedules": len(self.school_info.bell_schedules),
            "version": self.version,
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(
            self.model_dump(mode="json", by_alias=True),
            ensure_ascii=False,
            indent=indent,
        )

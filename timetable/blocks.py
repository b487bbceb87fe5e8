"""
Required-block derivation.

For a teacher, list the weekly sessions their assignments still call for but
that are not yet on the timetable, one unit block per missing session. The
editor offers these blocks in its "still to place" picker. They are advice
only: nothing stops a teacher from being placed outside their assignments.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from .data.models import Placement, SchoolInfo, Teacher, TeacherAssignment, TeacherLayoutConfig
from .identifiers import extract_grade, is_grade_row, make_class_id, parse_class_id


@dataclass(frozen=True)
class ClassBlock:
    """One still-needed weekly session of a subject for a class."""
    id: str
    class_id: str
    grade: int
    class_number: int
    subject: str
    teacher_id: str
    room_id: Optional[str]
    required_sessions: int
    assigned_sessions: int

    @property
    def remaining_sessions(self) -> int:
        return self.required_sessions - self.assigned_sessions


def class_count_for_row(row: str, school: SchoolInfo, layout: TeacherLayoutConfig) -> int:
    """Number of classes in a grade row, including manually added ones."""
    extra = layout.extra_class_counts.get(row, 0)
    if row.isdigit():
        return max(0, school.classes_per_grade.get(int(row), 0) + extra)
    return max(0, extra)


def expand_targets(
    targets: Iterable[str],
    school: SchoolInfo,
    layout: TeacherLayoutConfig,
) -> list[str]:
    """
    Expand assignment targets into concrete class identifiers.

    A grade row ("3", or a custom row listed in the layout) becomes
    "3-1" .. "3-N". Classes and aggregates are kept as they are. An empty
    target list means every grade row of the layout. Order is preserved and
    duplicates are dropped.
    """
    targets = list(targets) or list(layout.grades)
    expanded: list[str] = []

    for target in targets:
        grade_row = (target in layout.grades or target.isdigit()) and is_grade_row(target)
        if grade_row:
            count = class_count_for_row(target, school, layout)
            expanded.extend(make_class_id(target, c) for c in range(1, count + 1))
        else:
            expanded.append(target)

    return list(dict.fromkeys(expanded))


def derive_unfulfilled_blocks(
    teacher: Optional[Teacher],
    placements: Iterable[Placement],
    school: SchoolInfo,
    layout: TeacherLayoutConfig,
    required_hours: Callable[[TeacherAssignment], int],
) -> list[ClassBlock]:
    """
    Unit blocks still missing from a teacher's assignments.

    Args:
        teacher: The teacher, or None when the id did not resolve
        placements: Current placements
        school: School info (classes per grade)
        layout: Grade rows and extra classes
        required_hours: Weekly sessions an assignment requires per class

    Returns:
        One ClassBlock per missing session; empty for an unknown teacher
    """
    if teacher is None:
        return []

    placements = [p for p in placements if p.teacher_id == teacher.id]
    blocks: list[ClassBlock] = []

    for assignment in teacher.assignments:
        required = required_hours(assignment)

        for class_id in expand_targets(assignment.targets, school, layout):
            assigned = sum(
                1 for p in placements
                if p.subject == assignment.subject and p.class_id == class_id
            )
            ref = parse_class_id(class_id)

            for i in range(required - assigned):
                blocks.append(ClassBlock(
                    id=f"{teacher.id}-{class_id}-{assignment.subject}-{i}",
                    class_id=class_id,
                    grade=extract_grade(class_id),
                    class_number=ref.class_number or 0,
                    subject=assignment.subject,
                    teacher_id=teacher.id,
                    room_id=assignment.room_id,
                    required_sessions=required,
                    assigned_sessions=assigned,
                ))

    return blocks

"""
Conflict detection for timetable placements.

Three independent checks make up a conflict report:
- teacher: the same teacher in two placements at once
- class: the same students in two placements at once
- room: more placements in a room than its capacity
"""

from __future__ import annotations

from .core import (
    Conflict,
    ConflictIssue,
    ConflictKind,
    CLASS_DIFFERENT_SUBJECT_REASON,
    CLASS_SAME_SUBJECT_REASON,
    TEACHER_REASON,
    room_reason,
)
from .teacher import check_teacher
from .classes import check_class, find_population_collisions, overlap_permitted
from .rooms import check_room, room_occupants
from .engine import (
    ScanReport,
    check_batch,
    check_conflict,
    scan_timetable,
)


__all__ = [
    # Results
    "Conflict",
    "ConflictIssue",
    "ConflictKind",
    "TEACHER_REASON",
    "CLASS_SAME_SUBJECT_REASON",
    "CLASS_DIFFERENT_SUBJECT_REASON",
    "room_reason",
    # Individual checks
    "check_teacher",
    "check_class",
    "find_population_collisions",
    "overlap_permitted",
    "check_room",
    "room_occupants",
    # Engine
    "check_conflict",
    "check_batch",
    "scan_timetable",
    "ScanReport",
]

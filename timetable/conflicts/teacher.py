"""Teacher double-booking check."""

from __future__ import annotations

from typing import Optional

from timetable.data.models import Placement

from .core import ConflictIssue, ConflictKind, TEACHER_REASON


def check_teacher(candidate: Placement, others: list[Placement]) -> Optional[ConflictIssue]:
    """
    A teacher cannot be in two placements at once.

    Only applies when the candidate names a teacher. ``others`` must already
    be restricted to the candidate's (day, period), excluding the candidate.
    Every clashing placement is listed, not only the first.
    """
    if not candidate.teacher_id:
        return None

    busy = [p for p in others if p.teacher_id == candidate.teacher_id]
    if not busy:
        return None

    return ConflictIssue(kind=ConflictKind.TEACHER, message=TEACHER_REASON, placements=busy)

"""Result types shared by the conflict checks."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

from timetable.data.models import Placement


class ConflictKind(str, Enum):
    """Category of a collision."""
    TEACHER = "teacher"
    CLASS_SAME_SUBJECT = "class_same_subject"
    CLASS_DIFFERENT_SUBJECT = "class_different_subject"
    ROOM_CAPACITY = "room_capacity"


TEACHER_REASON = "teacher double-booked"
CLASS_SAME_SUBJECT_REASON = "class double-booked"
CLASS_DIFFERENT_SUBJECT_REASON = "class double-booked (different subject)"


def room_reason(room_name: str) -> str:
    return f"room over capacity ({room_name})"


@dataclass
class ConflictIssue:
    """One category of collision and the placements involved in it."""
    kind: ConflictKind
    message: str
    placements: list[Placement] = field(default_factory=list)

    @property
    def placement_ids(self) -> list[str]:
        return [p.id for p in self.placements]


@dataclass
class Conflict:
    """
    Outcome of checking one candidate placement.

    ``conflicting_placements`` is the de-duplicated union of every issue's
    placements, in the order they were found.
    """
    issues: list[ConflictIssue] = field(default_factory=list)

    @property
    def has_conflict(self) -> bool:
        return bool(self.issues)

    @property
    def conflicting_placements(self) -> list[Placement]:
        seen: set[str] = set()
        result: list[Placement] = []
        for issue in self.issues:
            for placement in issue.placements:
                if placement.id not in seen:
                    seen.add(placement.id)
                    result.append(placement)
        return result

    @property
    def reason(self) -> str:
        messages: list[str] = []
        for issue in self.issues:
            if issue.message not in messages:
                messages.append(issue.message)
        return ", ".join(messages)

    @property
    def kinds(self) -> set[ConflictKind]:
        return {issue.kind for issue in self.issues}

    def involves(self, placement_id: str) -> bool:
        return any(p.id == placement_id for p in self.conflicting_placements)

    def to_dict(self) -> dict:
        return {
            "hasConflict": self.has_conflict,
            "reason": self.reason,
            "conflictingPlacements": [p.id for p in self.conflicting_placements],
            "issues": [
                {"kind": issue.kind.value, "message": issue.message, "placements": issue.placement_ids}
                for issue in self.issues
            ],
        }


def others_in_slot(candidate: Placement, placements: Iterable[Placement]) -> list[Placement]:
    """Placements other than the candidate itself at the candidate's (day, period)."""
    return [
        p for p in placements
        if p.id != candidate.id and p.day == candidate.day and p.period == candidate.period
    ]

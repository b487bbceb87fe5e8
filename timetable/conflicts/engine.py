"""
Conflict engine entry points.

Every function here is pure: it reads the placements, overlap policies and
room registry it is given and returns a report. Nothing is blocked or
written; callers decide whether a conflict rejects a placement or is
overridden.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Mapping, Union

from timetable.data.models import Placement, Room
from timetable.policy import OverlapPolicyStore

from .classes import check_class
from .core import Conflict, others_in_slot
from .rooms import check_room
from .teacher import check_teacher


RoomRegistry = Union[Mapping[str, Room], Iterable[Room]]


def _room_map(rooms: RoomRegistry) -> Mapping[str, Room]:
    if isinstance(rooms, Mapping):
        return rooms
    return {room.id: room for room in rooms}


def check_conflict(
    candidate: Placement,
    placements: Iterable[Placement],
    policies: OverlapPolicyStore,
    rooms: RoomRegistry,
) -> Conflict:
    """
    Check a candidate placement against existing placements.

    Runs the teacher, class and room checks independently and unions their
    issues, in that order. The candidate is skipped in ``placements`` by id,
    so an existing placement can be re-checked in place.

    Args:
        candidate: The placement being proposed (or re-checked)
        placements: Current placements
        policies: Overlap permissions per subject
        rooms: Room registry, as a mapping by id or an iterable of rooms

    Returns:
        Conflict; ``has_conflict`` is False when the placement is clean
    """
    others = others_in_slot(candidate, placements)
    conflict = Conflict()

    teacher_issue = check_teacher(candidate, others)
    if teacher_issue:
        conflict.issues.append(teacher_issue)

    conflict.issues.extend(check_class(candidate, others, policies))

    room_issue = check_room(candidate, others, _room_map(rooms))
    if room_issue:
        conflict.issues.append(room_issue)

    return conflict


def check_batch(
    candidates: Iterable[Placement],
    placements: Iterable[Placement],
    policies: OverlapPolicyStore,
    rooms: RoomRegistry,
) -> list[tuple[Placement, Conflict]]:
    """
    Check several candidates as if placed one after another.

    Each candidate sees the existing placements plus every earlier candidate
    of the batch, so a batch that collides with itself (e.g. more classes
    than a room holds) is reported.
    """
    room_map = _room_map(rooms)
    simulated = list(placements)
    results: list[tuple[Placement, Conflict]] = []

    for candidate in candidates:
        results.append((candidate, check_conflict(candidate, simulated, policies, room_map)))
        simulated = [p for p in simulated if p.id != candidate.id]
        simulated.append(candidate)

    return results


@dataclass
class ScanReport:
    """Conflicts found across a whole timetable."""
    total: int = 0
    conflicts: dict[str, Conflict] = field(default_factory=dict)

    @property
    def conflicted_ids(self) -> set[str]:
        return set(self.conflicts)

    @property
    def conflict_count(self) -> int:
        return len(self.conflicts)

    @property
    def is_clean(self) -> bool:
        return not self.conflicts


def scan_timetable(
    placements: Iterable[Placement],
    policies: OverlapPolicyStore,
    rooms: RoomRegistry,
) -> ScanReport:
    """Re-check every placement against all the others."""
    placements = list(placements)
    room_map = _room_map(rooms)
    report = ScanReport(total=len(placements))

    for placement in placements:
        conflict = check_conflict(placement, placements, policies, room_map)
        if conflict.has_conflict:
            report.conflicts[placement.id] = conflict

    return report

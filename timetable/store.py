"""
In-memory timetable store.

The store owns the placements and the registries they point to (teachers,
rooms, subjects) together with the overlap policies. It is the only place
that mutates them; conflict checks run against its current state on every
call, never against a cached copy.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from .blocks import ClassBlock, derive_unfulfilled_blocks
from .config import get_settings
from .conflicts import Conflict, ScanReport, check_batch, check_conflict, scan_timetable
from .data.models import (
    Day,
    Placement,
    Room,
    SchoolInfo,
    Teacher,
    TeacherAssignment,
    TeacherLayoutConfig,
    TimetableDocument,
)
from .identifiers import make_class_id
from .policy import OverlapPolicyStore

logger = logging.getLogger(__name__)


class PlacementOutcome(str, Enum):
    """What happened to a placement attempt."""
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    OVERRIDDEN = "overridden"


@dataclass
class PlacementResult:
    placement: Placement
    outcome: PlacementOutcome
    conflict: Conflict

    @property
    def written(self) -> bool:
        return self.outcome is not PlacementOutcome.REJECTED


@dataclass
class BatchResult:
    outcome: PlacementOutcome
    results: list[tuple[Placement, Conflict]]

    @property
    def conflicted(self) -> list[tuple[Placement, Conflict]]:
        return [(p, c) for p, c in self.results if c.has_conflict]

    @property
    def written(self) -> bool:
        return self.outcome is not PlacementOutcome.REJECTED


class TimetableStore:
    """
    Placements plus teacher/room/subject registries and overlap policies.

    Usage:
        store = TimetableStore.from_document(load_document("project.json"))
        result = store.place(Placement(day=Day.MON, period=1, class_id="3-1",
                                       subject="영어", teacher_id="t1"))
        if not result.written:
            print(result.conflict.reason)
    """

    def __init__(
        self,
        school_info: Optional[SchoolInfo] = None,
        teachers: Iterable[Teacher] = (),
        rooms: Iterable[Room] = (),
        subjects: Iterable[str] = (),
        placements: Iterable[Placement] = (),
        policies: Optional[OverlapPolicyStore] = None,
        layout: Optional[TeacherLayoutConfig] = None,
        subject_hours: Optional[dict[str, int]] = None,
        subject_styles: Optional[dict[str, dict]] = None,
        project_password: Optional[str] = None,
    ):
        self.school_info = school_info or SchoolInfo()
        self.layout = layout or TeacherLayoutConfig()
        self.subjects: list[str] = list(subjects)
        self.subject_hours: dict[str, int] = dict(subject_hours or {})
        self.subject_styles: dict[str, dict] = dict(subject_styles or {})
        # An empty policy store is falsy; keep the caller's handle anyway
        self.policies = policies if policies is not None else OverlapPolicyStore()
        self.project_password = project_password

        self._teachers: dict[str, Teacher] = {t.id: t for t in teachers}
        self._rooms: dict[str, Room] = {r.id: r for r in rooms}
        self._placements: dict[str, Placement] = {p.id: p for p in placements}

    # -------------------------------------------------------------------------
    # Document conversion
    # -------------------------------------------------------------------------

    @classmethod
    def from_document(cls, document: TimetableDocument) -> TimetableStore:
        return cls(
            school_info=document.school_info,
            teachers=document.teachers,
            rooms=document.rooms,
            subjects=document.subjects,
            placements=document.timetable,
            policies=OverlapPolicyStore(document.subject_configs),
            layout=document.teacher_config,
            subject_hours=document.subject_hours,
            subject_styles=document.subject_styles,
            project_password=document.project_password,
        )

    def to_document(self) -> TimetableDocument:
        return TimetableDocument(
            school_info=self.school_info,
            teachers=self.teachers,
            rooms=self.rooms,
            subjects=list(self.subjects),
            timetable=self.placements,
            subject_styles=dict(self.subject_styles),
            subject_hours=dict(self.subject_hours),
            teacher_config=self.layout,
            subject_configs=self.policies.to_dict(),
            project_password=self.project_password,
            version=get_settings().document_version,
        )

    def import_document(self, document: TimetableDocument) -> ScanReport:
        """
        Replace the whole state with a document and scan it for conflicts.

        The new state is built completely before anything is swapped in, so
        a failure while building leaves the current state as it was.
        """
        incoming = TimetableStore.from_document(document)

        self.school_info = incoming.school_info
        self.layout = incoming.layout
        self.subjects = incoming.subjects
        self.subject_hours = incoming.subject_hours
        self.subject_styles = incoming.subject_styles
        self.policies = incoming.policies
        self.project_password = incoming.project_password
        self._teachers = incoming._teachers
        self._rooms = incoming._rooms
        self._placements = incoming._placements

        report = self.scan()
        logger.info(
            "Imported %d placements, %d in conflict",
            report.total, report.conflict_count,
        )
        return report

    # -------------------------------------------------------------------------
    # Read access
    # -------------------------------------------------------------------------

    @property
    def placements(self) -> list[Placement]:
        return list(self._placements.values())

    @property
    def teachers(self) -> list[Teacher]:
        return list(self._teachers.values())

    @property
    def rooms(self) -> list[Room]:
        return list(self._rooms.values())

    @property
    def room_map(self) -> dict[str, Room]:
        return dict(self._rooms)

    def get_placement(self, placement_id: str) -> Optional[Placement]:
        return self._placements.get(placement_id)

    def get_teacher(self, teacher_id: str) -> Optional[Teacher]:
        return self._teachers.get(teacher_id)

    def get_room(self, room_id: str) -> Optional[Room]:
        return self._rooms.get(room_id)

    def placements_at(self, day: Day, period: int) -> list[Placement]:
        return [p for p in self._placements.values() if p.day == day and p.period == period]

    def placements_for_teacher(self, teacher_id: str) -> list[Placement]:
        return [p for p in self._placements.values() if p.teacher_id == teacher_id]

    def placements_for_class(self, class_id: str) -> list[Placement]:
        return [p for p in self._placements.values() if p.class_id == class_id]

    def placements_for_room(self, room_id: str) -> list[Placement]:
        return [p for p in self._placements.values() if p.room_id == room_id]

    def class_list(self) -> list[str]:
        """Concrete class ids of every grade, from classes_per_grade."""
        classes: list[str] = []
        for grade, count in sorted(self.school_info.classes_per_grade.items()):
            classes.extend(make_class_id(grade, c) for c in range(1, count + 1))
        return classes

    def required_hours(self, subject: str) -> int:
        """Weekly sessions a subject needs when an assignment gives none."""
        return self.subject_hours.get(subject) or get_settings().default_subject_hours

    def teacher_load(self, teacher_id: str) -> tuple[int, int]:
        """(placed sessions, weekly cap) for a teacher."""
        teacher = self._teachers.get(teacher_id)
        cap = get_settings().default_max_hours
        if teacher is not None and teacher.max_hours is not None:
            cap = teacher.max_hours
        return len(self.placements_for_teacher(teacher_id)), cap

    # -------------------------------------------------------------------------
    # Conflict queries
    # -------------------------------------------------------------------------

    def check_conflict(self, candidate: Placement) -> Conflict:
        return check_conflict(candidate, self._placements.values(), self.policies, self._rooms)

    def check_batch(self, candidates: Iterable[Placement]) -> list[tuple[Placement, Conflict]]:
        return check_batch(candidates, self._placements.values(), self.policies, self._rooms)

    def scan(self) -> ScanReport:
        return scan_timetable(self._placements.values(), self.policies, self._rooms)

    def unfulfilled_blocks(self, teacher_id: str) -> list[ClassBlock]:
        def hours_for(assignment: TeacherAssignment) -> int:
            if assignment.hours is not None:
                return assignment.hours
            return self.required_hours(assignment.subject)

        return derive_unfulfilled_blocks(
            self._teachers.get(teacher_id),
            self._placements.values(),
            self.school_info,
            self.layout,
            hours_for,
        )

    # -------------------------------------------------------------------------
    # Placement mutators
    # -------------------------------------------------------------------------

    def add_placement(self, placement: Placement) -> None:
        """Add a placement. An existing placement with the same id is replaced."""
        if placement.id in self._placements:
            logger.warning("Placement %s already exists, replacing it", placement.id)
        self._placements[placement.id] = placement
        logger.debug("Added placement %s", placement)

    def remove_placement(self, placement_id: str) -> bool:
        """Remove a placement. Unknown ids are ignored; returns whether one was removed."""
        removed = self._placements.pop(placement_id, None)
        if removed is not None:
            logger.debug("Removed placement %s", removed)
        return removed is not None

    def update_placement(self, placement: Placement) -> bool:
        """Replace a placement by id. Unknown ids are ignored."""
        if placement.id not in self._placements:
            return False
        self._placements[placement.id] = placement
        logger.debug("Updated placement %s", placement)
        return True

    def place(self, candidate: Placement, force: bool = False) -> PlacementResult:
        """
        Check a candidate and write it unless it conflicts.

        With ``force`` a conflicting candidate is written anyway (the user
        acknowledged the conflict). Re-placing an existing id moves it.
        """
        conflict = self.check_conflict(candidate)

        if not conflict.has_conflict:
            outcome = PlacementOutcome.ACCEPTED
        elif force:
            outcome = PlacementOutcome.OVERRIDDEN
            logger.info("Overriding conflict for %s: %s", candidate, conflict.reason)
        else:
            return PlacementResult(candidate, PlacementOutcome.REJECTED, conflict)

        if candidate.id in self._placements:
            self.update_placement(candidate)
        else:
            self.add_placement(candidate)
        return PlacementResult(candidate, outcome, conflict)

    def place_batch(self, candidates: Iterable[Placement], force: bool = False) -> BatchResult:
        """
        Place several candidates at once, all or nothing.

        The batch is checked as a whole (later items see earlier ones), and
        nothing is written if any item conflicts, unless ``force`` is set.
        """
        candidates = list(candidates)
        results = self.check_batch(candidates)
        has_conflict = any(c.has_conflict for _, c in results)

        if has_conflict and not force:
            return BatchResult(PlacementOutcome.REJECTED, results)

        for candidate in candidates:
            self._placements[candidate.id] = candidate
        logger.debug("Placed batch of %d placements", len(candidates))

        outcome = PlacementOutcome.OVERRIDDEN if has_conflict else PlacementOutcome.ACCEPTED
        return BatchResult(outcome, results)

    def clear_teacher_schedule(self, teacher_id: str) -> int:
        """Remove every placement of a teacher. Returns how many were removed."""
        doomed = [pid for pid, p in self._placements.items() if p.teacher_id == teacher_id]
        for pid in doomed:
            del self._placements[pid]
        return len(doomed)

    # -------------------------------------------------------------------------
    # Policy mutators
    # -------------------------------------------------------------------------

    def grant_grade_overlap(self, subject: str, grade: int) -> bool:
        return self.policies.grant_grade_overlap(subject, grade)

    def allow_overlap(self, subject: str) -> bool:
        return self.policies.allow_overlap(subject)

    # -------------------------------------------------------------------------
    # Registry mutators
    # -------------------------------------------------------------------------

    def add_teacher(self, teacher: Teacher) -> None:
        self._teachers[teacher.id] = teacher

    def update_teacher(self, teacher: Teacher) -> bool:
        if teacher.id not in self._teachers:
            return False
        self._teachers[teacher.id] = teacher
        return True

    def remove_teacher(self, teacher_id: str) -> bool:
        """Delete a teacher together with all of their placements."""
        if self._teachers.pop(teacher_id, None) is None:
            return False
        removed = self.clear_teacher_schedule(teacher_id)
        logger.debug("Removed teacher %s and %d placements", teacher_id, removed)
        return True

    def add_room(self, room: Room) -> None:
        self._rooms[room.id] = room

    def update_room(self, room: Room) -> bool:
        if room.id not in self._rooms:
            return False
        self._rooms[room.id] = room
        return True

    def remove_room(self, room_id: str) -> bool:
        """
        Delete a room from the registry.

        Placements keep their room id; an unknown room no longer constrains
        anything.
        """
        return self._rooms.pop(room_id, None) is not None

    def add_subject(self, subject: str) -> bool:
        if subject in self.subjects:
            return False
        self.subjects.append(subject)
        return True

    def rename_subject(self, old: str, new: str) -> None:
        """Rename a subject everywhere it is referenced."""
        if old == new:
            return

        self.subjects = [new if s == old else s for s in self.subjects]

        for teacher in self._teachers.values():
            if old in teacher.subjects:
                assignments = [
                    a.model_copy(update={"subject": new}) if a.subject == old else a
                    for a in teacher.assignments
                ]
                self._teachers[teacher.id] = teacher.model_copy(update={"assignments": assignments})

        for pid, placement in self._placements.items():
            if placement.subject == old:
                self._placements[pid] = placement.model_copy(update={"subject": new})

        if old in self.subject_styles:
            self.subject_styles[new] = self.subject_styles.pop(old)
        if old in self.subject_hours:
            self.subject_hours[new] = self.subject_hours.pop(old)
        self.policies.rename(old, new)
        logger.debug("Renamed subject %s to %s", old, new)

"""
Class identifier parsing.

A class identifier is the string key naming who is being taught:

- a concrete class, ``"<grade>-<classNumber>"`` (e.g. ``"3-2"``)
- a sentinel, ``"미배정"`` (unassigned) or ``"기타"`` (other)
- a grade-wide aggregate containing ``"레벨"`` (level) or ``"통합"``
  (integrated), e.g. ``"4레벨"``: the whole grade's students at once

The grade is the first run of digits in the identifier, 0 when there is none.
These rules are the compatibility contract for saved documents.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Optional


UNASSIGNED = "미배정"
OTHER = "기타"
SENTINELS = frozenset({UNASSIGNED, OTHER})

LEVEL_MARKER = "레벨"
INTEGRATED_MARKER = "통합"
AGGREGATE_MARKERS = (LEVEL_MARKER, INTEGRATED_MARKER)

_GRADE_PATTERN = re.compile(r"(\d+)")


class ClassKind(str, Enum):
    """What population a class identifier refers to."""
    CONCRETE = "concrete"
    AGGREGATE = "aggregate"
    SENTINEL = "sentinel"


@dataclass(frozen=True)
class ClassRef:
    """Parsed form of a class identifier."""
    raw: str
    grade: int
    class_number: Optional[int]
    kind: ClassKind

    @property
    def is_sentinel(self) -> bool:
        return self.kind is ClassKind.SENTINEL

    @property
    def is_aggregate(self) -> bool:
        return self.kind is ClassKind.AGGREGATE

    def same_population(self, other: ClassRef) -> bool:
        """
        Whether two identifiers cover the same students.

        Equal identifiers always do. Otherwise both must resolve to the same
        known grade and at least one must be a grade-wide aggregate.
        Sentinels never share a population with anything.
        """
        if self.is_sentinel or other.is_sentinel:
            return False
        if self.raw == other.raw:
            return True
        if self.grade == 0 or other.grade == 0 or self.grade != other.grade:
            return False
        return self.is_aggregate or other.is_aggregate

    def __str__(self) -> str:
        return self.raw


def extract_grade(class_id: str) -> int:
    """Leading grade number of a class identifier (0 if none)."""
    match = _GRADE_PATTERN.search(class_id)
    return int(match.group(1)) if match else 0


def _extract_class_number(class_id: str) -> Optional[int]:
    if "-" not in class_id:
        return None
    tail = class_id.split("-")[1]
    return int(tail) if tail.isdigit() else None


@lru_cache(maxsize=4096)
def parse_class_id(class_id: str) -> ClassRef:
    """Parse a class identifier into a ClassRef."""
    if class_id in SENTINELS:
        return ClassRef(raw=class_id, grade=0, class_number=None, kind=ClassKind.SENTINEL)

    if any(marker in class_id for marker in AGGREGATE_MARKERS):
        kind = ClassKind.AGGREGATE
        class_number = None
    else:
        kind = ClassKind.CONCRETE
        class_number = _extract_class_number(class_id)

    return ClassRef(
        raw=class_id,
        grade=extract_grade(class_id),
        class_number=class_number,
        kind=kind,
    )


def is_grade_row(target: str) -> bool:
    """Whether a target names a whole grade row rather than one class."""
    return "-" not in target and LEVEL_MARKER not in target


def make_class_id(grade_row: str | int, class_number: int) -> str:
    return f"{grade_row}-{class_number}"

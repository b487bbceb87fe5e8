"""
Class (population) double-booking check.

Two placements collide on population when their class identifiers are equal,
or when they belong to the same grade and one of them is a grade-wide
aggregate ("4레벨", "3통합"): an aggregate takes every student of its grade.

Colliding placements with different subjects are always reported. Only
same-subject collisions can be allowed, and only by the subject's overlap
policy; that is what leveled groups and co-teaching need, while two unrelated
subjects for the same students at once is never valid.
"""

from __future__ import annotations

from timetable.data.models import Placement
from timetable.policy import OverlapPolicyStore

from .core import (
    CLASS_DIFFERENT_SUBJECT_REASON,
    CLASS_SAME_SUBJECT_REASON,
    ConflictIssue,
    ConflictKind,
)


def find_population_collisions(candidate: Placement, others: list[Placement]) -> list[Placement]:
    """Placements in ``others`` that teach the same students as the candidate."""
    ref = candidate.class_ref
    if not candidate.class_id or ref.is_sentinel:
        return []
    return [p for p in others if ref.same_population(p.class_ref)]


def overlap_permitted(
    candidate: Placement,
    existing: Placement,
    policies: OverlapPolicyStore,
) -> bool:
    """Whether a same-subject collision is allowed by the subject's policy."""
    if candidate.subject != existing.subject:
        return False
    return (
        policies.is_overlap_allowed(candidate.subject, candidate.class_ref.grade)
        or policies.is_overlap_allowed(existing.subject, existing.class_ref.grade)
    )


def check_class(
    candidate: Placement,
    others: list[Placement],
    policies: OverlapPolicyStore,
) -> list[ConflictIssue]:
    """
    Report unallowed population collisions.

    Returns at most two issues: one for different-subject collisions and one
    for same-subject collisions the policy does not permit.
    """
    different: list[Placement] = []
    same: list[Placement] = []

    for existing in find_population_collisions(candidate, others):
        if candidate.subject != existing.subject:
            different.append(existing)
        elif not overlap_permitted(candidate, existing, policies):
            same.append(existing)

    issues = []
    if different:
        issues.append(ConflictIssue(
            kind=ConflictKind.CLASS_DIFFERENT_SUBJECT,
            message=CLASS_DIFFERENT_SUBJECT_REASON,
            placements=different,
        ))
    if same:
        issues.append(ConflictIssue(
            kind=ConflictKind.CLASS_SAME_SUBJECT,
            message=CLASS_SAME_SUBJECT_REASON,
            placements=same,
        ))
    return issues

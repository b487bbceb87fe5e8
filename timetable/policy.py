"""
Per-subject overlap policy.

A subject may allow simultaneous placements on the same population, either
everywhere (``allow_overlap``) or only for some grades
(``allow_overlap_by_grade``). Permissions only ever grow: the editor asks the
user once and remembers the answer for the rest of the document's life, so
there is no revoke operation.
"""

from __future__ import annotations

import logging
from typing import Mapping, Optional

from .data.models import SubjectConfig

logger = logging.getLogger(__name__)


class OverlapPolicyStore:
    """Overlap permissions keyed by subject name."""

    def __init__(self, configs: Optional[Mapping[str, SubjectConfig]] = None):
        self._configs: dict[str, SubjectConfig] = {
            subject: config.model_copy(deep=True)
            for subject, config in (configs or {}).items()
        }

    def config_for(self, subject: str) -> SubjectConfig:
        """Current config for a subject (a default one if never configured)."""
        return self._configs.get(subject) or SubjectConfig()

    def is_overlap_allowed(self, subject: str, grade: int) -> bool:
        config = self._configs.get(subject)
        if config is None:
            return False
        return config.allow_overlap or grade in config.allow_overlap_by_grade

    def grant_grade_overlap(self, subject: str, grade: int) -> bool:
        """
        Allow overlap of ``subject`` within ``grade``.

        Idempotent. Returns True if the permission is new.
        """
        config = self._configs.setdefault(subject, SubjectConfig())
        if grade in config.allow_overlap_by_grade:
            return False
        config.allow_overlap_by_grade.append(grade)
        logger.info("Granted overlap for subject %s in grade %d", subject, grade)
        return True

    def allow_overlap(self, subject: str) -> bool:
        """Allow overlap of ``subject`` in every grade. Returns True if new."""
        config = self._configs.setdefault(subject, SubjectConfig())
        if config.allow_overlap:
            return False
        config.allow_overlap = True
        logger.info("Granted overlap for subject %s in all grades", subject)
        return True

    def rename(self, old: str, new: str) -> None:
        if old in self._configs:
            self._configs[new] = self._configs.pop(old)

    def to_dict(self) -> dict[str, SubjectConfig]:
        return {subject: config.model_copy(deep=True) for subject, config in self._configs.items()}

    def __contains__(self, subject: object) -> bool:
        return subject in self._configs

    def __len__(self) -> int:
        return len(self._configs)

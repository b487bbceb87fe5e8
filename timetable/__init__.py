"""Timetable editor core - placement conflict checks for school timetables."""

from .conflicts import Conflict, ConflictKind, check_batch, check_conflict, scan_timetable
from .policy import OverlapPolicyStore
from .store import PlacementOutcome, TimetableStore
from .blocks import ClassBlock, derive_unfulfilled_blocks
from .cli import app as cli_app

__all__ = [
    # Conflict engine
    "Conflict",
    "ConflictKind",
    "check_conflict",
    "check_batch",
    "scan_timetable",
    # State
    "OverlapPolicyStore",
    "TimetableStore",
    "PlacementOutcome",
    # Required blocks
    "ClassBlock",
    "derive_unfulfilled_blocks",
    # CLI
    "cli_app",
]

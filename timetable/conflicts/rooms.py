"""Room capacity check."""

from __future__ import annotations

from typing import Mapping, Optional

from timetable.data.models import Placement, Room

from .core import ConflictIssue, ConflictKind, room_reason


def room_occupants(candidate: Placement, others: list[Placement]) -> list[Placement]:
    return [p for p in others if p.room_id == candidate.room_id]


def check_room(
    candidate: Placement,
    others: list[Placement],
    rooms: Mapping[str, Room],
) -> Optional[ConflictIssue]:
    """
    A room hosts at most ``capacity`` placements per (day, period).

    A candidate without a room, or with a room id the registry does not know,
    is unconstrained. When the room is already full every occupant is listed.
    """
    if not candidate.room_id:
        return None

    room = rooms.get(candidate.room_id)
    if room is None:
        return None

    occupants = room_occupants(candidate, others)
    # An empty room never conflicts, even with capacity 0
    if not occupants or len(occupants) < room.capacity:
        return None

    return ConflictIssue(
        kind=ConflictKind.ROOM_CAPACITY,
        message=room_reason(room.name),
        placements=occupants,
    )

"""Typed models exposed by the census service."""

from .profile import (
    NURSING_CENSUS,
    PROFILES,
    ROUNDING,
    ReportProfile,
    RoomShape,
    get_profile,
    get_room_shape,
)
from .record import MARKED_LOS_MAX, MARKED_LOS_MIN, CensusRecord, split_room
from .sorting import (
    SortColumn,
    SortKey,
    SortKeys,
    reset_sort,
    sort_position,
    toggle_sort,
)

__all__ = [
    "CensusRecord",
    "MARKED_LOS_MAX",
    "MARKED_LOS_MIN",
    "NURSING_CENSUS",
    "PROFILES",
    "ROUNDING",
    "ReportProfile",
    "RoomShape",
    "SortColumn",
    "SortKey",
    "SortKeys",
    "get_profile",
    "get_room_shape",
    "reset_sort",
    "sort_position",
    "split_room",
    "toggle_sort",
]

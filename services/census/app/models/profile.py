"""Report variants: which room tokens, anchors and columns a census uses.

Different wards paste slightly different report layouts. A
:class:`ReportProfile` captures everything the parser and the table need to
know about one layout, so the shape of a room token or the default sort is a
named configuration rather than a hard-coded rule.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from typing import Iterable, Literal

from .sorting import SortColumn, SortKey

__all__ = [
    "LETTER_DIGITS",
    "NURSING_CENSUS",
    "PROFILES",
    "ROOM_SHAPES",
    "ROUNDING",
    "THREE_DIGIT",
    "ReportProfile",
    "RoomPriority",
    "RoomShape",
    "get_profile",
    "get_room_shape",
]

RoomPriority = Literal["token", "shape"]


@dataclass(frozen=True, slots=True)
class RoomShape:
    """A named, fully anchored pattern a room token must match."""

    name: str
    pattern: re.Pattern[str]

    def matches(self, token: str) -> bool:
        return self.pattern.fullmatch(token) is not None


LETTER_DIGITS = RoomShape("letter_digits", re.compile(r"[A-Z]\d+"))
THREE_DIGIT = RoomShape("three_digit", re.compile(r"\d{3}"))

ROOM_SHAPES: dict[str, RoomShape] = {
    shape.name: shape for shape in (LETTER_DIGITS, THREE_DIGIT)
}


def get_room_shape(name: str) -> RoomShape:
    try:
        return ROOM_SHAPES[name]
    except KeyError:
        raise KeyError(f"Unknown room shape '{name}'") from None


@dataclass(frozen=True, slots=True)
class ReportProfile:
    """Parsing and display configuration for one report layout.

    ``room_priority`` decides between two candidate room tokens. ``"token"``
    takes the leftmost token matching any shape (shapes are tried in order
    for each token). ``"shape"`` exhausts the whole line against the first
    shape before trying the next one.
    """

    name: str
    room_shapes: tuple[RoomShape, ...]
    columns: tuple[SortColumn, ...]
    default_sort: tuple[SortKey, ...]
    room_priority: RoomPriority = "token"
    name_anchor: str | None = "NURS"
    unit_label: str | None = None
    comment_marker: str = "#"
    non_bed_markers: frozenset[str] = field(default_factory=lambda: frozenset({"Days"}))
    patient_number_digits: int = 9

    @property
    def anchor_unit(self) -> str:
        """Unit assigned to lines that carry the name anchor."""

        return self.unit_label or self.name_anchor or ""

    @property
    def room_shape_names(self) -> tuple[str, ...]:
        return tuple(shape.name for shape in self.room_shapes)

    def with_room_shapes(self, names: Iterable[str]) -> "ReportProfile":
        shapes = tuple(get_room_shape(name) for name in names)
        if not shapes:
            raise ValueError("A report profile needs at least one room shape")
        return replace(self, room_shapes=shapes)

    def with_comment_marker(self, marker: str) -> "ReportProfile":
        return replace(self, comment_marker=marker)


ROUNDING = ReportProfile(
    name="rounding",
    room_shapes=(LETTER_DIGITS, THREE_DIGIT),
    columns=(
        SortColumn.NAME,
        SortColumn.ROOM,
        SortColumn.BED,
        SortColumn.LOS,
        SortColumn.PHYSICIANS,
    ),
    default_sort=(SortKey(SortColumn.ROOM), SortKey(SortColumn.BED)),
)

NURSING_CENSUS = ReportProfile(
    name="nursing_census",
    room_shapes=(LETTER_DIGITS,),
    columns=(
        SortColumn.NAME,
        SortColumn.UNIT,
        SortColumn.ROOM,
        SortColumn.BED,
        SortColumn.LOS,
        SortColumn.PATIENT_NUMBER,
        SortColumn.PHYSICIANS,
    ),
    default_sort=(
        SortKey(SortColumn.LOS),
        SortKey(SortColumn.UNIT),
        SortKey(SortColumn.ROOM),
        SortKey(SortColumn.BED),
    ),
)

PROFILES: dict[str, ReportProfile] = {
    profile.name: profile for profile in (ROUNDING, NURSING_CENSUS)
}


def get_profile(name: str) -> ReportProfile:
    """Return the built-in profile called ``name``."""

    try:
        return PROFILES[name]
    except KeyError:
        raise KeyError(f"Unknown report profile '{name}'") from None

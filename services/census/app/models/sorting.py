"""Sort columns and the caller-owned sort-key list."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from .profile import ReportProfile

__all__ = [
    "SortColumn",
    "SortKey",
    "SortKeys",
    "reset_sort",
    "sort_position",
    "toggle_sort",
]


class SortColumn(str, Enum):
    """Columns a census table can be ordered by."""

    NAME = "name"
    UNIT = "unit"
    ROOM = "room"
    BED = "bed"
    LOS = "los"
    PATIENT_NUMBER = "patient_number"
    PHYSICIANS = "physicians"

    @property
    def heading(self) -> str:
        return _HEADINGS[self]

    def __str__(self) -> str:  # pragma: no cover - trivial wrapper
        return self.value


_HEADINGS = {
    SortColumn.NAME: "Name",
    SortColumn.UNIT: "Unit",
    SortColumn.ROOM: "Room",
    SortColumn.BED: "Bed",
    SortColumn.LOS: "LOS",
    SortColumn.PATIENT_NUMBER: "Patient #",
    SortColumn.PHYSICIANS: "Physicians + Notes",
}


@dataclass(frozen=True, slots=True)
class SortKey:
    """One entry of the sort order; the first key in a list is the primary."""

    column: SortColumn
    ascending: bool = True

    def flipped(self) -> "SortKey":
        return replace(self, ascending=not self.ascending)


SortKeys = tuple[SortKey, ...]


def sort_position(keys: Sequence[SortKey], column: SortColumn) -> int | None:
    """Return the 0-based position of ``column`` in ``keys``, or ``None``."""

    for index, key in enumerate(keys):
        if key.column is column:
            return index
    return None


def toggle_sort(keys: Sequence[SortKey], column: SortColumn) -> SortKeys:
    """Return ``keys`` with ``column`` toggled.

    A column already in the list keeps its position and has its direction
    flipped. A new column becomes the primary key, ascending, and every
    existing key moves back one place.
    """

    position = sort_position(keys, column)
    if position is None:
        return (SortKey(column, ascending=True), *keys)
    updated = list(keys)
    updated[position] = updated[position].flipped()
    return tuple(updated)


def reset_sort(profile: "ReportProfile") -> SortKeys:
    """Return the default sort order of ``profile``."""

    return tuple(profile.default_sort)

"""The parsed census record."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any

__all__ = [
    "MARKED_LOS_MAX",
    "MARKED_LOS_MIN",
    "CensusRecord",
    "split_room",
]

MARKED_LOS_MIN = 1.0
MARKED_LOS_MAX = 3.3

_ROOM_PARTS = re.compile(r"^([A-Za-z]*)(\d*)")


def split_room(room: str) -> tuple[str, int]:
    """Return the leading letters of ``room`` and the integer that follows them."""

    match = _ROOM_PARTS.match(room)
    if match is None:
        return "", 0
    prefix, digits = match.groups()
    return prefix, int(digits) if digits else 0


@dataclass(frozen=True, slots=True)
class CensusRecord:
    """One census line broken into its fields.

    ``length_of_stay`` is mandatory: a line without a usable LOS never becomes
    a record.
    """

    raw_name: str
    room: str
    length_of_stay: float
    unit: str = ""
    bed: str = ""
    patient_number: str = ""
    trailing_text: str = ""

    def __post_init__(self) -> None:
        los = self.length_of_stay
        if not math.isfinite(los) or los < 0:
            raise ValueError(f"length_of_stay must be a non-negative number, got {los!r}")

    @property
    def marked(self) -> bool:
        """``True`` when the stay falls inside the emphasis window."""

        return MARKED_LOS_MIN <= self.length_of_stay <= MARKED_LOS_MAX

    @property
    def room_sort_key(self) -> tuple[str, int]:
        return split_room(self.room)

    def as_dict(self) -> dict[str, Any]:
        return {
            "raw_name": self.raw_name,
            "unit": self.unit,
            "room": self.room,
            "bed": self.bed,
            "patient_number": self.patient_number,
            "length_of_stay": self.length_of_stay,
            "trailing_text": self.trailing_text,
            "marked": self.marked,
        }

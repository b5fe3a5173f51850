"""Census pipeline: pasted text in, ordered and decorated rows out.

The pipeline performs the following steps on every request:

1. Split the text into lines and parse each one independently
   (:func:`~.line_parser.parse_lines`); unparseable lines are dropped.
2. Order the records with the caller's sort keys, optionally placing stays
   under one day first (:func:`~.arrange.arrange`).
3. Decorate each row for display according to the marking mode and describe
   the profile's columns with their current sort position.

Nothing is cached between calls; the caller passes the sort keys in and gets
the effective keys back.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Sequence

from ..logging import get_logger, record_parse_summary
from ..models.profile import ROUNDING, ReportProfile
from ..models.record import CensusRecord
from ..models.sorting import SortColumn, SortKey, SortKeys, reset_sort, sort_position
from .arrange import arrange, los_below
from .line_parser import parse_lines

__all__ = [
    "MARK_PREFIX",
    "CensusPipeline",
    "CensusRow",
    "CensusView",
    "ColumnState",
    "MarkingMode",
    "describe_columns",
]

logger = get_logger(__name__)

MARK_PREFIX = "*** "


class MarkingMode(str, Enum):
    """How marked records are emphasised in the table."""

    STARS = "stars"
    HIGHLIGHT = "highlight"
    NONE = "none"


@dataclass(frozen=True, slots=True)
class CensusRow:
    """A record in display position with its marking decoration applied."""

    index: int
    record: CensusRecord
    display_name: str
    highlighted: bool

    @classmethod
    def decorate(cls, index: int, record: CensusRecord, marking: MarkingMode) -> "CensusRow":
        starred = marking is MarkingMode.STARS and record.marked
        return cls(
            index=index,
            record=record,
            display_name=f"{MARK_PREFIX}{record.raw_name}" if starred else record.raw_name,
            highlighted=marking is MarkingMode.HIGHLIGHT and record.marked,
        )


@dataclass(frozen=True, slots=True)
class ColumnState:
    """Header metadata: a column and where it sits in the sort order."""

    column: SortColumn
    title: str
    position: int | None
    ascending: bool | None


@dataclass(frozen=True, slots=True)
class CensusView:
    rows: tuple[CensusRow, ...]
    sort_keys: SortKeys
    columns: tuple[ColumnState, ...]
    rejected: int

    @property
    def records(self) -> list[CensusRecord]:
        return [row.record for row in self.rows]


def describe_columns(profile: ReportProfile, keys: Sequence[SortKey]) -> tuple[ColumnState, ...]:
    states = []
    for column in profile.columns:
        position = sort_position(keys, column)
        states.append(
            ColumnState(
                column=column,
                title=column.heading,
                position=position,
                ascending=None if position is None else keys[position].ascending,
            )
        )
    return tuple(states)


class CensusPipeline:
    """Parse, order and decorate census text for one report profile."""

    def __init__(self, profile: ReportProfile = ROUNDING) -> None:
        self.profile = profile

    def build(
        self,
        text: str,
        keys: Sequence[SortKey] | None = None,
        *,
        prioritize_low_los: bool = True,
        marking: MarkingMode = MarkingMode.STARS,
    ) -> CensusView:
        sort_keys: SortKeys = reset_sort(self.profile) if keys is None else tuple(keys)
        outcome = parse_lines(text, self.profile)
        partition = los_below() if prioritize_low_los else None
        ordered = arrange(outcome.records, sort_keys, partition)

        rows = tuple(
            CensusRow.decorate(index, record, marking)
            for index, record in enumerate(ordered, start=1)
        )
        view = CensusView(
            rows=rows,
            sort_keys=sort_keys,
            columns=describe_columns(self.profile, sort_keys),
            rejected=outcome.rejected,
        )

        logger.info(
            "census_built",
            profile=self.profile.name,
            parsed=len(rows),
            rejected=outcome.rejected,
        )
        record_parse_summary(
            profile=self.profile.name,
            lines=len(text.splitlines()),
            parsed=len(rows),
            rejected=outcome.rejected,
            marked=sum(1 for row in rows if row.record.marked),
            sort_keys=[f"{key.column.value}:{'asc' if key.ascending else 'desc'}" for key in sort_keys],
            prioritized=prioritize_low_los,
        )
        return view

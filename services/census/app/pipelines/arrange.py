"""Stable multi-key ordering of census records with an optional priority split."""

from __future__ import annotations

from typing import Any, Callable, Iterable, Sequence

from ..models.record import CensusRecord
from ..models.sorting import SortColumn, SortKey

__all__ = [
    "PRIORITY_LOS_THRESHOLD",
    "Partition",
    "arrange",
    "los_below",
    "sort_records",
    "sort_value",
]

PRIORITY_LOS_THRESHOLD = 1.0

Partition = Callable[[CensusRecord], bool]

_SORT_VALUES: dict[SortColumn, Callable[[CensusRecord], Any]] = {
    SortColumn.NAME: lambda record: record.raw_name,
    SortColumn.UNIT: lambda record: record.unit,
    SortColumn.ROOM: lambda record: record.room_sort_key,
    SortColumn.BED: lambda record: record.bed,
    SortColumn.LOS: lambda record: record.length_of_stay,
    SortColumn.PATIENT_NUMBER: lambda record: record.patient_number,
    SortColumn.PHYSICIANS: lambda record: record.trailing_text,
}


def sort_value(record: CensusRecord, column: SortColumn) -> Any:
    """Return the value ``record`` is compared on for ``column``."""

    return _SORT_VALUES[column](record)


def sort_records(records: Iterable[CensusRecord], keys: Sequence[SortKey]) -> list[CensusRecord]:
    """Return ``records`` ordered by ``keys``, primary key first.

    One stable pass per key, from the least significant key to the primary
    one. Ties on every key keep their input order.
    """

    result = list(records)
    for key in reversed(keys):
        value = _SORT_VALUES[key.column]
        result.sort(key=value, reverse=not key.ascending)
    return result


def arrange(
    records: Iterable[CensusRecord],
    keys: Sequence[SortKey],
    partition: Partition | None = None,
) -> list[CensusRecord]:
    """Order ``records`` by ``keys``.

    With ``partition``, records for which it returns ``True`` are sorted and
    placed ahead of the separately sorted remainder.
    """

    if partition is None:
        return sort_records(records, keys)

    preferred: list[CensusRecord] = []
    remainder: list[CensusRecord] = []
    for record in records:
        (preferred if partition(record) else remainder).append(record)
    return sort_records(preferred, keys) + sort_records(remainder, keys)


def los_below(threshold: float = PRIORITY_LOS_THRESHOLD) -> Partition:
    """Return a predicate selecting records with a stay strictly below ``threshold``."""

    def _predicate(record: CensusRecord) -> bool:
        return record.length_of_stay < threshold

    return _predicate

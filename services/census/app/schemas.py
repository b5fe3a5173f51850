"""Request and response models for the census HTTP API."""

from __future__ import annotations

from pydantic import Field

from shared.models import CamelModel

from .models.profile import ReportProfile
from .models.record import CensusRecord
from .models.sorting import SortColumn, SortKey
from .pipelines.census_pipeline import CensusRow, CensusView, ColumnState, MarkingMode, describe_columns

__all__ = [
    "ArrangeRequest",
    "ArrangeResponse",
    "ColumnModel",
    "ProfileResponse",
    "RecordModel",
    "RowModel",
    "SortKeyModel",
    "SortKeysResponse",
    "ToggleSortRequest",
]


class SortKeyModel(CamelModel):
    column: SortColumn
    ascending: bool = True

    @classmethod
    def from_domain(cls, key: SortKey) -> "SortKeyModel":
        return cls(column=key.column, ascending=key.ascending)

    def to_domain(self) -> SortKey:
        return SortKey(self.column, self.ascending)


class RecordModel(CamelModel):
    raw_name: str
    unit: str
    room: str
    bed: str
    patient_number: str
    length_of_stay: float
    trailing_text: str
    marked: bool

    @classmethod
    def from_domain(cls, record: CensusRecord) -> "RecordModel":
        return cls.model_validate(record.as_dict())


class RowModel(CamelModel):
    index: int = Field(description="1-based position in the arranged table")
    display_name: str
    highlighted: bool
    record: RecordModel

    @classmethod
    def from_domain(cls, row: CensusRow) -> "RowModel":
        return cls(
            index=row.index,
            display_name=row.display_name,
            highlighted=row.highlighted,
            record=RecordModel.from_domain(row.record),
        )


class ColumnModel(CamelModel):
    column: SortColumn
    title: str
    position: int | None = Field(default=None, description="0-based sort position")
    ascending: bool | None = None

    @classmethod
    def from_domain(cls, state: ColumnState) -> "ColumnModel":
        return cls(
            column=state.column,
            title=state.title,
            position=state.position,
            ascending=state.ascending,
        )


class ArrangeRequest(CamelModel):
    text: str = Field(description="Pasted census text, one record per line")
    sort_keys: list[SortKeyModel] | None = Field(
        default=None, description="Sort order, primary key first; profile default when omitted"
    )
    prioritize_low_los: bool | None = None
    marking_mode: MarkingMode | None = None


class ArrangeResponse(CamelModel):
    rows: list[RowModel]
    sort_keys: list[SortKeyModel]
    columns: list[ColumnModel]
    parsed_count: int
    rejected_count: int

    @classmethod
    def from_view(cls, view: CensusView) -> "ArrangeResponse":
        return cls(
            rows=[RowModel.from_domain(row) for row in view.rows],
            sort_keys=[SortKeyModel.from_domain(key) for key in view.sort_keys],
            columns=[ColumnModel.from_domain(state) for state in view.columns],
            parsed_count=len(view.rows),
            rejected_count=view.rejected,
        )


class ToggleSortRequest(CamelModel):
    sort_keys: list[SortKeyModel] = Field(default_factory=list)
    column: SortColumn


class SortKeysResponse(CamelModel):
    sort_keys: list[SortKeyModel]


class ProfileResponse(CamelModel):
    name: str
    columns: list[ColumnModel]
    default_sort_keys: list[SortKeyModel]
    room_shapes: list[str]

    @classmethod
    def from_profile(cls, profile: ReportProfile) -> "ProfileResponse":
        return cls(
            name=profile.name,
            columns=[
                ColumnModel.from_domain(state)
                for state in describe_columns(profile, profile.default_sort)
            ],
            default_sort_keys=[SortKeyModel.from_domain(key) for key in profile.default_sort],
            room_shapes=list(profile.room_shape_names),
        )

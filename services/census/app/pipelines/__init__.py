"""Parsing and ordering pipelines for the census application."""

from .arrange import PRIORITY_LOS_THRESHOLD, arrange, los_below, sort_records
from .census_pipeline import (
    CensusPipeline,
    CensusRow,
    CensusView,
    ColumnState,
    MarkingMode,
    describe_columns,
)
from .line_parser import (
    DEFAULT_RULES,
    ExtractionRule,
    LineRejected,
    ParseOutcome,
    parse_line,
    parse_lines,
)

__all__ = [
    "CensusPipeline",
    "CensusRow",
    "CensusView",
    "ColumnState",
    "DEFAULT_RULES",
    "ExtractionRule",
    "LineRejected",
    "MarkingMode",
    "PRIORITY_LOS_THRESHOLD",
    "ParseOutcome",
    "arrange",
    "describe_columns",
    "los_below",
    "parse_line",
    "parse_lines",
    "sort_records",
]

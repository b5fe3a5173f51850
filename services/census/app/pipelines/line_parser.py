"""Turn pasted census lines into :class:`CensusRecord` objects.

A line is processed by an ordered list of named extraction rules. Each rule
reads what earlier rules left on a :class:`LineContext` and either records a
field or rejects the line. Every rule delegates to a small ``extract_*`` /
``find_*`` helper that can be exercised on its own.

Extraction is anchored on patterns and keywords rather than column
positions: the room is the first token of an accepted shape, the length of
stay is the first ``<number> Days`` match and the name is whatever precedes
the room (cut at the profile's name anchor).
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Callable, NamedTuple, Sequence

from shared.observability.logger import get_logger

from ..models.profile import ROUNDING, ReportProfile
from ..models.record import CensusRecord, split_room

__all__ = [
    "DEFAULT_RULES",
    "LOS_PATTERN",
    "ExtractionRule",
    "LineContext",
    "LineRejected",
    "LineSkipped",
    "ParseOutcome",
    "extract_bed",
    "extract_length_of_stay",
    "extract_name",
    "extract_patient_number",
    "extract_trailing_text",
    "extract_unit",
    "find_room",
    "parse_line",
    "parse_lines",
]

logger = get_logger(__name__)

LOS_PATTERN = re.compile(r"(\d+\.?\d*)\s*Days")


class LineRejected(ValueError):
    """Raised by an extraction rule when a line cannot become a record."""

    def __init__(self, rule: str, reason: str) -> None:
        super().__init__(f"{rule}: {reason}")
        self.rule = rule
        self.reason = reason


class LineSkipped(LineRejected):
    """Raised for blank and comment lines, which are not parse failures."""


@dataclass(slots=True)
class LineContext:
    """State shared by the rules while a single line is processed."""

    line: str
    profile: ReportProfile
    text: str = ""
    tokens: list[str] = field(default_factory=list)
    room_index: int | None = None
    length_of_stay: float | None = None
    room: str = ""
    bed: str = ""
    raw_name: str = ""
    unit: str = ""
    patient_number: str = ""
    trailing_text: str = ""

    def to_record(self) -> CensusRecord:
        if self.length_of_stay is None:
            raise LineRejected("record", "length of stay was never extracted")
        if self.room_index is None:
            raise LineRejected("record", "room was never located")
        return CensusRecord(
            raw_name=self.raw_name,
            unit=self.unit,
            room=self.room,
            bed=self.bed,
            patient_number=self.patient_number,
            length_of_stay=self.length_of_stay,
            trailing_text=self.trailing_text,
        )


@dataclass(frozen=True, slots=True)
class ExtractionRule:
    """A named step applied to a :class:`LineContext`."""

    name: str
    apply: Callable[[LineContext], None]


class ParseOutcome(NamedTuple):
    records: list[CensusRecord]
    rejected: int


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------


def extract_length_of_stay(text: str) -> float | None:
    """Return the number in the first ``<number> Days`` match of ``text``."""

    match = LOS_PATTERN.search(text)
    if match is None:
        return None
    try:
        value = float(match.group(1))
    except ValueError:
        return None
    if not math.isfinite(value) or value < 0:
        return None
    return value


def find_room(tokens: Sequence[str], profile: ReportProfile) -> int | None:
    """Return the index of the room token in ``tokens``, or ``None``."""

    if profile.room_priority == "shape":
        for shape in profile.room_shapes:
            for index, token in enumerate(tokens):
                if shape.matches(token):
                    return index
        return None

    for index, token in enumerate(tokens):
        if any(shape.matches(token) for shape in profile.room_shapes):
            return index
    return None


def extract_bed(tokens: Sequence[str], room_index: int, profile: ReportProfile) -> str:
    """Return the token following the room unless it is missing or a marker."""

    following = room_index + 1
    if following >= len(tokens):
        return ""
    token = tokens[following]
    return "" if token in profile.non_bed_markers else token


def _name_prefix(tokens: Sequence[str], room_index: int) -> str:
    return " ".join(tokens[:room_index])


def extract_name(tokens: Sequence[str], room_index: int, profile: ReportProfile) -> str:
    """Return the text before the room, cut at the name anchor if present."""

    prefix = _name_prefix(tokens, room_index)
    anchor = profile.name_anchor
    if anchor and anchor in prefix:
        prefix = prefix.split(anchor, 1)[0]
    return prefix.strip()


def extract_unit(tokens: Sequence[str], room_index: int, profile: ReportProfile) -> str:
    """Return the anchor's unit label, falling back to the room's letter prefix."""

    anchor = profile.name_anchor
    if anchor and anchor in tokens[:room_index]:
        return profile.anchor_unit
    prefix, _ = split_room(tokens[room_index])
    return prefix


@lru_cache(maxsize=8)
def _patient_number_pattern(digits: int) -> re.Pattern[str]:
    return re.compile(rf"(?<!\S)\d{{{digits}}}(?!\S)")


def extract_patient_number(text: str, digits: int = 9) -> str:
    """Return the first standalone token of exactly ``digits`` digits."""

    match = _patient_number_pattern(digits).search(text)
    return match.group(0) if match else ""


def extract_trailing_text(text: str) -> str:
    """Return everything after the last ``<number> Days`` match, trimmed."""

    last_end = None
    for match in LOS_PATTERN.finditer(text):
        last_end = match.end()
    if last_end is None:
        return ""
    return text[last_end:].strip()


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------


def _strip_rule(ctx: LineContext) -> None:
    ctx.text = ctx.line.strip()
    if not ctx.text:
        raise LineSkipped("strip", "blank line")
    marker = ctx.profile.comment_marker
    if marker and ctx.text.startswith(marker):
        raise LineSkipped("strip", "comment line")


def _length_of_stay_rule(ctx: LineContext) -> None:
    value = extract_length_of_stay(ctx.text)
    if value is None:
        raise LineRejected("length_of_stay", "no '<number> Days' value")
    ctx.length_of_stay = value


def _tokenize_rule(ctx: LineContext) -> None:
    ctx.tokens = ctx.text.split()


def _room_rule(ctx: LineContext) -> None:
    index = find_room(ctx.tokens, ctx.profile)
    if index is None:
        raise LineRejected("room", "no token matches the configured room shapes")
    ctx.room_index = index
    ctx.room = ctx.tokens[index]


def _located_room(ctx: LineContext, rule: str) -> int:
    if ctx.room_index is None:
        raise LineRejected(rule, "room must be located first")
    return ctx.room_index


def _bed_rule(ctx: LineContext) -> None:
    ctx.bed = extract_bed(ctx.tokens, _located_room(ctx, "bed"), ctx.profile)


def _name_rule(ctx: LineContext) -> None:
    ctx.raw_name = extract_name(ctx.tokens, _located_room(ctx, "name"), ctx.profile)


def _unit_rule(ctx: LineContext) -> None:
    ctx.unit = extract_unit(ctx.tokens, _located_room(ctx, "unit"), ctx.profile)


def _patient_number_rule(ctx: LineContext) -> None:
    ctx.patient_number = extract_patient_number(ctx.text, ctx.profile.patient_number_digits)


def _trailing_text_rule(ctx: LineContext) -> None:
    ctx.trailing_text = extract_trailing_text(ctx.text)


DEFAULT_RULES: tuple[ExtractionRule, ...] = (
    ExtractionRule("strip", _strip_rule),
    ExtractionRule("length_of_stay", _length_of_stay_rule),
    ExtractionRule("tokenize", _tokenize_rule),
    ExtractionRule("room", _room_rule),
    ExtractionRule("bed", _bed_rule),
    ExtractionRule("name", _name_rule),
    ExtractionRule("unit", _unit_rule),
    ExtractionRule("patient_number", _patient_number_rule),
    ExtractionRule("trailing_text", _trailing_text_rule),
)


def _run_rules(
    line: str, profile: ReportProfile, rules: Sequence[ExtractionRule]
) -> CensusRecord:
    ctx = LineContext(line=line, profile=profile)
    for rule in rules:
        rule.apply(ctx)
    return ctx.to_record()


def parse_line(
    line: str,
    profile: ReportProfile = ROUNDING,
    *,
    rules: Sequence[ExtractionRule] = DEFAULT_RULES,
) -> CensusRecord | None:
    """Return the record for ``line`` or ``None`` when the line is rejected."""

    try:
        return _run_rules(line, profile, rules)
    except LineRejected as exc:
        if not isinstance(exc, LineSkipped):
            logger.debug("census_line_rejected", rule=exc.rule, reason=exc.reason)
        return None


def parse_lines(
    text: str,
    profile: ReportProfile = ROUNDING,
    *,
    rules: Sequence[ExtractionRule] = DEFAULT_RULES,
) -> ParseOutcome:
    """Parse every line of ``text`` independently, keeping input order.

    Blank and comment lines are skipped silently. Other lines that fail to
    parse are dropped and counted in :attr:`ParseOutcome.rejected`.
    """

    records: list[CensusRecord] = []
    rejected = 0
    for line_number, line in enumerate(text.splitlines(), start=1):
        try:
            records.append(_run_rules(line, profile, rules))
        except LineSkipped:
            continue
        except LineRejected as exc:
            rejected += 1
            logger.debug(
                "census_line_rejected",
                line_number=line_number,
                rule=exc.rule,
                reason=exc.reason,
            )
    return ParseOutcome(records=records, rejected=rejected)

# -*- coding: utf-8 -*-
"""
Cell data model shared by the watcher, the pipeline and the host adapters.

Host cell values come in several shapes (rich text segments, plain strings,
other scalars, nothing at all). They are turned into one of the RawCellValue
variants once, at the adapter boundary, so the rest of the engine never has
to guess what it is holding.
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal, Union

logger = logging.getLogger(__name__)


class FieldType(str, Enum):
    """Field types reported by the host. Only TEXT cells are previewed."""

    TEXT = "text"
    NUMBER = "number"
    SINGLE_SELECT = "single_select"
    MULTI_SELECT = "multi_select"
    DATE = "date"
    CHECKBOX = "checkbox"
    USER = "user"
    URL = "url"
    ATTACHMENT = "attachment"
    OTHER = "other"

    @classmethod
    def parse(cls, value: Any) -> "FieldType":
        """Map a host type name to a FieldType, unknown names become OTHER."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.OTHER


@dataclass(frozen=True)
class CellRef:
    """Identifies one cell: a (record, field) pair."""

    record_id: str
    field_id: str


@dataclass(frozen=True)
class FieldMeta:
    """Field descriptor supplied by the host."""

    id: str
    type: FieldType
    name: str = ""

    @property
    def is_text(self) -> bool:
        return self.type is FieldType.TEXT


@dataclass(frozen=True)
class Selection:
    """What the host currently reports as selected. Either id may be missing."""

    record_id: str | None = None
    field_id: str | None = None
    table_id: str | None = None

    @property
    def cell(self) -> CellRef | None:
        """The selected cell, or None for partial selections (e.g. a column header)."""
        if not self.record_id or not self.field_id:
            return None
        return CellRef(record_id=self.record_id, field_id=self.field_id)


class SegmentKind(str, Enum):
    TEXT = "text"
    URL = "url"
    MENTION = "mention"


@dataclass(frozen=True)
class RichSegment:
    """One run of a rich text value. `text` is what the user sees."""

    kind: SegmentKind
    text: str
    link: str | None = None


@dataclass(frozen=True)
class SegmentsValue:
    segments: tuple[RichSegment, ...] = ()
    kind: Literal["segments"] = field(default="segments", init=False)


@dataclass(frozen=True)
class TextValue:
    text: str
    kind: Literal["text"] = field(default="text", init=False)


@dataclass(frozen=True)
class ScalarValue:
    value: Any
    kind: Literal["scalar"] = field(default="scalar", init=False)


@dataclass(frozen=True)
class AbsentValue:
    kind: Literal["absent"] = field(default="absent", init=False)


RawCellValue = Union[SegmentsValue, TextValue, ScalarValue, AbsentValue]


def _segment_from_payload(item: Any) -> RichSegment | None:
    if not isinstance(item, dict):
        return None
    try:
        kind = SegmentKind(item.get("type"))
    except ValueError:
        return None
    text = item.get("text")
    if text is None:
        text = ""
    return RichSegment(kind=kind, text=str(text), link=item.get("link"))


def raw_value_from_payload(payload: Any) -> RawCellValue:
    """
    Build a RawCellValue from a decoded host payload.

    Lists are rich text segments ({"type": ..., "text": ...}); entries with an
    unknown type or an unexpected shape are dropped.
    """
    if payload is None:
        return AbsentValue()
    if isinstance(payload, str):
        return TextValue(payload)
    if isinstance(payload, list):
        segments = []
        for item in payload:
            segment = _segment_from_payload(item)
            if segment is None:
                logger.debug(f"Dropping unsupported segment: {item!r}"[:200])
                continue
            segments.append(segment)
        return SegmentsValue(tuple(segments))
    return ScalarValue(payload)

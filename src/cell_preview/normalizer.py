# -*- coding: utf-8 -*-
"""
Content normalization: turn any RawCellValue into a plain string.
"""
from .cells import (
    AbsentValue,
    RawCellValue,
    ScalarValue,
    SegmentsValue,
    TextValue,
)


def normalize(value: RawCellValue | None) -> str:
    """
    Flatten a cell value into the text the user sees.

    Rich segments contribute their visible text whatever their kind (plain
    text, link label, mention label). Never raises.
    """
    if value is None or isinstance(value, AbsentValue):
        return ""
    if isinstance(value, TextValue):
        return value.text
    if isinstance(value, SegmentsValue):
        return "".join(segment.text for segment in value.segments or ())
    if isinstance(value, ScalarValue):
        return "" if value.value is None else str(value.value)
    return ""

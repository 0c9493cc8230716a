# -*- coding: utf-8 -*-
"""
Cell Preview Service - live Markdown preview of the selected document cell.
"""
__version__ = "1.0.0"

from .cells import CellRef, FieldMeta, FieldType, Selection  # noqa: E402
from .pipeline import PreviewController, PreviewResult, PreviewState  # noqa: E402
from .watcher import SelectionWatcher  # noqa: E402

__all__ = [
    "CellRef",
    "FieldMeta",
    "FieldType",
    "Selection",
    "PreviewController",
    "PreviewResult",
    "PreviewState",
    "SelectionWatcher",
    "__version__",
]

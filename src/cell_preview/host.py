# -*- coding: utf-8 -*-
"""
Document host abstraction.

The host is the tabular document application the user is working in. The
engine only needs a handful of accessors from it, described by the protocols
below; adapters implement them.
"""
import logging
from typing import Callable, Protocol

from .cells import FieldMeta, FieldType, RawCellValue, Selection

logger = logging.getLogger(__name__)

SelectionListener = Callable[[Selection | None], None]
Unsubscribe = Callable[[], None]


class HostAccessError(Exception):
    """Metadata or value lookup against the host failed."""

    pass


class FieldHandle(Protocol):
    async def get_value(self, record_id: str) -> RawCellValue:
        ...


class HostTable(Protocol):
    id: str

    async def get_field_meta_by_id(self, field_id: str) -> FieldMeta | None:
        ...

    async def get_field_meta_list_by_type(self, field_type: FieldType) -> list[FieldMeta]:
        ...

    async def get_field(self, field_id: str) -> FieldHandle:
        ...


class DocumentHost(Protocol):
    async def get_active_table(self) -> HostTable:
        ...

    async def get_selection(self) -> Selection | None:
        ...

    def on_selection_change(self, listener: SelectionListener) -> Unsubscribe:
        ...


class SelectionHub:
    """
    Listener registry for selection-change notifications.

    Listeners are called synchronously, in subscription order. A failing
    listener is logged and does not prevent the others from running.
    """

    def __init__(self):
        self._listeners: list[SelectionListener] = []

    def subscribe(self, listener: SelectionListener) -> Unsubscribe:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, selection: Selection | None) -> int:
        """Deliver a notification. Returns the number of listeners reached."""
        delivered = 0
        for listener in list(self._listeners):
            try:
                listener(selection)
                delivered += 1
            except Exception as e:
                logger.error(f"Selection listener failed: {e}")
        return delivered

    def __len__(self) -> int:
        return len(self._listeners)

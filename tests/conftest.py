# -*- coding: utf-8 -*-
"""
Pytest configuration and fixtures.
"""
import asyncio

import pytest
from fastapi.testclient import TestClient

from cell_preview.api import app
from cell_preview.cells import AbsentValue, CellRef, FieldMeta, FieldType, Selection, TextValue
from cell_preview.host import SelectionHub
from cell_preview.pipeline import PreviewController

TEXT_FIELD = "fld_text"
NOTES_FIELD = "fld_notes"
NUMBER_FIELD = "fld_number"


class FakeField:
    """Field handle reading values from a FakeTable."""

    def __init__(self, table: "FakeTable", field_id: str):
        self.table = table
        self.id = field_id

    async def get_value(self, record_id: str):
        cell = CellRef(record_id, self.id)
        self.table.value_calls.append(cell)
        if cell in self.table.reached:
            self.table.reached[cell].set()
        if cell in self.table.gates:
            await self.table.gates[cell].wait()
        if self.table.fetch_error is not None:
            raise self.table.fetch_error
        return self.table.values.get(cell, AbsentValue())


class FakeTable:
    """In-memory host table with hooks to fail or block lookups."""

    def __init__(self, table_id: str = "tbl_1"):
        self.id = table_id
        self.fields: dict[str, FieldMeta] = {}
        self.values: dict[CellRef, object] = {}
        self.fetch_error: Exception | None = None
        self.meta_error: Exception | None = None
        self.meta_gate: asyncio.Event | None = None
        self.meta_gates: dict[str, asyncio.Event] = {}
        self.gates: dict[CellRef, asyncio.Event] = {}
        self.reached: dict[CellRef, asyncio.Event] = {}
        self.value_calls: list[CellRef] = []
        self.get_field_calls: list[str] = []
        self.meta_calls: list[str] = []

    def add_field(self, field_id: str, field_type: FieldType, name: str = "") -> None:
        self.fields[field_id] = FieldMeta(id=field_id, type=field_type, name=name or field_id)

    def set_text(self, record_id: str, field_id: str, text: str) -> CellRef:
        cell = CellRef(record_id, field_id)
        self.values[cell] = TextValue(text)
        return cell

    def block(self, cell: CellRef) -> asyncio.Event:
        """Make get_value for `cell` wait until the returned event is set."""
        self.gates[cell] = asyncio.Event()
        self.reached[cell] = asyncio.Event()
        return self.gates[cell]

    async def get_field_meta_by_id(self, field_id: str):
        self.meta_calls.append(field_id)
        if self.meta_gate is not None:
            await self.meta_gate.wait()
        if field_id in self.meta_gates:
            await self.meta_gates[field_id].wait()
        if self.meta_error is not None:
            raise self.meta_error
        return self.fields.get(field_id)

    async def get_field_meta_list_by_type(self, field_type: FieldType):
        return [meta for meta in self.fields.values() if meta.type is field_type]

    async def get_field(self, field_id: str):
        self.get_field_calls.append(field_id)
        return FakeField(self, field_id)


class FakeHost:
    """In-memory document host."""

    def __init__(self, table: FakeTable):
        self.table = table
        self.selection: Selection | None = None
        self.handshake_error: Exception | None = None
        self.hub = SelectionHub()

    async def get_active_table(self):
        if self.handshake_error is not None:
            raise self.handshake_error
        return self.table

    async def get_selection(self):
        return self.selection

    def on_selection_change(self, listener):
        return self.hub.subscribe(listener)


class SinkRecorder:
    """Render sink that records every (loading, html, notice) call."""

    def __init__(self):
        self.calls: list[tuple[bool, str, str | None]] = []

    def __call__(self, loading, html, notice=None):
        self.calls.append((loading, html, notice))

    @property
    def last(self):
        return self.calls[-1] if self.calls else None


@pytest.fixture
def table():
    """Table with two text fields and one number field."""
    table = FakeTable()
    table.add_field(TEXT_FIELD, FieldType.TEXT, "Description")
    table.add_field(NOTES_FIELD, FieldType.TEXT, "Notes")
    table.add_field(NUMBER_FIELD, FieldType.NUMBER, "Amount")
    return table


@pytest.fixture
def host(table):
    return FakeHost(table)


@pytest.fixture
def sink():
    return SinkRecorder()


@pytest.fixture
def echo_render():
    """Render function that wraps its input, so the output is predictable."""
    calls = []

    def render(text):
        calls.append(text)
        return f"<rendered>{text}</rendered>"

    render.calls = calls
    return render


@pytest.fixture
def controller(sink, echo_render):
    return PreviewController(render=echo_render, sink=sink, auto_detect=True)


@pytest.fixture
def client():
    """FastAPI test client (lifespan not started)."""
    return TestClient(app, raise_server_exceptions=False)

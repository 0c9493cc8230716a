# -*- coding: utf-8 -*-
"""
Tests for the dedup guard.
"""
from cell_preview.cells import CellRef
from cell_preview.dedup import DedupGuard, should_skip


class TestShouldSkip:

    def test_nothing_previewed_yet(self):
        assert should_skip(CellRef("rec1", "fld1"), None) is False

    def test_same_cell(self):
        assert should_skip(CellRef("rec1", "fld1"), CellRef("rec1", "fld1")) is True

    def test_same_field_other_record(self):
        assert should_skip(CellRef("rec2", "fld1"), CellRef("rec1", "fld1")) is False

    def test_same_record_other_field(self):
        assert should_skip(CellRef("rec1", "fld2"), CellRef("rec1", "fld1")) is False


class TestDedupGuard:

    def test_mark_and_forget(self):
        guard = DedupGuard()
        cell = CellRef("rec1", "fld1")

        assert guard.should_skip(cell) is False
        guard.mark(cell)
        assert guard.should_skip(cell) is True
        assert guard.last == cell
        guard.forget()
        assert guard.should_skip(cell) is False

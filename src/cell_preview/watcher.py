# -*- coding: utf-8 -*-
"""
Selection watcher: follows the host selection and feeds the preview pipeline.

Each selection notification runs in its own task through
IDLE -> RESOLVING (field metadata lookup) -> DISPATCHING (pipeline) -> IDLE.
Only text fields reach the pipeline; other fields get a fixed diagnostic
without their value ever being read.
"""
import asyncio
import logging
from enum import Enum

from . import diagnostics
from .cells import CellRef, FieldType, Selection
from .host import DocumentHost, HostTable, Unsubscribe
from .pipeline import PreviewController, PreviewResult, invocation_ctx

logger = logging.getLogger(__name__)


class WatcherState(str, Enum):
    IDLE = "idle"
    RESOLVING = "resolving"
    DISPATCHING = "dispatching"


class SelectionWatcher:
    """Subscribes to host selection changes and previews the selected cell."""

    def __init__(self, host: DocumentHost, controller: PreviewController):
        self.host = host
        self.controller = controller
        self.table: HostTable | None = None
        self.state = WatcherState.IDLE
        self._unsubscribe: Unsubscribe | None = None
        # Bumped on start and stop; handlers from another epoch are discarded
        self._epoch = 0
        # Arrival order of events, and the latest one that claimed a generation
        self._sequence = 0
        self._claimed = 0
        self._tasks: set[asyncio.Task] = set()

    @property
    def is_running(self) -> bool:
        return self._unsubscribe is not None

    async def start(self) -> bool:
        """
        Connect to the host, subscribe and preview the current selection.

        Returns:
            True if the watcher is running, False if the host handshake failed
        """
        if self.is_running:
            return True

        try:
            self.table = await self.host.get_active_table()
        except Exception as e:
            logger.error(f"Error initializing selection watcher: {e}")
            self.controller.publish_notice(diagnostics.INIT_FAILED_NOTICE)
            self.controller.mark_ready()
            return False

        try:
            text_fields = await self.table.get_field_meta_list_by_type(FieldType.TEXT)
            if not text_fields:
                logger.warning("Active table has no text fields", extra={"table_id": self.table.id})
                self.controller.publish_notice(diagnostics.NO_TEXT_FIELDS_NOTICE)
        except Exception as e:
            logger.warning(f"Could not list text fields: {e}")

        self._epoch += 1
        self._unsubscribe = self.host.on_selection_change(self._on_selection_change)
        logger.info("Selection watcher started", extra={"table_id": self.table.id})

        try:
            initial = await self.host.get_selection()
            if initial is not None and initial.cell is not None:
                await self.handle_selection(initial)
        except Exception as e:
            logger.error(f"Error handling initial selection: {e}")

        self.controller.mark_ready()
        return True

    async def stop(self) -> None:
        """Unsubscribe and discard anything still in flight. Safe to call twice."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._epoch += 1
        self.controller.invalidate()

        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()
        self.state = WatcherState.IDLE
        logger.info("Selection watcher stopped")

    async def wait_idle(self) -> None:
        """Wait until every selection received so far has been handled."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _on_selection_change(self, selection: Selection | None) -> None:
        """Host callback: handle the notification without blocking the host."""
        task = asyncio.ensure_future(self.handle_selection(selection))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def handle_selection(self, selection: Selection | None) -> PreviewResult | None:
        """
        Resolve one selection and dispatch it.

        A generation is only claimed once the field resolves, so events that
        turn out to be no-ops leave the preview in flight untouched.

        Returns:
            The preview result, or None when the selection was ignored
        """
        cell = selection.cell if selection is not None else None
        if cell is None or self.table is None:
            return None

        epoch = self._epoch
        self._sequence += 1
        sequence = self._sequence
        try:
            return await self._resolve_and_dispatch(cell, epoch, sequence)
        except Exception as e:
            logger.error(
                f"Error handling selection change: {e}",
                extra={"record_id": cell.record_id, "field_id": cell.field_id},
            )
            generation = self._claim(epoch, sequence)
            if generation is None:
                return None
            return self.controller.show_diagnostic(
                generation,
                cell,
                diagnostics.selection_error(diagnostics.describe_error(e)),
                "selection_error",
            )
        finally:
            if sequence == self._sequence:
                self.state = WatcherState.IDLE

    def _claim(self, epoch: int, sequence: int) -> int | None:
        """
        Allocate a preview generation for a resolved event.

        Returns None when the subscription changed or a later event has
        already claimed one.
        """
        if epoch != self._epoch or sequence < self._claimed:
            return None
        self._claimed = sequence
        return self.controller.begin()

    async def _resolve_and_dispatch(
            self,
            cell: CellRef,
            epoch: int,
            sequence: int,
    ) -> PreviewResult | None:
        table = self.table
        self.state = WatcherState.RESOLVING
        field_meta = await table.get_field_meta_by_id(cell.field_id)

        if field_meta is None:
            logger.debug("Unknown field, ignoring selection", extra={"field_id": cell.field_id})
            return None

        generation = self._claim(epoch, sequence)
        if generation is None:
            logger.debug("Discarding superseded selection", extra={"field_id": cell.field_id})
            return None

        self.state = WatcherState.DISPATCHING
        if not field_meta.is_text:
            logger.debug(
                f"Field type {field_meta.type.value} is not previewable",
                extra={"field_id": cell.field_id},
            )
            token = invocation_ctx.set(generation)
            try:
                return self.controller.show_diagnostic(
                    generation, cell, diagnostics.not_text_field(), "not_text"
                )
            finally:
                invocation_ctx.reset(token)

        return await self.controller.preview(table, cell, generation=generation)

    async def refresh(self) -> PreviewResult | None:
        """Preview the last cell again, ignoring the dedup guard."""
        if self.table is None:
            return None
        return await self.controller.refresh(self.table)

# -*- coding: utf-8 -*-
"""
Preview pipeline: fetch a cell, classify it and render it into the preview state.

Steps, each ending the attempt when it produces a terminal outcome:
1. Loading - flag the preview as loading
2. Dedup - skip the cell that was just previewed (keeps the current preview)
3. Fetch - read the raw value from the host
4. Normalize - flatten the value, empty content gets its own diagnostic
5. Detect - plain-looking text is shown as-is with a notice
6. Render - Markdown to HTML, render failures still show the source text

Every invocation carries a generation number. Only the newest generation may
commit, so a slow attempt for an older selection can never overwrite the
preview of a newer one, and nothing commits after invalidate().
"""
import logging
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Callable, Literal

from . import diagnostics
from .cells import CellRef
from .config import settings
from .dedup import DedupGuard
from .heuristic import looks_like_markdown, matching_patterns
from .host import HostTable
from .normalizer import normalize
from .renderer import RenderFunction, render_markdown, run_renderer

logger = logging.getLogger(__name__)

# Generation of the preview being processed (accessible across async calls)
invocation_ctx: ContextVar[int | None] = ContextVar("invocation", default=None)

PreviewOutcome = Literal[
    "skipped",
    "rendered",
    "empty",
    "not_markdown",
    "fetch_error",
    "render_error",
    "not_text",
    "selection_error",
    "stale",
]

SinkCallback = Callable[[bool, str, "str | None"], object]


def get_invocation() -> int | None:
    """Get the current preview generation from context."""
    return invocation_ctx.get()


@dataclass
class PreviewState:
    """Mutable preview state, owned by a single PreviewController."""

    loading: bool = True
    rendered_html: str = ""
    guard: DedupGuard = field(default_factory=DedupGuard)

    @property
    def last_previewed_cell(self) -> CellRef | None:
        return self.guard.last


@dataclass
class PreviewResult:
    """Outcome of one preview attempt."""

    outcome: PreviewOutcome
    cell: CellRef | None = None
    html: str | None = None
    generation: int = 0
    committed: bool = True


def _cell_extra(cell: CellRef | None) -> dict:
    if cell is None:
        return {}
    return {"record_id": cell.record_id, "field_id": cell.field_id}


class PreviewController:
    """
    Owns the PreviewState and funnels every mutation through terminal commits.

    Each terminal branch sets either a diagnostic or the rendered HTML, clears
    `loading` and marks the dedup guard with the cell.
    """

    def __init__(
            self,
            render: RenderFunction | None = None,
            sink: SinkCallback | None = None,
            auto_detect: bool | None = None,
    ):
        """
        Args:
            render: Markdown render function, sync or async. Defaults to render_markdown.
            sink: Called with (loading, html, notice) after every state change.
            auto_detect: Gate rendering on the Markdown heuristic.
                Defaults to settings.AUTO_DETECT_MARKDOWN.
        """
        self.state = PreviewState()
        self.notice: str | None = None
        self._render = render or render_markdown
        self._sink = sink
        self._auto_detect = settings.AUTO_DETECT_MARKDOWN if auto_detect is None else auto_detect
        self._generation = 0
        self._in_flight = 0

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def in_flight(self) -> int:
        return self._in_flight

    def begin(self) -> int:
        """Allocate the generation of a new invocation; older ones become stale."""
        self._generation += 1
        return self._generation

    def is_current(self, generation: int) -> bool:
        return generation == self._generation

    def invalidate(self) -> None:
        """Make every in-flight invocation stale."""
        self._generation += 1
        logger.debug("Preview invocations invalidated", extra={"generation": self._generation})

    def reset(self) -> None:
        """Back to the startup state: loading, nothing previewed, no notice."""
        self.invalidate()
        self.state.loading = True
        self.state.rendered_html = ""
        self.state.guard.forget()
        self.notice = None
        self._publish()

    async def preview(
            self,
            table: HostTable,
            cell: CellRef,
            *,
            generation: int | None = None,
            force: bool = False,
    ) -> PreviewResult:
        """
        Preview one cell. Failures never propagate; they become diagnostics.

        Args:
            table: Host table the cell belongs to
            cell: Cell to preview
            generation: Generation allocated by the caller, or a fresh one
            force: Preview even if the cell was the last one previewed

        Returns:
            PreviewResult describing the terminal outcome
        """
        if generation is None:
            generation = self.begin()

        token = invocation_ctx.set(generation)
        self._in_flight += 1
        try:
            return await self._run(table, cell, generation, force)
        finally:
            self._in_flight -= 1
            invocation_ctx.reset(token)

    async def _run(
            self,
            table: HostTable,
            cell: CellRef,
            generation: int,
            force: bool,
    ) -> PreviewResult:
        if not self.is_current(generation):
            logger.debug("Preview superseded before start", extra=_cell_extra(cell))
            return PreviewResult("stale", cell, None, generation, committed=False)

        # Step 1: Loading
        self.state.loading = True
        self._publish()

        # Step 2: Dedup
        if not force and self.state.guard.should_skip(cell):
            logger.debug("Cell already previewed, skipping", extra=_cell_extra(cell))
            self.state.loading = False
            self._publish()
            return PreviewResult("skipped", cell, None, generation)

        # Step 3: Fetch
        try:
            handle = await table.get_field(cell.field_id)
            raw = await handle.get_value(cell.record_id)
        except Exception as e:
            logger.error(f"Error loading cell content: {e}", extra=_cell_extra(cell))
            return self._commit(
                generation, cell, diagnostics.fetch_error(diagnostics.describe_error(e)), "fetch_error"
            )

        # Step 4: Normalize
        content = normalize(raw)
        if not content:
            return self._commit(generation, cell, diagnostics.empty_cell(), "empty")

        # Step 5: Detect
        if self._auto_detect and not looks_like_markdown(content):
            return self._commit(generation, cell, diagnostics.not_markdown(content), "not_markdown")
        logger.debug(
            f"Markdown detected ({', '.join(matching_patterns(content)) or 'detection off'})",
            extra=_cell_extra(cell),
        )

        # Step 6: Render
        try:
            html = await run_renderer(self._render, content)
        except Exception as e:
            logger.error(f"Error rendering markdown: {e}", extra=_cell_extra(cell))
            return self._commit(
                generation,
                cell,
                diagnostics.render_error(diagnostics.describe_error(e), content),
                "render_error",
            )

        return self._commit(generation, cell, html, "rendered")

    def show_diagnostic(
            self,
            generation: int,
            cell: CellRef | None,
            html: str,
            outcome: PreviewOutcome,
    ) -> PreviewResult:
        """Terminal commit of a diagnostic produced outside the fetch path."""
        return self._commit(generation, cell, html, outcome)

    def mark_ready(self) -> None:
        """Clear the startup loading flag unless a preview is still running."""
        if self._in_flight == 0 and self.state.loading:
            self.state.loading = False
            self._publish()

    def publish_notice(self, notice: str | None) -> None:
        self.notice = notice
        self._publish()

    async def refresh(self, table: HostTable) -> PreviewResult | None:
        """Preview the last cell again, bypassing the dedup guard."""
        cell = self.state.last_previewed_cell
        if cell is None:
            return None
        logger.info("Refreshing preview", extra=_cell_extra(cell))
        return await self.preview(table, cell, force=True)

    def _commit(
            self,
            generation: int,
            cell: CellRef | None,
            html: str,
            outcome: PreviewOutcome,
    ) -> PreviewResult:
        if not self.is_current(generation):
            logger.debug(
                f"Discarding stale {outcome} result",
                extra={**_cell_extra(cell), "generation": generation},
            )
            return PreviewResult("stale", cell, html, generation, committed=False)

        self.state.rendered_html = html
        self.state.loading = False
        if cell is not None:
            self.state.guard.mark(cell)
        self._publish()

        logger.info(f"Preview {outcome}", extra={**_cell_extra(cell), "outcome": outcome})
        return PreviewResult(outcome, cell, html, generation)

    def _publish(self) -> None:
        if self._sink is None:
            return
        try:
            self._sink(self.state.loading, self.state.rendered_html, self.notice)
        except Exception as e:
            logger.warning(f"Render sink failed: {e}")

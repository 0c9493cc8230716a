# -*- coding: utf-8 -*-
"""
Render sink: holds the latest preview snapshot for the panel.
"""
import asyncio
import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PreviewSnapshot:
    """What the display surface shows."""

    loading: bool
    html: str
    notice: str | None = None
    version: int = 0


class PreviewBroadcaster:
    """
    Keeps the most recent snapshot and wakes up readers waiting for a newer one.

    `version` increases by one on every publish.
    """

    def __init__(self):
        self._snapshot = PreviewSnapshot(loading=True, html="")
        self._changed: asyncio.Event | None = None

    @property
    def snapshot(self) -> PreviewSnapshot:
        return self._snapshot

    def publish(self, loading: bool, html: str, notice: str | None = None) -> PreviewSnapshot:
        """Store a new snapshot and wake up waiters."""
        self._snapshot = PreviewSnapshot(
            loading=loading,
            html=html,
            notice=notice,
            version=self._snapshot.version + 1,
        )
        if self._changed is not None:
            self._changed.set()
            self._changed = None
        return self._snapshot

    async def wait_for_change(self, after: int, timeout: float) -> PreviewSnapshot:
        """Return the first snapshot newer than `after`, or the current one on timeout."""
        if self._snapshot.version > after:
            return self._snapshot
        if self._changed is None:
            self._changed = asyncio.Event()
        try:
            await asyncio.wait_for(self._changed.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            logger.debug(f"No preview change after version {after} within {timeout}s")
        return self._snapshot

    def __call__(self, loading: bool, html: str, notice: str | None = None) -> PreviewSnapshot:
        return self.publish(loading, html, notice)

# -*- coding: utf-8 -*-
"""
Preview service: wires the host adapter, the pipeline, the watcher and the sink.
"""
import logging

from .host_http import HttpDocumentHost
from .pipeline import PreviewController
from .renderer import RenderFunction
from .sink import PreviewBroadcaster
from .watcher import SelectionWatcher

logger = logging.getLogger(__name__)


class PreviewService:
    """Lifecycle owner of one watcher/controller pair."""

    def __init__(self, render: RenderFunction | None = None):
        self.sink = PreviewBroadcaster()
        self.controller = PreviewController(render=render, sink=self.sink)
        self.host: HttpDocumentHost | None = None
        self.watcher: SelectionWatcher | None = None

    async def start(self, host: HttpDocumentHost | None = None) -> bool:
        """Connect to the host and start watching the selection."""
        if self.is_ready:
            return True

        # Nothing from a previous run may be shown or deduplicated against
        self.controller.reset()
        self.host = host or HttpDocumentHost()
        self.watcher = SelectionWatcher(self.host, self.controller)
        logger.info("Starting selection watcher")
        return await self.watcher.start()

    async def stop(self) -> None:
        """Stop watching, tear down the preview state and close the host client."""
        if self.watcher is not None:
            await self.watcher.stop()
            self.watcher = None
        if self.host is not None:
            await self.host.aclose()
            self.host = None
        self.controller.reset()
        logger.info("Preview service stopped")

    @property
    def is_ready(self) -> bool:
        """True when the watcher is subscribed to the host."""
        return self.watcher is not None and self.watcher.is_running

    @property
    def host_ready(self) -> bool:
        return self.watcher is not None and self.watcher.table is not None


# Global service instance
preview_service = PreviewService()

# -*- coding: utf-8 -*-
"""
Pydantic data models for the API.
"""
from pydantic import BaseModel, Field

from .cells import Selection
from .sink import PreviewSnapshot


class SelectionEvent(BaseModel):
    """Selection reported by the host bridge, pushed to the webhook or read from GET /selection."""

    record_id: str | None = Field(default=None, description="Selected record, if any")
    field_id: str | None = Field(default=None, description="Selected field, if any")
    table_id: str | None = Field(default=None, description="Table the selection belongs to")

    def to_selection(self) -> Selection:
        return Selection(
            record_id=self.record_id,
            field_id=self.field_id,
            table_id=self.table_id,
        )


class SelectionAccepted(BaseModel):
    accepted: bool = True


class PreviewSnapshotResponse(BaseModel):
    """Current content of the preview surface."""

    loading: bool
    html: str = ""
    notice: str | None = None
    version: int = 0

    @classmethod
    def from_snapshot(cls, snapshot: PreviewSnapshot) -> "PreviewSnapshotResponse":
        return cls(
            loading=snapshot.loading,
            html=snapshot.html,
            notice=snapshot.notice,
            version=snapshot.version,
        )


class RefreshResponse(BaseModel):
    refreshed: bool


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: str
    watcher_running: bool
    host_ready: bool
    version: str

# -*- coding: utf-8 -*-
"""
HTTP adapter for a document host exposed through a REST bridge.

Features:
- Async httpx client shared by all tables and fields
- Handshake retry with exponential backoff (tenacity)
- Selection notifications pushed by the bridge to the service webhook and
  fanned out through a SelectionHub

Per-cell lookups are never retried: a failed fetch is terminal for that
preview attempt.
"""
import logging

import httpx
from pydantic import BaseModel, ValidationError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from .cells import FieldMeta, FieldType, RawCellValue, Selection, raw_value_from_payload
from .config import settings
from .host import HostAccessError, SelectionHub, SelectionListener, Unsubscribe
from .models import SelectionEvent

logger = logging.getLogger(__name__)


class TablePayload(BaseModel):
    id: str
    name: str = ""


class FieldMetaPayload(BaseModel):
    id: str
    type: str
    name: str = ""

    def to_field_meta(self) -> FieldMeta:
        return FieldMeta(id=self.id, type=FieldType.parse(self.type), name=self.name)


class HttpField:
    """Handle on one field of an HTTP-backed table."""

    def __init__(self, host: "HttpDocumentHost", table_id: str, field_id: str):
        self._host = host
        self.table_id = table_id
        self.id = field_id

    async def get_value(self, record_id: str) -> RawCellValue:
        data = await self._host.request_json(
            "GET", f"/tables/{self.table_id}/records/{record_id}/fields/{self.id}"
        )
        if not isinstance(data, dict):
            raise HostAccessError(f"Unexpected cell payload: {type(data).__name__}")
        return raw_value_from_payload(data.get("value"))


class HttpTable:
    """Table exposed by the bridge."""

    def __init__(self, host: "HttpDocumentHost", table_id: str, name: str = ""):
        self._host = host
        self.id = table_id
        self.name = name

    async def get_field_meta_by_id(self, field_id: str) -> FieldMeta | None:
        data = await self._host.request_json(
            "GET", f"/tables/{self.id}/fields/{field_id}", allow_missing=True
        )
        if data is None:
            return None
        return _parse(FieldMetaPayload, data).to_field_meta()

    async def get_field_meta_list_by_type(self, field_type: FieldType) -> list[FieldMeta]:
        data = await self._host.request_json(
            "GET", f"/tables/{self.id}/fields", params={"type": field_type.value}
        )
        if not isinstance(data, list):
            raise HostAccessError(f"Unexpected field list payload: {type(data).__name__}")
        return [_parse(FieldMetaPayload, item).to_field_meta() for item in data]

    async def get_field(self, field_id: str) -> HttpField:
        return HttpField(self._host, self.id, field_id)


def _parse(model: type[BaseModel], data):
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise HostAccessError(f"Invalid {model.__name__}: {e.error_count()} error(s)") from e


class HttpDocumentHost:
    """DocumentHost backed by the REST bridge at settings.HOST_API_URL."""

    def __init__(
            self,
            base_url: str | None = None,
            token: str | None = None,
            timeout: float | None = None,
            transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Args:
            base_url: Bridge URL. Defaults to settings.HOST_API_URL.
            token: Bearer token. Defaults to settings.HOST_API_TOKEN.
            timeout: Transport timeout in seconds. Defaults to settings.HOST_TIMEOUT.
            transport: Custom httpx transport (tests).
        """
        token = settings.HOST_API_TOKEN if token is None else token
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.HOST_API_URL,
            headers=headers,
            timeout=settings.HOST_TIMEOUT if timeout is None else timeout,
            transport=transport,
        )
        self.selections = SelectionHub()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request_json(
            self,
            method: str,
            path: str,
            *,
            allow_missing: bool = False,
            **kwargs,
    ):
        """
        Send a request to the bridge and decode its JSON body.

        Returns:
            Decoded JSON, None for a 204, or None for a 404 when allow_missing is set

        Raises:
            HostAccessError: on transport errors, error statuses and invalid JSON
        """
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise HostAccessError(f"{method} {path} failed: {e}") from e

        if response.status_code == 404 and allow_missing:
            return None
        if response.is_error:
            raise HostAccessError(f"{method} {path} returned HTTP {response.status_code}")
        if response.status_code == 204:
            return None

        try:
            return response.json()
        except ValueError as e:
            raise HostAccessError(f"{method} {path} returned invalid JSON") from e

    async def get_active_table(self) -> HttpTable:
        """Handshake: resolve the active table, retrying transport failures."""
        attempt = 0

        @retry(
            retry=retry_if_exception_type(httpx.TransportError),
            stop=stop_after_attempt(settings.HANDSHAKE_RETRY_ATTEMPTS),
            wait=wait_exponential(
                min=settings.HANDSHAKE_RETRY_MIN_WAIT, max=settings.HANDSHAKE_RETRY_MAX_WAIT
            ),
            reraise=True,
        )
        async def _inner() -> httpx.Response:
            nonlocal attempt
            attempt += 1
            if attempt > 1:
                logger.warning(f"Retrying host handshake (attempt {attempt})")
            return await self._client.get("/tables/active")

        try:
            response = await _inner()
        except httpx.HTTPError as e:
            raise HostAccessError(f"Host handshake failed after {attempt} attempt(s): {e}") from e

        if response.is_error:
            raise HostAccessError(f"Host handshake returned HTTP {response.status_code}")
        try:
            data = response.json()
        except ValueError as e:
            raise HostAccessError("Host handshake returned invalid JSON") from e

        table = _parse(TablePayload, data)
        logger.info("Connected to document host", extra={"table_id": table.id})
        return HttpTable(self, table.id, table.name)

    async def get_selection(self) -> Selection | None:
        """Current selection; a JSON null or a 204 means nothing is selected."""
        data = await self.request_json("GET", "/selection")
        if data is None:
            return None
        return _parse(SelectionEvent, data).to_selection()

    def on_selection_change(self, listener: SelectionListener) -> Unsubscribe:
        return self.selections.subscribe(listener)

    def dispatch_selection(self, selection: Selection | None) -> int:
        """Deliver a selection notification received from the bridge."""
        return self.selections.publish(selection)

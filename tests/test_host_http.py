# -*- coding: utf-8 -*-
"""
Tests for the HTTP document host adapter.
"""
import httpx
import pytest

from cell_preview.cells import FieldType, Selection, SegmentsValue, TextValue
from cell_preview.config import settings
from cell_preview.host import HostAccessError
from cell_preview.host_http import HttpDocumentHost
from cell_preview.normalizer import normalize

BASE_URL = "http://bridge.test"

FIELDS = {
    "fld_text": {"id": "fld_text", "type": "text", "name": "Description"},
    "fld_number": {"id": "fld_number", "type": "number", "name": "Amount"},
    "fld_formula": {"id": "fld_formula", "type": "formula", "name": "Total"},
}

VALUES = {
    ("rec1", "fld_text"): [
        {"type": "text", "text": "# Hello "},
        {"type": "url", "text": "docs", "link": "https://example.com"},
    ],
    ("rec2", "fld_text"): "plain string",
    ("rec3", "fld_text"): None,
}


def bridge_handler(request: httpx.Request) -> httpx.Response:
    """Minimal REST bridge for table tbl_1."""
    parts = request.url.path.strip("/").split("/")

    if parts == ["tables", "active"]:
        return httpx.Response(200, json={"id": "tbl_1", "name": "Tasks"})
    if parts == ["selection"]:
        return httpx.Response(200, json={"record_id": "rec1", "field_id": "fld_text"})
    if parts == ["tables", "tbl_1", "fields"]:
        wanted = request.url.params.get("type")
        return httpx.Response(200, json=[f for f in FIELDS.values() if f["type"] == wanted])
    if len(parts) == 4 and parts[:3] == ["tables", "tbl_1", "fields"]:
        meta = FIELDS.get(parts[3])
        if meta is None:
            return httpx.Response(404, json={"detail": "not found"})
        return httpx.Response(200, json=meta)
    if len(parts) == 6 and parts[2] == "records":
        key = (parts[3], parts[5])
        if key == ("rec_broken", "fld_text"):
            return httpx.Response(500, json={"detail": "boom"})
        return httpx.Response(200, json={"value": VALUES.get(key)})
    return httpx.Response(404)


@pytest.fixture
def make_host():
    """Build an HttpDocumentHost backed by a mock transport."""

    def _make(handler=bridge_handler, **kwargs):
        return HttpDocumentHost(base_url=BASE_URL, transport=httpx.MockTransport(handler), **kwargs)

    return _make


@pytest.fixture
def no_retry_wait(monkeypatch):
    monkeypatch.setattr(settings, "HANDSHAKE_RETRY_MIN_WAIT", 0)
    monkeypatch.setattr(settings, "HANDSHAKE_RETRY_MAX_WAIT", 0)
    monkeypatch.setattr(settings, "HANDSHAKE_RETRY_ATTEMPTS", 3)


@pytest.mark.asyncio
class TestHandshake:

    async def test_active_table(self, make_host):
        host = make_host()

        table = await host.get_active_table()

        assert table.id == "tbl_1"
        assert table.name == "Tasks"
        await host.aclose()

    async def test_transport_errors_are_retried(self, make_host, no_retry_wait):
        calls = []

        def flaky(request):
            calls.append(request.url.path)
            if len(calls) < 3:
                raise httpx.ConnectError("refused", request=request)
            return bridge_handler(request)

        host = make_host(flaky)
        table = await host.get_active_table()

        assert table.id == "tbl_1"
        assert len(calls) == 3

    async def test_handshake_gives_up(self, make_host, no_retry_wait):
        def down(request):
            raise httpx.ConnectError("refused", request=request)

        host = make_host(down)

        with pytest.raises(HostAccessError, match="after 3 attempt"):
            await host.get_active_table()

    async def test_http_error_status_is_not_retried(self, make_host, no_retry_wait):
        calls = []

        def unauthorized(request):
            calls.append(request)
            return httpx.Response(401)

        host = make_host(unauthorized)

        with pytest.raises(HostAccessError, match="401"):
            await host.get_active_table()
        assert len(calls) == 1

    async def test_bearer_token_is_sent(self, make_host):
        seen = []

        def handler(request):
            seen.append(request.headers.get("Authorization"))
            return bridge_handler(request)

        host = make_host(handler, token="secret")
        await host.get_active_table()

        assert seen == ["Bearer secret"]


@pytest.mark.asyncio
class TestFieldAccess:

    async def test_field_meta(self, make_host):
        table = await make_host().get_active_table()

        meta = await table.get_field_meta_by_id("fld_text")

        assert meta.id == "fld_text"
        assert meta.type is FieldType.TEXT
        assert meta.name == "Description"

    async def test_unknown_type_maps_to_other(self, make_host):
        table = await make_host().get_active_table()

        meta = await table.get_field_meta_by_id("fld_formula")

        assert meta.type is FieldType.OTHER

    async def test_missing_field_is_none(self, make_host):
        table = await make_host().get_active_table()

        assert await table.get_field_meta_by_id("fld_gone") is None

    async def test_text_field_inventory(self, make_host):
        table = await make_host().get_active_table()

        fields = await table.get_field_meta_list_by_type(FieldType.TEXT)

        assert [f.id for f in fields] == ["fld_text"]

    async def test_segment_value(self, make_host):
        table = await make_host().get_active_table()
        field = await table.get_field("fld_text")

        value = await field.get_value("rec1")

        assert isinstance(value, SegmentsValue)
        assert normalize(value) == "# Hello docs"

    async def test_string_and_null_values(self, make_host):
        table = await make_host().get_active_table()
        field = await table.get_field("fld_text")

        assert await field.get_value("rec2") == TextValue("plain string")
        assert normalize(await field.get_value("rec3")) == ""

    async def test_server_error_raises_host_access_error(self, make_host):
        table = await make_host().get_active_table()
        field = await table.get_field("fld_text")

        with pytest.raises(HostAccessError, match="500"):
            await field.get_value("rec_broken")

    async def test_invalid_meta_payload(self, make_host):
        def handler(request):
            if request.url.path.endswith("/fields/fld_bad"):
                return httpx.Response(200, json={"name": "no id"})
            return bridge_handler(request)

        table = await make_host(handler).get_active_table()

        with pytest.raises(HostAccessError, match="FieldMetaPayload"):
            await table.get_field_meta_by_id("fld_bad")


@pytest.mark.asyncio
class TestSelection:

    async def test_current_selection(self, make_host):
        host = make_host()

        selection = await host.get_selection()

        assert selection == Selection(record_id="rec1", field_id="fld_text")

    async def test_null_selection(self, make_host):
        host = make_host(
            lambda request: httpx.Response(
                200, content=b"null", headers={"Content-Type": "application/json"}
            )
        )

        assert await host.get_selection() is None

    async def test_no_content_selection(self, make_host):
        host = make_host(lambda request: httpx.Response(204))

        assert await host.get_selection() is None

    async def test_empty_body_is_invalid(self, make_host):
        host = make_host(lambda request: httpx.Response(200))

        with pytest.raises(HostAccessError, match="invalid JSON"):
            await host.get_selection()

    async def test_dispatch_reaches_listeners(self, make_host):
        host = make_host()
        received = []
        unsubscribe = host.on_selection_change(received.append)

        delivered = host.dispatch_selection(Selection(record_id="rec9", field_id="fld_text"))
        unsubscribe()
        host.dispatch_selection(None)

        assert delivered == 1
        assert received == [Selection(record_id="rec9", field_id="fld_text")]

    async def test_failing_listener_does_not_stop_others(self, make_host):
        host = make_host()
        received = []

        def broken(selection):
            raise RuntimeError("listener bug")

        host.on_selection_change(broken)
        host.on_selection_change(received.append)

        delivered = host.dispatch_selection(None)

        assert delivered == 1
        assert received == [None]

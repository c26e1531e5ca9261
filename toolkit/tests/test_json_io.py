from __future__ import annotations

import asyncio
import json
from datetime import datetime, timezone
from typing import Dict, List

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from pydantic import BaseModel
from starlette.requests import Request

from toolkit.api.json_io import decode_json, error_json, read_json, write_json
from toolkit.api.models import JSONEnvelope
from toolkit.errors import DecodeError, EncodeError, MultipleJSONValues, PayloadTooLarge, ToolkitError


class ItemIn(BaseModel):
    name: str
    qty: int


def _make_app(max_bytes=None) -> FastAPI:
    app = FastAPI()

    @app.post("/items")
    async def create(request: Request):
        try:
            item = await read_json(request, ItemIn, max_bytes=max_bytes)
        except PayloadTooLarge as e:
            return error_json(e, 413)
        except ToolkitError as e:
            return error_json(e)
        return write_json(201, JSONEnvelope(message="created", data=item))

    return app


def _stream_request(chunks: List[bytes]):
    """Build a Request whose body arrives in chunks with no Content-Length."""

    messages = [
        {"type": "http.request", "body": c, "more_body": i < len(chunks) - 1}
        for i, c in enumerate(chunks)
    ]

    async def receive():
        return messages.pop(0)

    scope = {"type": "http", "method": "POST", "path": "/", "headers": [], "query_string": b""}
    return Request(scope, receive), messages


def test_decode_json_accepts_single_value_with_whitespace():
    assert decode_json(b'  {"a": 1}\n\t ') == {"a": 1}
    assert decode_json(b"[1, 2, 3]") == [1, 2, 3]
    assert decode_json(b'"just a string"') == "just a string"


def test_decode_json_rejects_concatenated_values():
    with pytest.raises(MultipleJSONValues) as exc:
        decode_json(b'{"a":1}{"b":2}')
    assert str(exc.value) == "body may have only one json value"

    # Trailing garbage and json-lines are rejected the same way.
    for body in (b'{"a":1} x', b'{"a":1}\n{"a":2}\n', b"1 2"):
        with pytest.raises(MultipleJSONValues):
            decode_json(body)


def test_decode_json_rejects_malformed_and_empty_bodies():
    for body in (b"", b"   ", b'{"a":', b"NaN", b"\xff\xfe"):
        with pytest.raises(DecodeError):
            decode_json(body)


def test_decode_json_validates_into_model():
    item = decode_json(b'{"name": "bolt", "qty": 3}', ItemIn)
    assert item == ItemIn(name="bolt", qty=3)

    assert decode_json(b'{"x": 1}', Dict[str, int]) == {"x": 1}

    with pytest.raises(DecodeError) as exc:
        decode_json(b'{"name": "bolt", "qty": "many"}', ItemIn)
    assert "ItemIn" in str(exc.value)


def test_read_json_endpoint_roundtrip():
    client = TestClient(_make_app())
    r = client.post("/items", content=b'{"name": "nut", "qty": 7}')
    assert r.status_code == 201
    assert r.headers["content-type"] == "application/json"
    assert r.json() == {"error": False, "message": "created", "data": {"name": "nut", "qty": 7}}


def test_read_json_endpoint_rejects_multiple_values():
    client = TestClient(_make_app())
    r = client.post("/items", content=b'{"name": "a", "qty": 1}{"name": "b", "qty": 2}')
    assert r.status_code == 400
    assert r.json() == {"error": True, "message": "body may have only one json value"}


def test_read_json_enforces_declared_size_limit():
    client = TestClient(_make_app(max_bytes=16))
    r = client.post("/items", content=b'{"name": "' + b"x" * 64 + b'", "qty": 1}')
    assert r.status_code == 413
    assert r.json()["error"] is True


def test_read_json_stops_streaming_once_limit_is_passed():
    request, pending = _stream_request([b"x" * 8] * 5)
    with pytest.raises(PayloadTooLarge):
        asyncio.run(read_json(request, max_bytes=10))
    # Only the first two chunks were consumed.
    assert len(pending) == 3


def test_read_json_defaults_to_one_mebibyte():
    body = b'"' + b"a" * (1024 * 1024) + b'"'
    request, _ = _stream_request([body])
    with pytest.raises(PayloadTooLarge):
        asyncio.run(read_json(request))

    request, _ = _stream_request([b'{"ok": true}'])
    assert asyncio.run(read_json(request, max_bytes=0)) == {"ok": True}


def test_write_json_merges_headers_and_forces_content_type():
    resp = write_json(
        202,
        {"when": datetime(2024, 1, 2, tzinfo=timezone.utc), "tags": ("a", "b")},
        headers={"X-Trace-Id": "abc", "Content-Type": "text/plain"},
    )
    assert resp.status_code == 202
    assert resp.headers["x-trace-id"] == "abc"
    assert resp.headers["content-type"] == "application/json"
    assert json.loads(resp.body) == {"when": "2024-01-02T00:00:00+00:00", "tags": ["a", "b"]}


def test_write_json_fails_without_building_response_on_marshal_error():
    with pytest.raises(EncodeError):
        write_json(200, {"bad": object()})
    with pytest.raises(EncodeError):
        write_json(200, float("nan"))


def test_error_json_default_status_and_envelope():
    resp = error_json(ValueError("bad input"))
    assert resp.status_code == 400
    assert resp.body == b'{"error":true,"message":"bad input"}'
    assert resp.headers["content-type"] == "application/json"

    resp = error_json(RuntimeError("nope"), 503)
    assert resp.status_code == 503


def test_envelope_keeps_nested_nulls_in_data():
    resp = write_json(200, JSONEnvelope(message="ok", data={"note": None}))
    assert json.loads(resp.body) == {"error": False, "message": "ok", "data": {"note": None}}

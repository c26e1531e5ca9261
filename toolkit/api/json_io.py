from __future__ import annotations

import json
from dataclasses import asdict, is_dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Any, Mapping, Optional

from pydantic import BaseModel, TypeAdapter, ValidationError
from starlette.requests import Request
from starlette.responses import Response

from toolkit.api.models import JSONEnvelope
from toolkit.config import DEFAULT_MAX_FILE_SIZE
from toolkit.errors import DecodeError, EncodeError, MultipleJSONValues, PayloadTooLarge


def _reject_constant(name: str) -> Any:
    raise ValueError(f"invalid json literal {name}")


_decoder = json.JSONDecoder(parse_constant=_reject_constant)
_JSON_WS = " \t\n\r"


async def read_json(
    request: Request, model: Any = None, *, max_bytes: Optional[int] = None
) -> Any:
    """Read a request body holding exactly one JSON value.

    Args:
      model: optional pydantic model class or type to validate into
      max_bytes: body ceiling; None or <= 0 means 1 MiB

    Notes:
    - The body is streamed; an oversized body fails before it is buffered.
    - Trailing data after the first value is rejected.

    """

    limit = max_bytes if max_bytes and max_bytes > 0 else DEFAULT_MAX_FILE_SIZE
    body = await _read_body_bounded(request, limit)
    return decode_json(body, model)


async def _read_body_bounded(request: Request, limit: int) -> bytes:
    declared = request.headers.get("content-length", "").strip()
    if declared.isdigit() and int(declared) > limit:
        raise PayloadTooLarge(f"request body too large: {declared} > {limit} bytes")

    buf = bytearray()
    async for chunk in request.stream():
        buf.extend(chunk)
        if len(buf) > limit:
            raise PayloadTooLarge(f"request body too large: exceeds {limit} bytes")
    return bytes(buf)


def decode_json(body: bytes, model: Any = None) -> Any:
    """Decode exactly one JSON value from body, optionally validating it."""

    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecodeError(f"body is not valid utf-8: {e}") from e

    start = len(text) - len(text.lstrip(_JSON_WS))
    if start == len(text):
        raise DecodeError("body must not be empty")

    try:
        value, end = _decoder.raw_decode(text, start)
    except (ValueError, RecursionError) as e:
        raise DecodeError(f"malformed json: {e}") from e

    if text[end:].strip(_JSON_WS):
        raise MultipleJSONValues()

    if model is None:
        return value
    try:
        return TypeAdapter(model).validate_python(value)
    except ValidationError as e:
        raise DecodeError(f"json does not match {_type_name(model)}: {e}") from e


def write_json(
    status: int, data: Any, headers: Optional[Mapping[str, str]] = None
) -> Response:
    """Build a JSON response.

    Notes:
    - Nothing is built when data cannot be marshalled (EncodeError).
    - Caller headers are merged in; Content-Type is always application/json.

    """

    body = encode_json(data)
    merged = {k: v for k, v in (headers or {}).items() if k.lower() != "content-type"}
    return Response(
        content=body, status_code=int(status), headers=merged, media_type="application/json"
    )


def error_json(err: BaseException, status: int = 400) -> Response:
    """Send err as a JSONEnvelope with error=True (default status 400)."""

    payload = JSONEnvelope(error=True, message=str(err))
    return write_json(status, payload)


def encode_json(data: Any, *, indent: Optional[str] = None) -> bytes:
    """Marshal data to UTF-8 JSON bytes, compact unless indent is given."""

    separators = (",", ":") if indent is None else (",", ": ")
    try:
        out = json.dumps(
            data,
            default=_to_jsonable,
            ensure_ascii=False,
            allow_nan=False,
            indent=indent,
            separators=separators,
        )
    except (TypeError, ValueError, RecursionError) as e:
        raise EncodeError(f"cannot marshal {type(data).__name__} to json: {e}") from e
    return out.encode("utf-8")


def _to_jsonable(obj: Any) -> Any:
    """json.dumps hook for the common non-JSON types.

    Unknown types raise TypeError rather than being stringified.
    """

    if isinstance(obj, JSONEnvelope):
        out = obj.model_dump(mode="json")
        if out.get("data") is None:
            out.pop("data", None)
        return out
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json")
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, Path):
        return str(obj)
    if is_dataclass(obj) and not isinstance(obj, type):
        return asdict(obj)
    if isinstance(obj, (set, frozenset)):
        return list(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def _type_name(model: Any) -> str:
    return getattr(model, "__name__", None) or repr(model)

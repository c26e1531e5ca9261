from __future__ import annotations

import http.client
import logging
import ssl
from typing import Any, Optional
from urllib.error import HTTPError, URLError
from urllib.request import HTTPSHandler, OpenerDirector, Request, build_opener

from toolkit.api.json_io import encode_json
from toolkit.errors import TransportError

log = logging.getLogger("toolkit")


def default_opener() -> OpenerDirector:
    """Opener with the default SSL context (verification ON)."""

    return build_opener(HTTPSHandler(context=ssl.create_default_context()))


def push_json_to_remote(
    url: str,
    data: Any,
    *,
    opener: Optional[OpenerDirector] = None,
    timeout: Optional[float] = None,
) -> int:
    """POST data as indented JSON to url and return the response status.

    Args:
      opener: client used for the call; defaults to default_opener()
      timeout: socket timeout in seconds; None waits indefinitely

    Notes:
    - 4xx/5xx are returned as status codes, not raised.
    - Transport failures raise TransportError (status_code == 0).
    - The response body is discarded and the connection released.

    """

    body = encode_json(data, indent="\t")
    try:
        req = Request(url=url, data=body, method="POST")
    except ValueError as e:
        raise TransportError(f"invalid url: {url!r}") from e
    req.add_header("Content-Type", "application/json")

    client = opener or default_opener()
    kwargs = {} if timeout is None else {"timeout": timeout}
    try:
        with client.open(req, **kwargs) as resp:
            status = int(resp.status)
    except HTTPError as e:
        status = int(e.code or 0)
        e.close()
    except (URLError, OSError, http.client.HTTPException, ValueError) as e:
        log.info("push_failed", extra={"url": url, "reason": str(e)})
        raise TransportError(f"network error: {e}") from e

    log.debug("push_done", extra={"url": url, "status_code": status})
    return status

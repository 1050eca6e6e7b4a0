"""Minimal urllib helpers shared by the structure providers."""

from __future__ import annotations

import json
import socket
from typing import Any, Optional
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from molens.core.errors import NetworkFailure

DEFAULT_USER_AGENT = "molens/1.0"


def fetch_bytes(
    url: str,
    source: str,
    method: str = "GET",
    data: Optional[dict | str] = None,
    timeout: float = 30,
    user_agent: str = DEFAULT_USER_AGENT,
    accept: Optional[str] = None,
) -> bytes:
    """Execute an HTTP request and return the raw body.

    Raises NetworkFailure on HTTP errors, connection errors and timeouts.
    """
    headers = {"User-Agent": user_agent}
    if accept:
        headers["Accept"] = accept
    body: Optional[bytes] = None
    if data is not None:
        headers["Content-Type"] = "application/json"
        body = json.dumps(data).encode("utf-8") if isinstance(data, dict) else data.encode("utf-8")
    req = Request(url, data=body, method=method, headers=headers)
    try:
        with urlopen(req, timeout=timeout) as resp:
            return resp.read()
    except HTTPError as e:
        raise NetworkFailure(source, url, e.reason or "HTTP error", status=e.code) from e
    except (URLError, socket.timeout, TimeoutError, ConnectionError) as e:
        raise NetworkFailure(source, url, f"{type(e).__name__}: {e}") from e


def fetch_text(url: str, source: str, **kwargs: Any) -> str:
    """GET ``url`` and decode the body as UTF-8 text."""
    return fetch_bytes(url, source, **kwargs).decode("utf-8", errors="replace")


def fetch_json(url: str, source: str, **kwargs: Any) -> Any:
    """Fetch ``url`` and decode a JSON body. Invalid JSON raises NetworkFailure."""
    kwargs.setdefault("accept", "application/json")
    body = fetch_bytes(url, source, **kwargs)
    try:
        return json.loads(body.decode("utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise NetworkFailure(source, url, f"invalid JSON: {e}") from e

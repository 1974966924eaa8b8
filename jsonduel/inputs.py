"""Loading the two sides of a comparison.

Every loader returns a SideResult: a JSON value, or an error attached to
that side only. Nothing here raises for bad input, except parse_json_strict
for callers that want an exception.
"""

from __future__ import annotations

import json
import logging
import sys
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

import requests

from .core.types import SideResult
from .errors import InputError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0

_BODYLESS_METHODS = ("GET", "HEAD")


@dataclass(frozen=True)
class RequestConfig:
    """
    One HTTP request to fetch a document with.

    Attributes:
        url: Target URL; https:// is assumed when no scheme is given
        method: HTTP method
        headers: Ordered (name, value) pairs
        body: Request body, sent for methods other than GET and HEAD
    """

    url: str
    method: str = "GET"
    headers: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)
    body: str = ""

    @property
    def normalized_url(self) -> str:
        url = self.url.strip()
        if not url.startswith(("http://", "https://")):
            url = "https://" + url
        return url

    def header_dict(self) -> Dict[str, str]:
        return {k.strip(): v for k, v in self.headers if k.strip()}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "method": self.method,
            "headers": [{"key": k, "value": v} for k, v in self.headers],
            "body": self.body,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RequestConfig":
        headers = tuple(
            (h.get("key", ""), h.get("value", "")) for h in data.get("headers") or []
        )
        return cls(
            url=data.get("url", ""),
            method=(data.get("method") or "GET").upper(),
            headers=headers,
            body=data.get("body") or "",
        )


def parse_header(line: str) -> Tuple[str, str]:
    """Parse a ``Name: value`` header line."""
    name, sep, value = line.partition(":")
    if not sep or not name.strip():
        raise InputError(f"Invalid header {line!r}, expected 'Name: value'")
    return name.strip(), value.strip()


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not a valid JSON value")


def parse_json_strict(text: str, side: Optional[str] = None) -> Any:
    """Parse JSON text, raising InputError when it is not a valid document."""
    if not text or not text.strip():
        raise InputError("Empty document", side=side)
    try:
        return json.loads(text, parse_constant=_reject_constant)
    except (ValueError, RecursionError) as e:
        raise InputError(f"Invalid JSON: {e}", side=side) from e


def parse_json_text(text: str, side: Optional[str] = None) -> SideResult:
    """Parse pasted JSON text into a SideResult."""
    try:
        return SideResult.success(parse_json_strict(text, side=side))
    except InputError as e:
        return SideResult.failure(e.args[0])


def load_json_file(path: str, side: Optional[str] = None) -> SideResult:
    """Load a JSON document from a file; ``-`` reads standard input."""
    try:
        if path == "-":
            text = sys.stdin.read()
        else:
            with open(path, "r", encoding="utf-8") as f:
                text = f.read()
    except (OSError, UnicodeDecodeError) as e:
        return SideResult.failure(f"Cannot read {path}: {e}")
    return parse_json_text(text, side=side)


def fetch_json(
    config: RequestConfig,
    *,
    session: Optional[requests.Session] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> SideResult:
    """Fetch a JSON document over HTTP.

    Connection failures, non-2xx statuses, non-JSON content types and
    malformed bodies all come back as failed SideResults.
    """
    url = config.normalized_url
    method = config.method.upper()
    data = config.body.encode("utf-8") if config.body and method not in _BODYLESS_METHODS else None
    http = session or requests

    logger.debug("Fetching %s %s", method, url)
    try:
        resp = http.request(
            method,
            url,
            headers=config.header_dict(),
            data=data,
            timeout=timeout,
        )
    except requests.Timeout:
        return SideResult.failure(f"Timeout after {timeout:g}s")
    except requests.ConnectionError as e:
        return SideResult.failure(f"Connection failed: {e}")
    except requests.RequestException as e:
        return SideResult.failure(f"Request failed: {e}")

    logger.debug("Fetched %s %s -> %d", method, url, resp.status_code)
    if not 200 <= resp.status_code < 300:
        return SideResult.failure(f"HTTP status {resp.status_code}", status=resp.status_code)

    content_type = resp.headers.get("content-type", "")
    if "application/json" not in content_type.lower():
        return SideResult.failure(
            "Response is not JSON (content-type: {})".format(content_type or "missing"),
            status=resp.status_code,
        )

    parsed = parse_json_text(resp.text)
    if not parsed.ok:
        return SideResult.failure(parsed.error, status=resp.status_code)
    return SideResult.success(parsed.value, status=resp.status_code)


def _fetch_with_own_session(
    config: RequestConfig,
    session_factory: Callable[[], requests.Session],
    timeout: float,
) -> SideResult:
    session = session_factory()
    try:
        return fetch_json(config, session=session, timeout=timeout)
    finally:
        session.close()


def fetch_pair(
    left: RequestConfig,
    right: RequestConfig,
    *,
    session_factory: Callable[[], requests.Session] = requests.Session,
    timeout: float = DEFAULT_TIMEOUT,
) -> Tuple[SideResult, SideResult]:
    """Fetch both sides concurrently. One side failing never affects the other.

    Sessions are not shared between threads: each side gets its own from
    *session_factory*, closed once the side is fetched.
    """
    with ThreadPoolExecutor(max_workers=2) as pool:
        futures: List = [
            pool.submit(_fetch_with_own_session, config, session_factory, timeout)
            for config in (left, right)
        ]
        return futures[0].result(), futures[1].result()

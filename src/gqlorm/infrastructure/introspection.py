"""Fetch a schema from a live GraphQL endpoint via the introspection query."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

import requests
from graphql import get_introspection_query

from gqlorm import __version__
from gqlorm.domain.errors import SchemaSourceError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


def parse_header(raw: str) -> tuple[str, str]:
    """Parse one ``key:value`` header argument."""
    key, sep, value = raw.partition(":")
    if not sep:
        msg = f"Invalid header format '{raw}'. Headers must be in 'key:value' format."
        raise ValueError(msg)
    key, value = key.strip(), value.strip()
    if not key:
        msg = "Header key cannot be empty. Format: 'key:value'"
        raise ValueError(msg)
    if not value:
        msg = "Header value cannot be empty. Format: 'key:value'"
        raise ValueError(msg)
    return key, value


def parse_headers(raw: Iterable[str]) -> dict[str, str]:
    """Parse repeated ``-H key:value`` arguments; later keys win."""
    return dict(parse_header(item) for item in raw)


def fetch_introspection(
    url: str,
    *,
    headers: Mapping[str, str] | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    session: requests.Session | None = None,
) -> dict[str, Any]:
    """POST the introspection query to *url* and return the decoded response.

    Raises :class:`SchemaSourceError` on transport failures, non-2xx
    responses, invalid JSON, or a response carrying GraphQL ``errors``.
    """
    request_headers = {
        "Content-Type": "application/json",
        "Accept": "application/json",
        "User-Agent": f"gqlorm/{__version__}",
        **(headers or {}),
    }
    payload = {"query": get_introspection_query(descriptions=True)}
    http = session or requests
    logger.debug("Introspecting %s", url)
    try:
        response = http.post(url, json=payload, headers=request_headers, timeout=timeout)
    except requests.RequestException as exc:
        msg = f"Could not reach {url}: {exc}"
        raise SchemaSourceError(msg, subject=url) from exc

    if not response.ok:
        msg = f"Introspection request to {url} failed with HTTP {response.status_code}"
        raise SchemaSourceError(msg, subject=url)

    try:
        body = response.json()
    except ValueError as exc:
        msg = f"Introspection response from {url} is not valid JSON"
        raise SchemaSourceError(msg, subject=url) from exc

    if not isinstance(body, dict):
        msg = f"Introspection response from {url} is not a JSON object"
        raise SchemaSourceError(msg, subject=url)
    errors = body.get("errors")
    if errors:
        first = errors[0].get("message", errors[0]) if isinstance(errors[0], dict) else errors[0]
        msg = f"Introspection query against {url} returned errors: {first}"
        raise SchemaSourceError(msg, subject=url)
    if not isinstance(body.get("data"), dict) or "__schema" not in body["data"]:
        msg = f"Introspection response from {url} has no data.__schema (is introspection disabled?)"
        raise SchemaSourceError(msg, subject=url)
    return body

"""Per-request Redmine credentials taken from HTTP headers.

The server holds no Redmine configuration of its own. Every MCP request must
carry the target instance and the caller's personal API key:

    x-redmine-url: https://redmine.example.com
    x-redmine-api-key: <key from "My account" → "API access key">

A fresh RedmineClient is built from these for each call and dropped when the
call completes, so one caller's instance or key is never reused for another.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from fastmcp.server.dependencies import get_http_request

from mcp_redmine_http.client import ConfigurationError, RedmineClient

REDMINE_URL_HEADER = "x-redmine-url"
REDMINE_API_KEY_HEADER = "x-redmine-api-key"

HeaderValue = str | Sequence[str] | None


@dataclass(frozen=True)
class Credentials:
    base_url: str
    api_key: str


def _header_value(headers: Mapping[str, HeaderValue], name: str) -> str | None:
    """Look up a header case-insensitively; multi-valued headers yield their first value."""
    value = None
    for key, candidate in headers.items():
        if key.lower() == name:
            value = candidate
            break
    if value is None or isinstance(value, str):
        return value
    return value[0] if value else None


def resolve_credentials(headers: Mapping[str, HeaderValue] | None) -> Credentials:
    """Return the Redmine URL and API key carried by the request headers."""
    if headers is None:
        raise ConfigurationError("Request headers not available")

    url = _header_value(headers, REDMINE_URL_HEADER)
    api_key = _header_value(headers, REDMINE_API_KEY_HEADER)
    if not url or not api_key:
        raise ConfigurationError(
            "Redmine configuration not found. "
            f"Set {REDMINE_URL_HEADER} and {REDMINE_API_KEY_HEADER} headers in your request."
        )
    return Credentials(base_url=url, api_key=api_key)


def request_headers() -> dict[str, list[str]] | None:
    """Headers of the HTTP request behind the current MCP call, or None outside HTTP."""
    try:
        request = get_http_request()
    except RuntimeError:
        return None
    return {key: request.headers.getlist(key) for key in request.headers.keys()}


def client_from_request(timeout: float = 30.0) -> RedmineClient:
    credentials = resolve_credentials(request_headers())
    return RedmineClient(
        base_url=credentials.base_url,
        api_key=credentials.api_key,
        timeout=timeout,
    )

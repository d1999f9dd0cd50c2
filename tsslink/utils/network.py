"""URL helpers for WebSocket endpoints."""

from __future__ import annotations

from urllib.parse import urlparse, parse_qsl, urlencode, urlunparse


def ws_url(server: str, *, secure: bool = False) -> str:
    """Normalize a host, http(s) or ws(s) address into a ws(s) URL."""
    server = (server or "").strip()
    if server.startswith(("ws://", "wss://")):
        return server
    if server.startswith(("http://", "https://")):
        parsed = urlparse(server)
        scheme = "wss" if (parsed.scheme == "https" or secure) else "ws"
        return urlunparse((scheme, parsed.netloc, parsed.path, parsed.params, parsed.query, parsed.fragment))
    scheme = "wss" if secure else "ws"
    return f"{scheme}://{server}"


def set_query_param(url: str, name: str, value: str) -> str:
    """Set (or replace) one query parameter, keeping the others."""
    parsed = urlparse(url)
    query_params = dict(parse_qsl(parsed.query, keep_blank_values=True))
    query_params[name] = value
    new_query = urlencode(query_params)
    return urlunparse((parsed.scheme, parsed.netloc, parsed.path, parsed.params, new_query, parsed.fragment))


__all__ = ["set_query_param", "ws_url"]

"""Default collaborators for the render pipeline.

Used when the application does not supply its own: entry selection,
response headers, status code, and the error responder.
"""

from __future__ import annotations

import html
import logging
from typing import TYPE_CHECKING, Any

from ssrgate.pipeline.context import AppConfig
from ssrgate.pipeline.errors import describe_error
from ssrgate.pipeline.routing import route_attr

if TYPE_CHECKING:
    from ssrgate.pipeline.context import IncomingRequest, OutgoingResponse, RequestContext

logger = logging.getLogger(__name__)

NOT_FOUND_ROUTE_NAME = "not_found"


def _matches_prefix(path: str, prefix: str) -> bool:
    if prefix == "/":
        return True
    prefix = prefix.rstrip("/")
    return path == prefix or path.startswith(prefix + "/")


def get_app_config(ctx: RequestContext, request: IncomingRequest, entries: dict[str, Any]) -> AppConfig:
    """Pick the entry whose path prefix is the most specific match.

    Entries are keyed by path prefix (``/``, ``/admin`` …) and are either
    ``AppConfig`` instances or mappings with the same fields.

    Raises:
        LookupError: If no entry serves the request path
    """
    for prefix in sorted(entries, key=lambda p: len(p.rstrip("/").split("/")), reverse=True):
        if not _matches_prefix(request.path, prefix):
            continue
        entry = entries[prefix]
        if isinstance(entry, AppConfig):
            return entry
        return AppConfig(key=prefix, **{k: v for k, v in entry.items() if k != "key"})

    raise LookupError(f"No entry configured for path {request.path!r}")


def set_headers(response: OutgoingResponse, route: Any) -> None:
    """Apply the route's ``headers`` (a mapping or a callable returning one)."""
    headers = route_attr(route, "headers")
    if callable(headers):
        headers = headers()
    if not headers:
        return
    for name, value in headers.items():
        response.set_header(name, str(value))


def _store_state(store: Any) -> dict[str, Any]:
    get_state = getattr(store, "get_state", None)
    if callable(get_state):
        state = get_state()
    else:
        state = getattr(store, "state", None)
    return state if isinstance(state, dict) else {}


def get_status_code(store: Any, route: Any) -> int:
    """Status from store state, then route metadata, then 200."""
    status = _store_state(store).get("status_code")
    if status:
        return int(status)

    status = route_attr(route, "status")
    if status:
        return int(status)

    return 404 if route_attr(route, "name") == NOT_FOUND_ROUTE_NAME else 200


def error_handler(ctx: RequestContext, request: IncomingRequest, response: OutgoingResponse, error: Any) -> None:
    """Respond with 500; include the traceback only in debug mode."""
    if ctx.config.debug:
        body = f"<h1>Internal Server Error</h1><pre>{html.escape(describe_error(error))}</pre>"
    else:
        body = "<h1>Internal Server Error</h1>"
    response.status(500).send(body)

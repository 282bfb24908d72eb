"""Terminal response actions.

Every request ends in exactly one of: cached send, 404, redirect,
status + body, or a delegated error response. ``TrackedResponse`` enforces
that on top of the host response object.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ssrgate.pipeline.errors import ResponseAlreadySentError
from ssrgate.pipeline.hook import HookPoint

if TYPE_CHECKING:
    from ssrgate.pipeline.context import IncomingRequest, OutgoingResponse, RenderOutput
    from ssrgate.pipeline.hook import HookRegistry

logger = logging.getLogger(__name__)

DEFAULT_REDIRECT_STATUS = 301


class TrackedResponse:
    """Wraps a host response and records whether it has been answered.

    ``status`` and ``set_header`` are not terminal; ``send``, ``send_status``
    and ``redirect`` are, and only one of them may happen.
    """

    def __init__(self, response: OutgoingResponse) -> None:
        self._response = response
        self.committed = False

    def _ensure_open(self, action: str) -> None:
        if self.committed:
            raise ResponseAlreadySentError(f"Response already sent; refusing {action}")

    def send(self, body: str | bytes) -> None:
        self._ensure_open("send")
        self._response.send(body)
        self.committed = True

    def status(self, code: int) -> TrackedResponse:
        self._response.status(code)
        return self

    def redirect(self, status: int, url: str) -> None:
        self._ensure_open("redirect")
        self._response.redirect(status, url)
        self.committed = True

    def send_status(self, code: int) -> None:
        self._ensure_open("send_status")
        self._response.send_status(code)
        self.committed = True

    def set_header(self, name: str, value: str) -> None:
        self._response.set_header(name, value)

    def __getattr__(self, name: str):
        if name == "_response":
            raise AttributeError(name)
        return getattr(self._response, name)


def redirect_status(status_code: int) -> int:
    """Keep 3xx codes for redirects, fall back to 301 for anything else."""
    return status_code if str(status_code).startswith("3") else DEFAULT_REDIRECT_STATUS


def dispatch_response(
    request: IncomingRequest,
    response: OutgoingResponse,
    output: RenderOutput,
    status_code: int,
    hooks: HookRegistry,
) -> None:
    """Issue the redirect or the status + body chosen by the render output."""
    url = output.redirect_url
    if url:
        url = hooks.apply(HookPoint.PRE_REDIRECT, url, request)
        status = redirect_status(status_code)
        logger.debug("Redirecting %s to %s (%d)", request.path, url, status)
        response.redirect(status, url)
        return

    response.status(status_code).send(output.response_string or "")

"""Error types and the pipeline's outer error boundary."""

from __future__ import annotations

import traceback
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from ssrgate.utils import invoke

if TYPE_CHECKING:
    from ssrgate.pipeline.context import IncomingRequest, OutgoingResponse, RequestContext
    from ssrgate.pipeline.hook import HookRegistry

ErrorResponder = Callable[["RequestContext", "IncomingRequest", "OutgoingResponse", Any], Any]


class GatewayError(Exception):
    """Base class for errors raised by ssrgate itself."""


class InvalidCachedResponseError(GatewayError, TypeError):
    """A pre-render-from-cache hook produced something that is not a body."""


class ResponseAlreadySentError(GatewayError, RuntimeError):
    """A second terminal action was attempted on the same response."""


class HookRegistryFrozenError(GatewayError, RuntimeError):
    """Registration was attempted after the registry was frozen."""


def describe_error(error: Any) -> str:
    """Formatted traceback for exceptions, the raw value otherwise."""
    if isinstance(error, BaseException):
        return "".join(traceback.format_exception(type(error), error, error.__traceback__)).rstrip()
    return str(error)


async def handle_pipeline_error(
    ctx: RequestContext,
    request: IncomingRequest,
    response: OutgoingResponse,
    error: Any,
    hooks: HookRegistry,
    error_responder: ErrorResponder,
) -> None:
    """Run the error hook, log, and delegate to the error responder.

    Error hooks may observe or annotate the error; their result is
    discarded. If the response already received a terminal action the
    responder is skipped so the client never gets two.
    """
    from ssrgate.pipeline.hook import HookPoint

    try:
        hooks.apply(HookPoint.ERROR, error, request)
    except Exception as hook_error:
        ctx.logger.error("Error hook failed: %s", describe_error(hook_error))

    ctx.logger.error(describe_error(error))

    if getattr(response, "committed", False):
        ctx.logger.warning("Response already sent for %s %s; not delegating error", request.method, request.path)
        return

    await invoke(error_responder, ctx, request, response, error)

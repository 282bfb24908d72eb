"""Rendered-response cache and the gate that short-circuits the pipeline.

The cache manager is process-wide, but the component caching scope set by
``enable_component_caching`` lives in a ``ContextVar`` so that concurrent
requests never see each other's configuration.
"""

from __future__ import annotations

import logging
import threading
from contextvars import ContextVar
from typing import TYPE_CHECKING, Any

from ssrgate.pipeline.errors import InvalidCachedResponseError
from ssrgate.pipeline.hook import HookPoint

if TYPE_CHECKING:
    from ssrgate.pipeline.context import IncomingRequest, OutgoingResponse
    from ssrgate.pipeline.hook import HookRegistry

logger = logging.getLogger(__name__)

_caching_scope: ContextVar[dict[str, Any] | None] = ContextVar("ssrgate_caching_scope", default=None)


def cache_key(request: IncomingRequest) -> str:
    """Cache key for a request: hostname followed by path and query."""
    return f"{request.hostname}{request.url}"


class CacheManager:
    """Stores rendered bodies keyed by request, active in production only.

    Attributes:
        production: Whether lookups and stores are enabled
    """

    def __init__(self, production: bool = False) -> None:
        self.production = production
        self._entries: dict[str, str | bytes] = {}
        self._lock = threading.Lock()

    def enable_component_caching(self, config: dict[str, Any] | None) -> None:
        """Scope component caching configuration to the current request.

        Safe to call repeatedly; the last call within a request wins.
        """
        _caching_scope.set(dict(config) if config else None)

    def current_caching_config(self) -> dict[str, Any] | None:
        """Component caching configuration for the current request."""
        return _caching_scope.get()

    def get_cached_if_prod(self, request: IncomingRequest) -> str | bytes | None:
        """Cached body for the request, or None outside production."""
        if not self.production:
            return None
        with self._lock:
            return self._entries.get(cache_key(request))

    def set_cached_if_prod(self, request: IncomingRequest, body: str | bytes) -> None:
        """Store a rendered body for the request (production only)."""
        if not self.production:
            return
        with self._lock:
            self._entries[cache_key(request)] = body
        logger.debug("Cached response for %s", cache_key(request))


class CacheGate:
    """Serves a cached response and stops the pipeline when one exists."""

    def __init__(self, cache_manager: CacheManager, hooks: HookRegistry) -> None:
        self.cache_manager = cache_manager
        self.hooks = hooks

    def serve_from_cache(
        self,
        request: IncomingRequest,
        response: OutgoingResponse,
        caching_config: dict[str, Any] | None = None,
    ) -> bool:
        """Send the cached body if there is one.

        The pre-render-from-cache hooks see the raw lookup result and their
        output is what counts: a hook can supply a body on a miss.

        Returns:
            True if a response was sent and the pipeline must stop

        Raises:
            InvalidCachedResponseError: If a hook produced a non-body value
        """
        self.cache_manager.enable_component_caching(caching_config)
        cached = self.hooks.apply(
            HookPoint.PRE_RENDER_FROM_CACHE,
            self.cache_manager.get_cached_if_prod(request),
            request,
        )
        if not cached:
            return False

        if not isinstance(cached, (str, bytes)):
            raise InvalidCachedResponseError(
                f"Cached response must be str or bytes, got {type(cached).__name__}"
            )

        logger.debug("Serving %s %s from cache", request.method, request.path)
        response.send(cached)
        return True

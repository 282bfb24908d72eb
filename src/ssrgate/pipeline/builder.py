"""Request-scoped application context assembly.

Resolves the app config for the request, then derives the data client,
a fresh store, and the route table from it.

Precedence:
    http client options:  app_config.config["http_client"] > options.http_client
    store options:        app_config.config["redux_options"] > (options.redux_middlewares,
                                                                options.thunk_middleware)
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from functools import partial
from typing import TYPE_CHECKING, Any

from ssrgate.pipeline.context import AppConfig, AppState, RenderOptions
from ssrgate.pipeline.hook import HookPoint

if TYPE_CHECKING:
    from ssrgate.pipeline.context import IncomingRequest, OutgoingResponse, RequestContext
    from ssrgate.pipeline.hook import HookRegistry

logger = logging.getLogger(__name__)

# Type aliases
AppConfigFn = Callable[["RequestContext", "IncomingRequest", dict[str, Any]], AppConfig]
HttpClientFn = Callable[[dict[str, Any], "IncomingRequest", "OutgoingResponse"], Any]
CreateStoreFn = Callable[..., Any]
HotReloadFn = Callable[[Any, Callable[..., Any]], None]


def resolve_http_client_options(app_config: AppConfig, options: RenderOptions) -> dict[str, Any]:
    """Entry-level http client options if set, else the caller default."""
    entry_options = (app_config.config or {}).get("http_client")
    return entry_options if entry_options else options.http_client


def resolve_store_options(app_config: AppConfig, options: RenderOptions) -> dict[str, Any]:
    """Entry-level store options if set, else the caller middleware/thunk pair."""
    entry_options = (app_config.config or {}).get("redux_options")
    if entry_options:
        return entry_options
    return {
        "middlewares": options.redux_middlewares,
        "thunk": options.thunk_middleware,
    }


class ContextBuilder:
    """Builds the app state for one request.

    Attributes:
        get_app_config: Selects the entry serving the request
        get_http_client: Builds the data client
        create_store: Builds the per-request store
        hot_reload: Optional subscriber ``(reducers_location, callback)`` used
            by development tooling; when absent the store is built in
            non-development mode with no subscription
    """

    def __init__(
        self,
        get_app_config: AppConfigFn,
        get_http_client: HttpClientFn,
        create_store: CreateStoreFn,
        hooks: HookRegistry,
        hot_reload: HotReloadFn | None = None,
    ) -> None:
        self.get_app_config = get_app_config
        self.get_http_client = get_http_client
        self.create_store = create_store
        self.hooks = hooks
        self.hot_reload = hot_reload

    def _subscriber(self, app_config: AppConfig, entries_config: dict[str, Any]) -> Callable[..., None] | None:
        if self.hot_reload is None:
            return None
        reducers_location = (entries_config.get(app_config.key) or {}).get("reducers")
        return partial(self.hot_reload, reducers_location)

    def build(
        self,
        ctx: RequestContext,
        request: IncomingRequest,
        response: OutgoingResponse,
        entries: dict[str, Any],
        entries_config: dict[str, Any],
        options: RenderOptions,
    ) -> AppState:
        """Resolve configuration and assemble client, store and routes."""
        app_config: AppConfig = self.hooks.apply(
            HookPoint.POST_RENDER_REQUIREMENTS,
            self.get_app_config(ctx, request, entries),
            request,
        )
        logger.debug("Serving %s with app '%s'", request.path, app_config.name)

        http_client = self.get_http_client(
            resolve_http_client_options(app_config, options),
            request,
            response,
        )

        store_options = resolve_store_options(app_config, options)
        store = self.create_store(
            http_client,
            lambda: app_config.reducers,
            store_options.get("middlewares") or [],
            self._subscriber(app_config, entries_config),
            self.hot_reload is not None,
            store_options.get("thunk"),
        )

        routes = app_config.routes(store, http_client)
        return AppState(app_config=app_config, http_client=http_client, store=store, routes=routes)

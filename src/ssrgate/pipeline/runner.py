"""Per-request render lifecycle.

States:
    CacheCheck → ContextBuild → RouteMatch ─┬─ NotFound → 404
                                            └─ Matched → EnterHooks → HeaderApply
                                                       → Render → ResponseDecision

The error boundary wraps every state. Only the cache gate, the not-found
branch and the boundary end the pipeline early.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from ssrgate import defaults
from ssrgate.help_text import MISSING_404_TEXT, show_help_text
from ssrgate.pipeline.builder import ContextBuilder, HotReloadFn
from ssrgate.pipeline.cache import CacheGate, CacheManager
from ssrgate.pipeline.context import (
    AssetsArgs,
    BodyArgs,
    EntriesArgs,
    IncomingRequest,
    OutgoingResponse,
    RenderConfig,
    RenderContext,
    RenderMethodConfig,
    RenderOptions,
    RenderOutput,
    RequestContext,
)
from ssrgate.pipeline.dispatch import TrackedResponse, dispatch_response
from ssrgate.pipeline.errors import ErrorResponder, handle_pipeline_error
from ssrgate.pipeline.hook import HookPoint, HookRegistry
from ssrgate.pipeline.routing import NotFound, run_on_enter
from ssrgate.plugins import get_render_method
from ssrgate.utils import invoke

logger = logging.getLogger(__name__)


@dataclass
class Collaborators:
    """External components the lifecycle orchestrates.

    Attributes:
        render: ``(ctx, request, RenderContext, RenderConfig, AssetsArgs,
            RenderMethodConfig) -> RenderOutput``, sync or async
        match_route: ``(ctx, request, routes) -> Matched | NotFound``, sync or async
        get_http_client: ``(options, request, response) -> client``
        create_store: ``(http_client, reducers_fn, middlewares, subscribe,
            dev_mode, thunk) -> store``
        get_app_config: Entry selection, see ``ssrgate.defaults.get_app_config``
        set_headers: ``(response, route) -> None``
        get_status_code: ``(store, route) -> int``
        error_handler: ``(ctx, request, response, error)``, sync or async
        show_help_text: ``(text, logger) -> None``
        hot_reload: Optional development-mode reducer subscription
    """

    render: Callable[..., Any]
    match_route: Callable[..., Any]
    get_http_client: Callable[..., Any]
    create_store: Callable[..., Any]
    get_app_config: Callable[..., Any] = defaults.get_app_config
    set_headers: Callable[..., Any] = defaults.set_headers
    get_status_code: Callable[..., int] = defaults.get_status_code
    error_handler: ErrorResponder = defaults.error_handler
    show_help_text: Callable[[str, logging.Logger], None] = show_help_text
    hot_reload: HotReloadFn | None = None


@dataclass
class LifecycleRunner:
    """Render middleware: one awaited call per incoming request.

    Attributes:
        collaborators: External components invoked by the pipeline
        cache_manager: Process-wide cache (its production flag is fixed at startup)
    """

    collaborators: Collaborators
    cache_manager: CacheManager = field(default_factory=CacheManager)

    async def __call__(
        self,
        ctx: RequestContext,
        request: IncomingRequest,
        response: OutgoingResponse,
        entries: EntriesArgs,
        body: BodyArgs,
        assets: AssetsArgs,
        options: RenderOptions | None = None,
        hooks: HookRegistry | None = None,
        server_plugins: Sequence[Any] | None = None,
        caching_config: dict[str, Any] | None = None,
    ) -> None:
        options = options or RenderOptions()
        hooks = hooks or HookRegistry()
        tracked = response if isinstance(response, TrackedResponse) else TrackedResponse(response)

        try:
            await self._run(
                ctx, request, tracked, entries, body, assets, options, hooks, server_plugins, caching_config
            )
        except Exception as error:
            await handle_pipeline_error(ctx, request, tracked, error, hooks, self.collaborators.error_handler)

    async def _run(
        self,
        ctx: RequestContext,
        request: IncomingRequest,
        response: TrackedResponse,
        entries: EntriesArgs,
        body: BodyArgs,
        assets: AssetsArgs,
        options: RenderOptions,
        hooks: HookRegistry,
        server_plugins: Sequence[Any] | None,
        caching_config: dict[str, Any] | None,
    ) -> None:
        c = self.collaborators

        if CacheGate(self.cache_manager, hooks).serve_from_cache(request, response, caching_config):
            return

        builder = ContextBuilder(
            get_app_config=c.get_app_config,
            get_http_client=c.get_http_client,
            create_store=c.create_store,
            hooks=hooks,
            hot_reload=c.hot_reload,
        )
        state = builder.build(ctx, request, response, entries.entries, entries.entries_config, options)

        match = await invoke(c.match_route, ctx, request, state.routes)
        if isinstance(match, NotFound):
            c.show_help_text(MISSING_404_TEXT, ctx.logger)
            response.send_status(404)
            return

        await run_on_enter(match.branch, request)

        route = hooks.apply(HookPoint.POST_GET_CURRENT_ROUTE, match.route, request)
        c.set_headers(response, route)

        render_method = get_render_method(server_plugins, ctx.logger)
        status_code = c.get_status_code(state.store, route)

        output: RenderOutput = await invoke(
            c.render,
            ctx,
            request,
            RenderContext(
                entry_point=state.app_config.component,
                app_name=state.app_config.name,
                store=state.store,
                routes=state.routes,
                http_client=state.http_client,
                current_route=route,
            ),
            RenderConfig(
                body=body.body,
                body_wrapper=body.body_wrapper,
                entries_plugins=entries.entries_plugins,
                body_config=options.entry_wrapper_config,
                env_variables=options.env_variables,
            ),
            assets,
            RenderMethodConfig(render_method=render_method, cache_manager=self.cache_manager),
        )
        output = hooks.apply(HookPoint.POST_RENDER, output, request)

        dispatch_response(request, response, output, status_code, hooks)

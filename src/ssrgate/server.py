"""FastAPI host for the render pipeline.

Adapts Starlette requests/responses to the pipeline's request/response
protocols and mounts the lifecycle runner on a catch-all route.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable, Mapping
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import RedirectResponse, Response

from ssrgate.config import GatewayConfig, get_config
from ssrgate.pipeline import (
    AssetsArgs,
    BodyArgs,
    CacheManager,
    Collaborators,
    EntriesArgs,
    HookPoint,
    HookRegistry,
    LifecycleRunner,
    RenderOptions,
    RequestContext,
)
from ssrgate.pipeline.hook import import_object
from ssrgate.plugins import load_plugins

logger = logging.getLogger(__name__)


@dataclass
class HostRequest:
    """Pipeline view of an incoming HTTP request."""

    method: str
    path: str
    url: str
    hostname: str
    headers: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_starlette(cls, request: Request) -> HostRequest:
        query = request.url.query
        return cls(
            method=request.method,
            path=request.url.path,
            url=f"{request.url.path}?{query}" if query else request.url.path,
            hostname=request.url.hostname or "",
            headers={k.lower(): v for k, v in request.headers.items()},
        )


class HostResponse:
    """Collects the pipeline's response actions, then converts to Starlette."""

    def __init__(self) -> None:
        self.status_code = 200
        self.headers: dict[str, str] = {}
        self.body: str | bytes | None = None
        self.location: str | None = None

    def send(self, body: str | bytes) -> None:
        self.body = body

    def status(self, code: int) -> HostResponse:
        self.status_code = code
        return self

    def redirect(self, status: int, url: str) -> None:
        self.status_code = status
        self.location = url

    def send_status(self, code: int) -> None:
        self.status_code = code
        self.body = HTTPStatus(code).phrase

    def set_header(self, name: str, value: str) -> None:
        self.headers[name] = value

    def to_starlette(self) -> Response:
        if self.location is not None:
            return RedirectResponse(self.location, status_code=self.status_code, headers=self.headers)
        return Response(
            content=self.body if self.body is not None else b"",
            status_code=self.status_code,
            headers=self.headers,
            media_type="text/html",
        )


@dataclass
class Gateway:
    """Everything an application supplies to serve pages.

    Attributes:
        collaborators: Renderer, route matcher, client and store factories
        entries: Entry bundle
        body: Body / body wrapper pair
        assets: Asset and script-loading configuration
        hooks: Hook point -> transformers registered in code (run after configured ones)
        plugins: Server plugins registered in code (before configured ones)
        options: Render options; defaults to the configured render options
    """

    collaborators: Collaborators
    entries: EntriesArgs
    body: BodyArgs = field(default_factory=BodyArgs)
    assets: AssetsArgs = field(default_factory=AssetsArgs)
    hooks: dict[HookPoint, list[Callable[..., Any]]] = field(default_factory=dict)
    plugins: list[Any] = field(default_factory=list)
    options: RenderOptions | None = None


def load_gateway(path: str, config: GatewayConfig) -> Gateway:
    """Import a Gateway (or a ``factory(config) -> Gateway``) from ``module:attr``.

    Raises:
        ImportError: If the module cannot be imported
        TypeError: If the object is not a Gateway or factory
    """
    target = import_object(path)
    gateway = target(config) if callable(target) and not isinstance(target, Gateway) else target
    if not isinstance(gateway, Gateway):
        raise TypeError(f"{path} did not produce a Gateway (got {type(gateway).__name__})")
    return gateway


def build_hooks(config: GatewayConfig, gateway: Gateway) -> HookRegistry:
    """Configured hooks followed by code-registered hooks, frozen."""
    registry = config.load_hooks()
    for point, fns in gateway.hooks.items():
        for fn in fns:
            registry.register(point, fn)
    return registry.freeze()


def create_app(gateway: Gateway, config: GatewayConfig | None = None) -> FastAPI:
    """Create the FastAPI application serving every GET/HEAD through the pipeline.

    Process-level hooks receive ``(app, config)``: ``PRE_INIT_SERVER`` may
    replace the app before routes are mounted; ``POST_SERVER_RUN`` observes
    it once startup completes.
    """
    config = config or get_config()
    if config.debug:
        ssrgate_logger = logging.getLogger("ssrgate")
        ssrgate_logger.setLevel(logging.DEBUG)
        if not ssrgate_logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter("%(name)s:%(levelname)s: %(message)s"))
            ssrgate_logger.addHandler(handler)

    hooks = build_hooks(config, gateway)
    ctx = RequestContext(config=config, logger=logging.getLogger("ssrgate.render"))
    runner = LifecycleRunner(gateway.collaborators, CacheManager(production=config.production))
    options = gateway.options or config.render_options()
    plugins = [*gateway.plugins, *load_plugins(config.plugins)]

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        hooks.apply(HookPoint.POST_SERVER_RUN, app, config)
        logger.info("ssrgate serving %d entries (production=%s)", len(gateway.entries.entries), config.production)
        yield

    app = FastAPI(debug=config.debug, lifespan=lifespan)
    app = hooks.apply(HookPoint.PRE_INIT_SERVER, app, config)

    @app.api_route("/{full_path:path}", methods=["GET", "HEAD"], include_in_schema=False)
    async def render_page(request: Request) -> Response:
        host_request = HostRequest.from_starlette(request)
        host_response = HostResponse()
        await runner(
            ctx,
            host_request,
            host_response,
            gateway.entries,
            gateway.body,
            gateway.assets,
            options,
            hooks,
            plugins,
            config.caching,
        )
        return host_response.to_starlette()

    return app

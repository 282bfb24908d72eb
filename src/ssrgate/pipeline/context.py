"""Data model for the render pipeline.

Provides typed containers for everything threaded through a single
request, plus the protocols the host server's request/response objects
must satisfy.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from ssrgate.config import GatewayConfig
    from ssrgate.pipeline.cache import CacheManager


class IncomingRequest(Protocol):
    """Request object owned by the host server."""

    method: str
    path: str
    url: str
    hostname: str
    headers: Mapping[str, str]


class OutgoingResponse(Protocol):
    """Response object owned by the host server."""

    def send(self, body: str | bytes) -> None: ...

    def status(self, code: int) -> OutgoingResponse: ...

    def redirect(self, status: int, url: str) -> None: ...

    def send_status(self, code: int) -> None: ...

    def set_header(self, name: str, value: str) -> None: ...


@dataclass(frozen=True)
class RequestContext:
    """Process-wide handle shared read-only by every request.

    Attributes:
        config: Resolved gateway configuration
        logger: Logger used by the pipeline and its collaborators
    """

    config: GatewayConfig
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("ssrgate"))


@dataclass
class AppConfig:
    """Configuration of the application bundle serving the current request.

    Attributes:
        component: Entry component handed to the renderer
        name: Human readable application name
        key: Entry bundle key (indexes ``entries_config``)
        config: Per-entry settings, may hold ``http_client`` and ``redux_options``
        reducers: Reducers used to build the store
        routes: Factory producing the route table from ``(store, http_client)``
    """

    component: Any
    name: str
    key: str
    routes: Callable[[Any, Any], Any]
    reducers: Any = None
    config: dict[str, Any] = field(default_factory=dict)


@dataclass
class RouterContext:
    """Router state reported by the renderer."""

    url: str | None = None


@dataclass
class RenderOutput:
    """Result of a render: either a body or a redirect target."""

    response_string: str | None = None
    router_context: RouterContext | None = None

    @property
    def redirect_url(self) -> str | None:
        if self.router_context is None:
            return None
        return self.router_context.url or None


@dataclass
class RenderOptions:
    """Caller-supplied defaults; every field is optional."""

    env_variables: list[str] = field(default_factory=list)
    http_client: dict[str, Any] = field(default_factory=dict)
    entry_wrapper_config: dict[str, Any] = field(default_factory=dict)
    redux_middlewares: list[Any] = field(default_factory=list)
    thunk_middleware: Any = None


@dataclass
class EntriesArgs:
    """Entry bundle: entry definitions, their config, and entry plugins."""

    entries: dict[str, Any]
    entries_config: dict[str, Any] = field(default_factory=dict)
    entries_plugins: list[Any] = field(default_factory=list)


@dataclass
class BodyArgs:
    body: Any = None
    body_wrapper: Any = None


@dataclass
class AssetsArgs:
    assets: dict[str, Any] = field(default_factory=dict)
    loadjs_config: dict[str, Any] = field(default_factory=dict)


@dataclass
class RenderContext:
    """Application context handed to the renderer."""

    entry_point: Any
    app_name: str
    store: Any
    routes: Any
    http_client: Any
    current_route: Any


@dataclass
class RenderConfig:
    """Entry wrapping configuration handed to the renderer."""

    body: Any
    body_wrapper: Any
    entries_plugins: list[Any]
    body_config: dict[str, Any]
    env_variables: list[str]


@dataclass
class RenderMethodConfig:
    render_method: Callable[..., Any] | None
    cache_manager: CacheManager


@dataclass
class AppState:
    """Everything ContextBuilder assembles for one request."""

    app_config: AppConfig
    http_client: Any
    store: Any
    routes: Any

#!/usr/bin/env python3
"""Example gateway serving a tiny two-page site through ssrgate.

This example wires minimal collaborators into the render pipeline: a
dictionary route matcher, a string-template renderer, a dict-backed store
and a stub HTTP client. It also registers a post-render hook that stamps
each page and a pre-redirect hook that logs redirects.

Usage:
- Serve it: `cd docs && ssrgate serve example_gateway:build_gateway --port 8880`
- Or run this file directly to render a few paths in-process and print them
"""

import logging
from typing import Any

from rich.console import Console
from rich.panel import Panel

from ssrgate.config import GatewayConfig
from ssrgate.pipeline import (
    Collaborators,
    EntriesArgs,
    HookPoint,
    Matched,
    NotFound,
    RenderOutput,
    RouterContext,
)
from ssrgate.server import Gateway, create_app

console = Console()
logger = logging.getLogger(__name__)


class DictStore:
    """Minimal store: plain state dict plus subscribers."""

    def __init__(self, http_client: Any, reducers: Any, subscribe: Any = None) -> None:
        self.http_client = http_client
        self.reducers = reducers
        self.state: dict[str, Any] = {"status_code": None}
        self.subscribers = [subscribe] if subscribe else []

    def get_state(self) -> dict[str, Any]:
        return self.state


def create_store(http_client, reducers_fn, middlewares, subscribe, dev_mode, thunk) -> DictStore:
    return DictStore(http_client, reducers_fn(), subscribe)


def get_http_client(options: dict[str, Any], request, response) -> dict[str, Any]:
    # Stand-in for a real API client; just carries the resolved options.
    return {"base_url": options.get("base_url", "http://localhost"), **options}


def site_routes(store: DictStore, http_client: Any) -> list[dict[str, Any]]:
    return [
        {"path": "/", "name": "home", "title": "Home"},
        {"path": "/about", "name": "about", "title": "About", "headers": {"cache-control": "max-age=300"}},
        {"path": "/team", "name": "team", "redirect": "/about", "status": 302},
    ]


def match_route(ctx, request, routes: list[dict[str, Any]]):
    for route in routes:
        if route["path"] == request.path:
            return Matched(route=route, branch=[route])
    return NotFound(request.path)


async def render(ctx, request, app, render_config, assets, method_config) -> RenderOutput:
    route = app.current_route
    if "redirect" in route:
        return RenderOutput(router_context=RouterContext(url=route["redirect"]))

    body = f"<!doctype html><html><head><title>{route['title']}</title></head><body><h1>{route['title']}</h1></body></html>"
    method_config.cache_manager.set_cached_if_prod(request, body)
    return RenderOutput(response_string=body)


def stamp_page(output: RenderOutput, request) -> RenderOutput:
    if output.response_string:
        output.response_string = output.response_string.replace("</body>", "<!-- ssrgate --></body>")
    return output


def log_redirect(url: str, request) -> str:
    logger.info("Redirecting %s -> %s", request.path, url)
    return url


def build_gateway(config: GatewayConfig) -> Gateway:
    """Gateway factory; receives the resolved configuration."""
    return Gateway(
        collaborators=Collaborators(
            render=render,
            match_route=match_route,
            get_http_client=get_http_client,
            create_store=create_store,
        ),
        entries=EntriesArgs(
            entries={"/": {"component": "Site", "name": "site", "routes": site_routes, "reducers": {}}},
        ),
        hooks={
            HookPoint.POST_RENDER: [stamp_page],
            HookPoint.PRE_REDIRECT: [log_redirect],
        },
    )


def render_paths() -> None:
    """Render a few paths with the FastAPI test client and print the results."""
    from fastapi.testclient import TestClient

    config = GatewayConfig()
    client = TestClient(create_app(build_gateway(config), config))

    for path in ["/", "/about", "/team", "/missing"]:
        response = client.get(path, follow_redirects=False)
        location = response.headers.get("location")
        summary = f"-> {location}" if location else response.text[:80]
        console.print(Panel(f"[cyan]{response.status_code}[/cyan] {summary}", title=path, border_style="blue"))


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    render_paths()

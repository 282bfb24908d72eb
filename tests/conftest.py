"""Shared fixtures for ssrgate tests."""

import logging
from typing import Any
from unittest.mock import MagicMock, Mock

import pytest

from ssrgate.config import GatewayConfig, clear_config_instance
from ssrgate.pipeline import (
    AppConfig,
    AssetsArgs,
    BodyArgs,
    Collaborators,
    EntriesArgs,
    Matched,
    RenderOutput,
    RequestContext,
)
from ssrgate.server import HostRequest


class RecordingResponse:
    """Host response double that records every call in order."""

    def __init__(self) -> None:
        self.calls: list[tuple[Any, ...]] = []

    def send(self, body):
        self.calls.append(("send", body))

    def status(self, code):
        self.calls.append(("status", code))
        return self

    def redirect(self, status, url):
        self.calls.append(("redirect", status, url))

    def send_status(self, code):
        self.calls.append(("send_status", code))

    def set_header(self, name, value):
        self.calls.append(("set_header", name, value))

    @property
    def terminal_calls(self) -> list[tuple[Any, ...]]:
        return [c for c in self.calls if c[0] in ("send", "redirect", "send_status")]


def make_request(path: str = "/", hostname: str = "example.com", query: str = "") -> HostRequest:
    return HostRequest(
        method="GET",
        path=path,
        url=f"{path}?{query}" if query else path,
        hostname=hostname,
        headers={},
    )


@pytest.fixture(autouse=True)
def cleanup():
    """Clean up global config between tests."""
    yield
    clear_config_instance()


@pytest.fixture
def ctx():
    return RequestContext(config=GatewayConfig(), logger=logging.getLogger("ssrgate.test"))


@pytest.fixture
def request_obj():
    return make_request("/home")


@pytest.fixture
def response():
    return RecordingResponse()


@pytest.fixture
def store():
    return MagicMock(name="store")


@pytest.fixture
def app_config():
    return AppConfig(
        component="Main",
        name="main",
        key="/",
        routes=Mock(return_value=[{"path": "/home"}]),
        reducers={"todos": "reducer"},
    )


@pytest.fixture
def collaborators(app_config, store):
    """Collaborators that render '<html/>' with status 200 for a matched route."""
    return Collaborators(
        render=Mock(return_value=RenderOutput(response_string="<html/>")),
        match_route=Mock(return_value=Matched(route={"path": "/home"}, branch=[])),
        get_http_client=Mock(return_value="http-client"),
        create_store=Mock(return_value=store),
        get_app_config=Mock(return_value=app_config),
        set_headers=Mock(),
        get_status_code=Mock(return_value=200),
        error_handler=Mock(),
        show_help_text=Mock(),
    )


@pytest.fixture
def entries(app_config):
    return EntriesArgs(entries={"/": app_config}, entries_config={"/": {"reducers": "app/reducers"}})


@pytest.fixture
def body():
    return BodyArgs(body="Body", body_wrapper="BodyWrapper")


@pytest.fixture
def assets():
    return AssetsArgs(assets={"main.js": "/assets/main.js"}, loadjs_config={})

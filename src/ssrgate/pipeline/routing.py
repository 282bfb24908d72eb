"""Route match results and on-enter callbacks.

The matching algorithm belongs to the route matcher collaborator; this
module only defines what it returns and how matched segments are entered.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Union

from ssrgate.utils import invoke

if TYPE_CHECKING:
    from ssrgate.pipeline.context import IncomingRequest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Matched:
    """A route resolved for the request.

    Attributes:
        route: Matched route (carries header and status metadata)
        branch: Ordered chain of route segments leading to ``route``
    """

    route: Any
    branch: Sequence[Any] = field(default_factory=tuple)


@dataclass(frozen=True)
class NotFound:
    """No route (not even a catch-all) matched the request."""

    path: str = ""


RouteMatch = Union[Matched, NotFound]


def route_attr(route: Any, name: str, default: Any = None) -> Any:
    """Read route metadata from mapping-style or attribute-style routes."""
    if isinstance(route, dict):
        return route.get(name, default)
    return getattr(route, name, default)


def _on_enter(segment: Any) -> Callable[..., Any] | None:
    fn = route_attr(segment, "on_enter")
    return fn if callable(fn) else None


async def run_on_enter(branch: Sequence[Any], request: IncomingRequest) -> None:
    """Run each segment's ``on_enter`` callback in branch order.

    Callbacks are awaited one at a time; a failure stops the walk and
    propagates.
    """
    for segment in branch:
        fn = _on_enter(segment)
        if fn is None:
            continue
        logger.debug("Entering route segment %s", route_attr(segment, "path", segment))
        await invoke(fn, request)

"""Extension points and hook composition.

Formal Model:
    Transformer tᵢ: (Value, *Extra) → Value

    compose(v, [t₁, …, tₙ], *e) = tₙ(…t₂(t₁(v, *e), *e)…, *e)
    compose(v, [], *e) = v
"""

from __future__ import annotations

import importlib
import logging
from collections.abc import Callable, Iterable, Mapping
from enum import Enum
from functools import reduce
from typing import Any, TypeVar

from ssrgate.pipeline.errors import HookRegistryFrozenError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Type aliases
Transformer = Callable[..., Any]


class HookPoint(Enum):
    """Named extension points of the render pipeline."""

    PRE_RENDER_FROM_CACHE = "pre_render_from_cache"  # Cache lookup result
    POST_RENDER_REQUIREMENTS = "post_render_requirements"  # AppConfig
    POST_GET_CURRENT_ROUTE = "post_get_current_route"  # Matched route
    POST_RENDER = "post_render"  # RenderOutput
    PRE_REDIRECT = "pre_redirect"  # Redirect URL
    ERROR = "error"  # Pipeline failure (result ignored)
    PRE_INIT_SERVER = "pre_init_server"  # Host app before serving
    POST_SERVER_RUN = "post_server_run"  # Host app after startup

    @classmethod
    def parse(cls, name: str) -> HookPoint:
        """Resolve a hook point from its configuration name.

        Accepts ``post_render``, ``postRender`` and ``POST_RENDER`` spellings.

        Raises:
            ValueError: If no hook point has that name
        """
        normalized = "".join(f"_{c.lower()}" if c.isupper() else c for c in name).lstrip("_")
        normalized = normalized.replace("__", "_")
        for point in cls:
            if point.value in (normalized, name.lower()):
                return point
        raise ValueError(f"Unknown hook point: {name!r}")


def compose(value: T, hooks: Iterable[Transformer], *extra: Any) -> T:
    """Thread ``value`` through ``hooks`` in order.

    Each transformer is called as ``fn(accumulator, *extra)``. Failures
    propagate to the caller.
    """
    return reduce(lambda acc, fn: fn(acc, *extra), hooks, value)


class HookRegistry:
    """Mapping from hook point to an ordered tuple of transformers.

    Populated at startup, then frozen before the server accepts requests.
    Reads never lock; registration after ``freeze()`` raises.
    """

    def __init__(self, hooks: Mapping[HookPoint, Iterable[Transformer]] | None = None) -> None:
        self._hooks: dict[HookPoint, tuple[Transformer, ...]] = {}
        self._frozen = False
        for point, fns in (hooks or {}).items():
            for fn in fns:
                self.register(point, fn)

    def register(self, point: HookPoint, fn: Transformer) -> None:
        """Append a transformer to a hook point."""
        if self._frozen:
            raise HookRegistryFrozenError(f"Cannot register hook for {point.value}: registry is frozen")
        self._hooks[point] = (*self._hooks.get(point, ()), fn)
        logger.debug("Registered %s hook: %s", point.value, getattr(fn, "__qualname__", repr(fn)))

    def on(self, point: HookPoint) -> Callable[[Transformer], Transformer]:
        """Decorator form of ``register``.

        Example:
            @registry.on(HookPoint.POST_RENDER)
            def add_banner(output: RenderOutput, request) -> RenderOutput:
                ...
        """

        def decorator(fn: Transformer) -> Transformer:
            self.register(point, fn)
            return fn

        return decorator

    def freeze(self) -> HookRegistry:
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get(self, point: HookPoint) -> tuple[Transformer, ...]:
        """Get transformers for a hook point (empty tuple if none)."""
        return self._hooks.get(point, ())

    def __getitem__(self, point: HookPoint) -> tuple[Transformer, ...]:
        return self.get(point)

    def apply(self, point: HookPoint, value: T, *extra: Any) -> T:
        """Compose ``value`` with the transformers registered at ``point``."""
        return compose(value, self.get(point), *extra)

    def counts(self) -> dict[HookPoint, int]:
        return {point: len(self.get(point)) for point in HookPoint}


def import_object(path: str) -> Any:
    """Import ``module.attr`` or ``module:attr``.

    Raises:
        ImportError: If the module cannot be imported
        AttributeError: If the attribute does not exist
    """
    if ":" in path:
        module_path, attr = path.split(":", 1)
    else:
        module_path, attr = path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    return getattr(module, attr)


def load_hooks(hook_paths: Mapping[str, list[str]]) -> HookRegistry:
    """Build a registry from configured import paths.

    Args:
        hook_paths: Mapping of hook point name to transformer import paths

    Returns:
        Unfrozen HookRegistry; unknown points and unimportable hooks are
        logged and skipped
    """
    registry = HookRegistry()
    for point_name, paths in hook_paths.items():
        try:
            point = HookPoint.parse(point_name)
        except ValueError as e:
            logger.error("Skipping hooks: %s", e)
            continue

        for path in paths:
            try:
                fn = import_object(path)
            except (ImportError, AttributeError, ValueError) as e:
                logger.error("Failed to load hook %s: %s", path, e)
                continue
            registry.register(point, fn)
            logger.debug("Loaded %s hook: %s", point.value, path)
    return registry

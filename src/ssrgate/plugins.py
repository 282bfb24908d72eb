"""Server plugin loading and render method selection."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Any

from ssrgate.pipeline.hook import import_object

logger = logging.getLogger(__name__)


def plugin_name(plugin: Any) -> str:
    if isinstance(plugin, dict):
        return str(plugin.get("name", "<anonymous>"))
    return str(getattr(plugin, "name", type(plugin).__name__))


def _render_method(plugin: Any) -> Callable[..., Any] | None:
    if isinstance(plugin, dict):
        method = plugin.get("render_method")
    else:
        method = getattr(plugin, "render_method", None)
    return method if callable(method) else None


def get_render_method(
    plugins: Sequence[Any] | None,
    log: logging.Logger | None = None,
) -> Callable[..., Any] | None:
    """Render method override exposed by server plugins.

    Args:
        plugins: Server plugins (mappings or objects with ``render_method``)
        log: Logger for the multiple-override warning

    Returns:
        The last plugin override, or None to use the default render method
    """
    if not plugins:
        return None

    overriding = [p for p in plugins if _render_method(p) is not None]
    if not overriding:
        return None

    if len(overriding) > 1:
        (log or logger).warning(
            "Multiple server plugins override the render method (%s); using %s",
            ", ".join(plugin_name(p) for p in overriding),
            plugin_name(overriding[-1]),
        )
    return _render_method(overriding[-1])


def load_plugins(paths: Sequence[str]) -> list[Any]:
    """Import server plugins from their import paths.

    Plugins that fail to import are logged and skipped.
    """
    plugins: list[Any] = []
    for path in paths:
        try:
            plugin = import_object(path)
        except (ImportError, AttributeError, ValueError) as e:
            logger.error("Failed to load plugin %s: %s", path, e)
            continue
        plugins.append(plugin)
        logger.debug("Loaded server plugin: %s", path)
    return plugins

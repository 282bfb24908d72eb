"""Utility functions for ssrgate."""

import inspect
from typing import Any


async def invoke(fn: Any, *args: Any, **kwargs: Any) -> Any:
    """Call ``fn`` and await the result if it is awaitable.

    Collaborators (matchers, renderers, enter hooks, error responders) may be
    plain functions or coroutines; every call site goes through here.
    """
    result = fn(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result

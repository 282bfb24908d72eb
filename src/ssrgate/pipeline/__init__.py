"""Per-request render pipeline for ssrgate.

This module implements the server-side rendering lifecycle with:
- Named extension points (hooks) composed in registration order
- A cache gate that short-circuits all downstream work
- A tagged route match result (matched / not found)
- A single error boundary around every stage

Formal Model:
    Hook point p with transformers [t₁, …, tₙ]:
        apply(p, v) = tₙ(…t₁(v)…)      (identity when n = 0)
"""

from ssrgate.pipeline.cache import CacheGate, CacheManager
from ssrgate.pipeline.context import (
    AppConfig,
    AssetsArgs,
    BodyArgs,
    EntriesArgs,
    RenderOptions,
    RenderOutput,
    RequestContext,
    RouterContext,
)
from ssrgate.pipeline.hook import HookPoint, HookRegistry, compose
from ssrgate.pipeline.routing import Matched, NotFound
from ssrgate.pipeline.runner import Collaborators, LifecycleRunner

__all__ = [
    "AppConfig",
    "AssetsArgs",
    "BodyArgs",
    "CacheGate",
    "CacheManager",
    "Collaborators",
    "EntriesArgs",
    "HookPoint",
    "HookRegistry",
    "LifecycleRunner",
    "Matched",
    "NotFound",
    "RenderOptions",
    "RenderOutput",
    "RequestContext",
    "RouterContext",
    "compose",
]

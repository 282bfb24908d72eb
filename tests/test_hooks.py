"""Tests for hook points, composition and the hook registry."""

import logging

import pytest

from ssrgate.pipeline.errors import HookRegistryFrozenError
from ssrgate.pipeline.hook import HookPoint, HookRegistry, compose, import_object, load_hooks


class TestCompose:
    """Test the compose fold."""

    def test_empty_hook_list_is_identity(self):
        value = {"answer": 42}
        assert compose(value, []) is value

    def test_hooks_run_in_registration_order(self):
        result = compose("a", [lambda v: v + "b", lambda v: v + "c", lambda v: v + "d"])
        assert result == "abcd"

    def test_extra_context_passed_to_every_hook(self):
        seen = []

        def first(value, request):
            seen.append(("first", request))
            return value + 1

        def second(value, request):
            seen.append(("second", request))
            return value * 10

        assert compose(1, [first, second], "req") == 20
        assert seen == [("first", "req"), ("second", "req")]

    def test_failing_hook_propagates(self):
        def boom(value):
            raise RuntimeError("hook failed")

        with pytest.raises(RuntimeError, match="hook failed"):
            compose(1, [lambda v: v, boom, lambda v: v])


class TestHookRegistry:
    """Test the HookRegistry mapping."""

    def test_unregistered_point_returns_empty_tuple(self):
        registry = HookRegistry()
        assert registry.get(HookPoint.POST_RENDER) == ()
        assert registry.apply(HookPoint.POST_RENDER, "value", "req") == "value"

    def test_points_are_independent(self):
        registry = HookRegistry(
            {
                HookPoint.POST_RENDER: [lambda v, r: v + "-render"],
                HookPoint.ERROR: [lambda v, r: v + "-error"],
            }
        )
        assert registry.apply(HookPoint.POST_RENDER, "x", None) == "x-render"
        assert registry.apply(HookPoint.ERROR, "x", None) == "x-error"
        assert registry.apply(HookPoint.POST_GET_CURRENT_ROUTE, "x", None) == "x"

    def test_on_decorator_registers_and_returns_function(self):
        registry = HookRegistry()

        @registry.on(HookPoint.POST_GET_CURRENT_ROUTE)
        def add_header(route, request):
            return {**route, "headers": {"x-test": "1"}}

        assert registry[HookPoint.POST_GET_CURRENT_ROUTE] == (add_header,)
        assert add_header({"path": "/"}, None)["headers"] == {"x-test": "1"}

    def test_freeze_rejects_registration(self):
        registry = HookRegistry().freeze()
        assert registry.frozen

        with pytest.raises(HookRegistryFrozenError):
            registry.register(HookPoint.POST_RENDER, lambda v, r: v)

    def test_counts(self):
        registry = HookRegistry({HookPoint.ERROR: [print, print]})
        counts = registry.counts()
        assert counts[HookPoint.ERROR] == 2
        assert counts[HookPoint.POST_RENDER] == 0


class TestHookPointParse:
    @pytest.mark.parametrize(
        "name",
        ["post_render", "postRender", "POST_RENDER"],
    )
    def test_spellings(self, name):
        assert HookPoint.parse(name) is HookPoint.POST_RENDER

    def test_camel_case_multi_word(self):
        assert HookPoint.parse("preRenderFromCache") is HookPoint.PRE_RENDER_FROM_CACHE

    def test_unknown(self):
        with pytest.raises(ValueError, match="Unknown hook point"):
            HookPoint.parse("post_everything")


class TestLoadHooks:
    def test_import_object_supports_colon_and_dot(self):
        import os.path

        assert import_object("os.path:basename") is os.path.basename
        assert import_object("os.path.basename") is os.path.basename

    def test_load_hooks_from_paths(self):
        registry = load_hooks({"post_render": ["os.path.basename", "os.path.dirname"]})
        import os.path

        assert registry.get(HookPoint.POST_RENDER) == (os.path.basename, os.path.dirname)
        assert not registry.frozen

    def test_unimportable_hook_skipped(self, caplog):
        with caplog.at_level(logging.ERROR):
            registry = load_hooks({"error": ["nonexistent_module_xyz.hook", "os.path.basename"]})

        assert len(registry.get(HookPoint.ERROR)) == 1
        assert "Failed to load hook nonexistent_module_xyz.hook" in caplog.text

    def test_unknown_point_skipped(self, caplog):
        with caplog.at_level(logging.ERROR):
            registry = load_hooks({"bogus": ["os.path.basename"]})

        assert all(count == 0 for count in registry.counts().values())
        assert "Unknown hook point" in caplog.text

"""Tests for configuration loading."""

import json
import os.path
from pathlib import Path

import pytest
import yaml

from ssrgate.config import (
    GatewayConfig,
    clear_config_instance,
    get_config,
    set_config_instance,
)
from ssrgate.pipeline.hook import HookPoint


def _write_config(path: Path, data: dict) -> Path:
    yaml_path = path / "ssrgate.yaml"
    yaml_path.write_text(yaml.dump(data))
    return yaml_path


class TestGatewayConfig:
    def test_defaults(self):
        config = GatewayConfig()
        assert config.debug is False
        assert config.production is False
        assert config.server.port == 8880
        assert config.hooks == {}
        assert config.plugins == []
        assert config.caching is None

    def test_from_yaml(self, tmp_path):
        yaml_path = _write_config(
            tmp_path,
            {
                "ssrgate": {
                    "production": True,
                    "app": "myapp.gateway:build",
                    "server": {"host": "0.0.0.0", "port": 9000},
                    "render": {"env_variables": ["API_URL"], "http_client": {"timeout": 5}},
                    "caching": {"components": {"Header": {}}},
                    "hooks": {"post_render": ["os.path.basename"]},
                    "plugins": ["json.dumps"],
                }
            },
        )

        config = GatewayConfig.from_yaml(yaml_path)

        assert config.production is True
        assert config.app == "myapp.gateway:build"
        assert config.server.host == "0.0.0.0"
        assert config.server.port == 9000
        assert config.render.env_variables == ["API_URL"]
        assert config.render.http_client == {"timeout": 5}
        assert config.caching == {"components": {"Header": {}}}
        assert config.plugins == ["json.dumps"]
        assert config.config_path == yaml_path

    def test_from_yaml_missing_file_uses_defaults(self, tmp_path):
        config = GatewayConfig.from_yaml(tmp_path / "ssrgate.yaml")
        assert config.production is False

    def test_from_yaml_empty_section(self, tmp_path):
        config = GatewayConfig.from_yaml(_write_config(tmp_path, {"other": {"x": 1}}))
        assert config.debug is False

    def test_environment_variables(self, monkeypatch):
        monkeypatch.setenv("SSRGATE_PRODUCTION", "true")
        monkeypatch.setenv("SSRGATE_SERVER__PORT", "9100")

        config = GatewayConfig()

        assert config.production is True
        assert config.server.port == 9100

    def test_yaml_wins_over_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv("SSRGATE_DEBUG", "true")
        config = GatewayConfig.from_yaml(_write_config(tmp_path, {"ssrgate": {"debug": False}}))
        assert config.debug is False

    def test_load_hooks(self):
        config = GatewayConfig(hooks={"postRender": ["os.path.basename"], "error": ["os.path.dirname"]})

        registry = config.load_hooks()

        assert registry.get(HookPoint.POST_RENDER) == (os.path.basename,)
        assert registry.get(HookPoint.ERROR) == (os.path.dirname,)

    def test_render_options_imports_middlewares(self):
        config = GatewayConfig(
            render={
                "http_client": {"base_url": "http://api"},
                "redux_middlewares": ["json.dumps"],
                "thunk_middleware": "json.loads",
            }
        )

        options = config.render_options()

        assert options.http_client == {"base_url": "http://api"}
        assert options.redux_middlewares == [json.dumps]
        assert options.thunk_middleware is json.loads
        assert options.env_variables == []

    def test_render_options_unimportable_middleware_raises(self):
        config = GatewayConfig(render={"redux_middlewares": ["missing_pkg_xyz.middleware"]})
        with pytest.raises(ImportError):
            config.render_options()


class TestGetConfig:
    def test_config_dir_from_environment(self, tmp_path, monkeypatch):
        _write_config(tmp_path, {"ssrgate": {"production": True}})
        monkeypatch.setenv("SSRGATE_CONFIG_DIR", str(tmp_path))
        clear_config_instance()

        config = get_config()

        assert config.production is True
        assert config.config_path == tmp_path / "ssrgate.yaml"

    def test_falls_back_to_home(self, tmp_path, monkeypatch):
        monkeypatch.delenv("SSRGATE_CONFIG_DIR", raising=False)
        monkeypatch.setattr(Path, "home", lambda: tmp_path)
        (tmp_path / ".ssrgate").mkdir()
        _write_config(tmp_path / ".ssrgate", {"ssrgate": {"debug": True}})
        clear_config_instance()

        assert get_config().debug is True

    def test_defaults_when_nothing_found(self, tmp_path, monkeypatch):
        monkeypatch.delenv("SSRGATE_CONFIG_DIR", raising=False)
        monkeypatch.setattr(Path, "home", lambda: tmp_path)
        clear_config_instance()

        config = get_config()

        assert config.config_path is None
        assert get_config() is config

    def test_set_config_instance(self):
        config = GatewayConfig(debug=True)
        set_config_instance(config)
        assert get_config() is config

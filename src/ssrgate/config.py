"""Configuration management for ssrgate.

Configuration Discovery Precedence (Highest to Lowest Priority):
===============================================================

1. **SSRGATE_CONFIG_DIR Environment Variable** (Highest Priority)
   - Looks for: `${SSRGATE_CONFIG_DIR}/ssrgate.yaml`
   - Use case: Deployments, testing, custom layouts

2. **~/.ssrgate Directory** (Fallback)
   - Looks for: `~/.ssrgate/ssrgate.yaml`
   - Use case: Local development

If no `ssrgate.yaml` is found, default configuration is applied.

Within a single load, values from the YAML `ssrgate:` section win over
`SSRGATE_*` environment variables, which win over field defaults.

Example ssrgate.yaml:
--------------------
ssrgate:
  production: true
  app: myapp.gateway:build_gateway
  server:
    port: 8880
  render:
    env_variables: [API_URL]
    http_client:
      timeout: 5
  caching:
    components: {Header: {strategy: template}}
  hooks:
    post_render:
      - myapp.hooks.add_banner
  plugins:
    - myapp.plugins.streaming
"""

import logging
import os
import threading
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ssrgate.pipeline.context import RenderOptions
from ssrgate.pipeline.hook import HookRegistry, import_object, load_hooks

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "ssrgate.yaml"


class ServerConfig(BaseModel):
    """Host server binding."""

    host: str = "127.0.0.1"
    """Interface to bind"""

    port: int = 8880
    """Port to listen on"""

    log_level: str = "info"
    """uvicorn log level"""


class RenderDefaults(BaseModel):
    """Default render options, overridable per entry."""

    env_variables: list[str] = Field(default_factory=list)
    """Environment variable names exposed to the rendered page"""

    http_client: dict[str, Any] = Field(default_factory=dict)
    """Data client options used when the entry sets none"""

    entry_wrapper_config: dict[str, Any] = Field(default_factory=dict)
    """Configuration for the entry body wrapper"""

    redux_middlewares: list[str] = Field(default_factory=list)
    """Import paths of store middlewares"""

    thunk_middleware: str | None = None
    """Import path of the async-action middleware"""


class GatewayConfig(BaseSettings):
    """Main configuration for ssrgate, read from ssrgate.yaml and SSRGATE_* env vars."""

    model_config = SettingsConfigDict(
        env_prefix="SSRGATE_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # Core settings
    debug: bool = False
    production: bool = False

    # Gateway factory import path (e.g., "myapp.gateway:build_gateway")
    app: str | None = None

    server: ServerConfig = Field(default_factory=ServerConfig)
    render: RenderDefaults = Field(default_factory=RenderDefaults)

    # Component caching configuration forwarded to the cache gate
    caching: dict[str, Any] | None = None

    # Hook point name -> transformer import paths, in execution order
    hooks: dict[str, list[str]] = Field(default_factory=dict)

    # Server plugin import paths
    plugins: list[str] = Field(default_factory=list)

    config_path: Path | None = None

    def load_hooks(self) -> HookRegistry:
        """Build an (unfrozen) hook registry from the configured import paths."""
        return load_hooks(self.hooks)

    def render_options(self) -> RenderOptions:
        """Resolve render defaults, importing configured middlewares.

        Raises:
            ImportError: If a middleware cannot be imported
        """
        return RenderOptions(
            env_variables=list(self.render.env_variables),
            http_client=dict(self.render.http_client),
            entry_wrapper_config=dict(self.render.entry_wrapper_config),
            redux_middlewares=[import_object(path) for path in self.render.redux_middlewares],
            thunk_middleware=import_object(self.render.thunk_middleware) if self.render.thunk_middleware else None,
        )

    @classmethod
    def from_yaml(cls, yaml_path: Path, **kwargs: Any) -> "GatewayConfig":
        """Load configuration from an ssrgate.yaml file.

        Args:
            yaml_path: Path to the ssrgate.yaml file
            **kwargs: Overrides applied on top of the file

        Returns:
            GatewayConfig instance
        """
        data: dict[str, Any] = {}
        if yaml_path.exists():
            with yaml_path.open() as f:
                raw = yaml.safe_load(f) or {}
            data = raw.get("ssrgate", {}) or {}
            if not isinstance(data, dict):
                logger.warning(f"Invalid ssrgate section in {yaml_path}: {type(data)}")
                data = {}

        return cls(**{**data, **kwargs, "config_path": yaml_path})


# Global configuration instance
_config_instance: GatewayConfig | None = None
_config_lock = threading.Lock()


def default_config_dir() -> Path:
    """Config directory from SSRGATE_CONFIG_DIR, falling back to ~/.ssrgate."""
    env_config_dir = os.environ.get("SSRGATE_CONFIG_DIR")
    if env_config_dir:
        config_dir = Path(env_config_dir)
        logger.info(f"Using config directory from environment: {config_dir}")
        return config_dir
    return Path.home() / ".ssrgate"


def get_config() -> GatewayConfig:
    """Get the configuration instance."""
    global _config_instance

    if _config_instance is None:
        with _config_lock:
            # Double-check locking pattern
            if _config_instance is None:
                yaml_path = default_config_dir() / CONFIG_FILENAME
                if yaml_path.exists():
                    logger.info(f"Loading ssrgate config from: {yaml_path}")
                    _config_instance = GatewayConfig.from_yaml(yaml_path)
                else:
                    logger.info(f"{CONFIG_FILENAME} not found at {yaml_path}, using default config")
                    _config_instance = GatewayConfig()

    return _config_instance


def set_config_instance(config: GatewayConfig) -> None:
    """Set the global configuration instance (for testing)."""
    global _config_instance
    _config_instance = config


def clear_config_instance() -> None:
    """Clear the global configuration instance (for testing)."""
    global _config_instance
    _config_instance = None

"""ssrgate CLI for serving and inspecting the render gateway - Tyro implementation."""

import json
import logging
import sys
from pathlib import Path
from typing import Annotated

import attrs
import tyro
from rich import print
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ssrgate.config import CONFIG_FILENAME, GatewayConfig, default_config_dir
from ssrgate.pipeline.hook import HookPoint


# Subcommand definitions using attrs
@attrs.define
class Serve:
    """Serve the gateway application with uvicorn."""

    app: Annotated[str | None, tyro.conf.Positional] = None
    """Gateway import path (module:attr); defaults to `app` in ssrgate.yaml."""

    host: str | None = None
    """Interface to bind (overrides server.host)."""

    port: Annotated[int | None, tyro.conf.arg(aliases=["-p"])] = None
    """Port to listen on (overrides server.port)."""

    production: bool = False
    """Enable production mode (response cache lookups)."""


@attrs.define
class Hooks:
    """Show configured hooks per extension point."""

    json: bool = False
    """Output hook configuration as JSON."""


@attrs.define
class Config:
    """Show the resolved configuration."""


Command = (
    Annotated[Serve, tyro.conf.subcommand(name="serve")]
    | Annotated[Hooks, tyro.conf.subcommand(name="hooks")]
    | Annotated[Config, tyro.conf.subcommand(name="config")]
)


def setup_logging() -> None:
    """Configure logging with 100-character text width."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)-20s - %(levelname)-8s - %(message).100s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def load_config(config_dir: Path) -> GatewayConfig:
    """Load ssrgate.yaml from the config directory (defaults if absent)."""
    return GatewayConfig.from_yaml(config_dir / CONFIG_FILENAME)


def serve(config: GatewayConfig, cmd: Serve) -> None:
    """Import the gateway and run it under uvicorn.

    Args:
        config: Resolved configuration
        cmd: Serve options overriding the configuration
    """
    app_path = cmd.app or config.app
    if not app_path:
        print("Error: No gateway application configured", file=sys.stderr)
        print("Pass one as `ssrgate serve module:attr` or set `app` in ssrgate.yaml", file=sys.stderr)
        sys.exit(1)

    server = config.server.model_copy(
        update={k: v for k, v in {"host": cmd.host, "port": cmd.port}.items() if v is not None}
    )
    config = config.model_copy(update={"server": server, "production": config.production or cmd.production})

    import uvicorn

    from ssrgate.server import create_app, load_gateway

    try:
        gateway = load_gateway(app_path, config)
    except (ImportError, AttributeError, TypeError) as e:
        print(f"Error: Failed to load gateway {app_path}: {e}", file=sys.stderr)
        sys.exit(1)

    app = create_app(gateway, config)
    uvicorn.run(app, host=server.host, port=server.port, log_level=server.log_level)


def show_hooks(config: GatewayConfig, json_output: bool = False) -> None:
    """Print configured hook import paths for every extension point."""
    configured = {HookPoint.parse(name): paths for name, paths in config.hooks.items()}

    if json_output:
        builtin = {point.value: configured.get(point, []) for point in HookPoint}
        sys.stdout.write(json.dumps(builtin, indent=2) + "\n")
        return

    table = Table(show_header=True, show_lines=True)
    table.add_column("Hook point", style="cyan")
    table.add_column("Transformers (in order)")
    for point in HookPoint:
        paths = configured.get(point, [])
        table.add_row(point.value, "\n".join(paths) if paths else "[dim]identity[/dim]")

    Console().print(Panel(table, title="[bold]ssrgate Hooks[/bold]", border_style="blue"))


def show_config(config: GatewayConfig) -> None:
    """Print the resolved configuration as JSON."""
    sys.stdout.write(config.model_dump_json(indent=2) + "\n")


def main(
    cmd: Annotated[Command, tyro.conf.arg(name="")],
    *,
    config_dir: Annotated[Path | None, tyro.conf.arg(help="Configuration directory (default: $SSRGATE_CONFIG_DIR or ~/.ssrgate)")] = None,
) -> None:
    """ssrgate - Server-side rendering gateway.

    Serves pages through a hookable render pipeline with a response cache,
    route matching and a single error boundary.
    """
    if config_dir is None:
        config_dir = default_config_dir()

    setup_logging()
    config = load_config(config_dir)

    if isinstance(cmd, Serve):
        serve(config, cmd)

    elif isinstance(cmd, Hooks):
        try:
            show_hooks(config, json_output=cmd.json)
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)

    elif isinstance(cmd, Config):
        show_config(config)


def entry_point() -> None:
    """Entry point for the ssrgate command."""
    tyro.cli(main)


if __name__ == "__main__":
    entry_point()

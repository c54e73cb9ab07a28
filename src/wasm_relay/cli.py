"""CLI entry point for wasm-relay.

Reads configuration from the environment once, lets a few options override
it, and serves the relay under uvicorn.
"""

from __future__ import annotations

import click
import rich_click as rclick
from rich.console import Console

from wasm_relay import __version__
from wasm_relay.config import RelayConfig
from wasm_relay.errors import ConfigurationError

rclick.rich_click.TEXT_MARKUP = "markdown"

EXIT_CONFIG_ERROR = 1

err_console = Console(stderr=True)


@click.command(cls=rclick.RichCommand)
@click.version_option(version=__version__, prog_name="wasm-relay")
@click.option("--host", default=None, help="Interface to bind. Overrides `HOST`.")
@click.option("--port", type=int, default=None, help="Port to listen on. Overrides `PORT`.")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default=None,
    help="Minimum log level. Overrides `LOG_LEVEL`.",
)
def main(host: str | None, port: int | None, log_level: str | None) -> None:
    """Run the wasm-relay HTTP service.

    **Environment:**

    - `COMPILER_URL` - compiler backend base URL (required)
    - `PORT` - listener port (default 3000)
    - `COMPILER_TIMEOUT` - backend call timeout in seconds (default 30)
    - `LOG_LEVEL`, `LOG_JSON` - logging settings
    """
    try:
        config = RelayConfig.from_env(host=host, port=port, log_level=log_level)
    except ConfigurationError as exc:
        err_console.print(f"[red]✗[/red] {exc}")
        raise SystemExit(EXIT_CONFIG_ERROR) from exc

    serve(config)


def serve(config: RelayConfig) -> None:
    """Serve the relay application until interrupted.

    Args:
        config: Validated relay configuration.
    """
    import uvicorn

    from wasm_relay.app import create_app
    from wasm_relay.observability import configure_logging, get_logger

    configure_logging(log_level=config.log_level, json_format=config.log_json)
    get_logger().info("server_starting", host=config.host, port=config.port)

    uvicorn.run(
        create_app(config),
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
        access_log=False,
    )


if __name__ == "__main__":
    main()

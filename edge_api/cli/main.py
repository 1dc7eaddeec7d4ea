"""CLI commands for the edge gateway."""

import json
import sys

import click
import structlog
import uvicorn
from pydantic import ValidationError

from edge_api import __version__
from edge_api.api.app import create_app
from edge_api.observability.logging import configure_logging
from edge_api.settings.app import AppSettings, get_settings


logger = structlog.get_logger()

APP_FACTORY = "edge_api.api.app:create_app"


def _load_settings() -> AppSettings:
    """Load settings or exit with the validation errors."""
    try:
        return get_settings()
    except ValidationError as e:
        click.echo("Configuration validation failed:", err=True)
        for error in e.errors():
            location = ".".join(str(part) for part in error["loc"])
            click.echo(f"  - {location}: {error['msg']}", err=True)
        sys.exit(1)


@click.group()
@click.version_option(version=__version__)
def cli() -> None:
    """Edge API gateway CLI."""


@cli.command()
@click.option("--host", default="127.0.0.1", show_default=True, help="Bind address.")
@click.option("--port", default=8787, show_default=True, type=int, help="Bind port.")
@click.option(
    "--reload",
    is_flag=True,
    help="Reload on code changes (development only).",
)
@click.option(
    "--json-logs/--no-json-logs",
    default=None,
    help="Override EDGE_API_LOG_JSON.",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable debug logging.",
)
def serve(
    host: str,
    port: int,
    reload: bool,
    json_logs: bool | None,
    verbose: bool,
) -> None:
    """Serve the gateway under uvicorn."""
    settings = _load_settings()
    configure_logging(
        level="DEBUG" if verbose else settings.log_level,
        json_format=settings.log_json if json_logs is None else json_logs,
    )
    logger.info("serve_starting", host=host, port=port, reload=reload)

    if reload:
        uvicorn.run(APP_FACTORY, factory=True, host=host, port=port, reload=True)
        return
    uvicorn.run(create_app(settings), host=host, port=port, log_config=None)


@cli.command("show-config")
@click.option("--json", "as_json", is_flag=True, help="Print as JSON.")
def show_config(as_json: bool) -> None:
    """Print the effective configuration with secrets redacted."""
    data = _load_settings().redacted()
    if as_json:
        click.echo(json.dumps(data, indent=2))
        return

    click.echo("Effective configuration")
    click.echo("=" * 40)
    for key, value in data.items():
        click.echo(f"  {key}: {value}")


if __name__ == "__main__":
    cli()

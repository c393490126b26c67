"""CLI entry point for claude-session-viewer."""

import logging

import click
import uvicorn

from .backends import get_provider
from .config import get_host, get_port
from .server import create_app

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    help="Logging verbosity.",
)
def main(log_level: str):
    """Browse Claude Code session logs."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.option("--port", default=None, type=int, help="Port to serve on.")
@click.option("--host", default=None, help="Host to bind to.")
@click.option(
    "--projects-path",
    type=click.Path(file_okay=False),
    default=None,
    help="Claude Code projects directory (default: ~/.claude/projects).",
)
def serve(port: int | None, host: str | None, projects_path: str | None):
    """Start the web API."""
    host = host or get_host()
    port = port or get_port()
    app = create_app(projects_path)
    click.echo(f"Starting claude-session-viewer on http://{host}:{port}")
    uvicorn.run(app, host=host, port=port, reload=False)


@main.command()
@click.option(
    "--projects-path",
    type=click.Path(file_okay=False),
    default=None,
    help="Claude Code projects directory (default: ~/.claude/projects).",
)
def projects(projects_path: str | None):
    """List projects that have sessions, most recent first."""
    provider = get_provider(projects_path)
    found = provider.list_projects()
    if not found:
        click.echo(f"No sessions found under {provider.get_base_path()}")
        return
    for project in found:
        click.echo(f"{project.name}\t{project.session_count}\t{project.path}")

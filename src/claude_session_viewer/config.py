"""Environment-derived defaults for the viewer."""

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 3456


def get_projects_path() -> Path:
    """Return the path to Claude Code's projects directory."""
    env = os.environ.get("CLAUDE_VIEWER_PROJECTS_PATH")
    if env:
        return Path(env).expanduser()

    return Path.home() / ".claude" / "projects"


def get_host() -> str:
    return os.environ.get("CLAUDE_VIEWER_HOST") or DEFAULT_HOST


def get_port() -> int:
    """Return the port to serve on, falling back to the default on bad values."""
    env = os.environ.get("CLAUDE_VIEWER_PORT")
    if env:
        try:
            return int(env)
        except ValueError:
            logger.warning("Ignoring non-integer CLAUDE_VIEWER_PORT=%r", env)
    return DEFAULT_PORT

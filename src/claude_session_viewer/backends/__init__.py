"""Provider registry."""

from pathlib import Path

from ..provider import SessionProvider
from .claude_code import ClaudeCodeProvider


def get_provider(projects_path: Path | str | None = None) -> SessionProvider:
    """Return the provider for a projects root (the configured default if None)."""
    return ClaudeCodeProvider(projects_path)

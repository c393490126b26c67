"""Browse and reconstruct locally stored Claude Code session logs."""

__version__ = "0.1.0"

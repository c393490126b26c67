"""Cheap session summaries read from the head of a session file."""

from pathlib import Path

from .core import SessionMetadata
from .records import Record, RecordStream

# Only this many lines are inspected, however large the file is.
METADATA_SCAN_LINES = 20
PREVIEW_LENGTH = 300


def extract_metadata(path: Path | str) -> SessionMetadata:
    """Return summary fields for a session without reading the whole file.

    The first "user" record carrying a sessionId supplies every field; the
    file is closed as soon as it is found. If none appears within the first
    ``METADATA_SCAN_LINES`` lines, all fields are None.

    Raises ``SessionNotFound`` or ``StorageError`` if the file can't be opened.
    """
    with RecordStream(path, max_lines=METADATA_SCAN_LINES) as stream:
        for record in stream:
            if record.type == "user" and record.session_id:
                return metadata_from_record(record)

    return SessionMetadata()


def metadata_from_record(record: Record) -> SessionMetadata:
    return SessionMetadata(
        session_id=record.session_id,
        slug=record.slug,
        timestamp=record.timestamp,
        git_branch=record.git_branch,
        version=record.version,
        first_message=first_message_preview(record.content),
    )


def first_message_preview(content) -> str | None:
    """Preview text of a message: the string itself or its first text block."""
    if isinstance(content, str):
        return content[:PREVIEW_LENGTH]

    if isinstance(content, list):
        for block in content:
            if isinstance(block, dict) and block.get("type") == "text":
                text = block.get("text")
                if isinstance(text, str):
                    return text[:PREVIEW_LENGTH]
                return None

    return None

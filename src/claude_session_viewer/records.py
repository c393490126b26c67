"""Line-oriented reading of Claude Code session files.

Each line of a ``.jsonl`` session file is one JSON object. Known record types:
- "user": user prompts and tool results. Content is a string or a block array.
- "assistant": model output. The same uuid is re-emitted while a response
  streams in, each time with more content blocks.
- "file-history-snapshot": editor bookkeeping, not conversation content.
- anything else ("summary", "progress", "system", ...): metadata only.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from .errors import SessionNotFound, StorageError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Record:
    """One parsed line of a session file."""

    type: Optional[str]
    session_id: Optional[str] = None
    uuid: Optional[str] = None
    parent_uuid: Optional[str] = None
    timestamp: Optional[str] = None
    slug: Optional[str] = None
    git_branch: Optional[str] = None
    version: Optional[str] = None
    cwd: Optional[str] = None
    is_sidechain: Optional[bool] = None
    message: Optional[dict] = None
    tool_use_result: Any = None
    thinking_metadata: Optional[dict] = None
    todos: Optional[list] = None

    @classmethod
    def from_dict(cls, data: dict) -> "Record":
        message = data.get("message")
        return cls(
            type=data.get("type"),
            session_id=data.get("sessionId"),
            uuid=data.get("uuid"),
            parent_uuid=data.get("parentUuid"),
            timestamp=data.get("timestamp"),
            slug=data.get("slug"),
            git_branch=data.get("gitBranch"),
            version=data.get("version"),
            cwd=data.get("cwd"),
            is_sidechain=data.get("isSidechain"),
            message=message if isinstance(message, dict) else None,
            tool_use_result=data.get("toolUseResult"),
            thinking_metadata=data.get("thinkingMetadata"),
            todos=data.get("todos"),
        )

    @property
    def content(self) -> Any:
        """Raw ``message.content`` (string, block list, or None)."""
        if self.message is None:
            return None
        return self.message.get("content")

    @property
    def agent_id(self) -> Optional[str]:
        """Sub-agent id referenced by this record's tool result, if any."""
        if isinstance(self.tool_use_result, dict):
            agent_id = self.tool_use_result.get("agentId")
            if isinstance(agent_id, str) and agent_id:
                return agent_id
        return None


class RecordStream:
    """Iterate the records of one session file, in file order.

    The file is opened eagerly so a missing or unreadable file raises
    ``SessionNotFound`` / ``StorageError`` before any record is produced.
    After that, nothing is raised: blank lines, malformed JSON and non-object
    values are skipped, and a read failure simply ends the stream.

    The stream is single-pass. It closes itself when exhausted or when
    ``max_lines`` raw lines have been consumed; callers that stop early should
    use it as a context manager (or call ``close()``) to release the file.

    ``contains`` skips lines that don't include the given text before any
    JSON decoding, for cheap needle-in-haystack scans.
    """

    def __init__(
        self,
        path: Path | str,
        max_lines: int | None = None,
        contains: str | None = None,
    ):
        self.path = Path(path)
        self.max_lines = max_lines
        self.contains = contains
        self.line_number = 0
        try:
            self._file = self.path.open(encoding="utf-8", errors="replace")
        except FileNotFoundError as e:
            raise SessionNotFound(f"Session file not found: {self.path}") from e
        except IsADirectoryError as e:
            raise SessionNotFound(f"Not a session file: {self.path}") from e
        except OSError as e:
            raise StorageError(f"Cannot open {self.path}: {e}") from e

    def __iter__(self) -> "RecordStream":
        return self

    def __next__(self) -> Record:
        while not self.closed:
            if self.max_lines is not None and self.line_number >= self.max_lines:
                break

            try:
                line = self._file.readline()
            except OSError as e:
                logger.warning("Read failed at %s:%d: %s", self.path, self.line_number + 1, e)
                break

            if not line:
                break
            self.line_number += 1

            if self.contains is not None and self.contains not in line:
                continue

            record = _parse_line(line, self.path, self.line_number)
            if record is not None:
                return record

        self.close()
        raise StopIteration

    @property
    def closed(self) -> bool:
        return self._file.closed

    def close(self) -> None:
        self._file.close()

    def __enter__(self) -> "RecordStream":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def read_records(path: Path | str) -> list[Record]:
    """Read every record of a session file."""
    with RecordStream(path) as stream:
        return list(stream)


def _parse_line(line: str, path: Path, line_num: int) -> Record | None:
    line = line.strip()
    if not line:
        return None

    try:
        data = json.loads(line)
    except json.JSONDecodeError as e:
        logger.debug("Bad JSON at %s:%d: %s", path, line_num, e)
        return None

    if not isinstance(data, dict):
        logger.debug("Skipping non-object record at %s:%d", path, line_num)
        return None

    return Record.from_dict(data)

"""Core data models for claude-session-viewer.

Everything here is a read-only view derived from the JSONL files on disk.
``to_dict`` methods produce the JSON-serializable shapes served by the API.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional, Union


# ── Content blocks ───────────────────────────────────────────────


@dataclass(frozen=True)
class TextBlock:
    text: str
    type: str = field(default="text", init=False)

    def to_dict(self) -> dict:
        return {"type": "text", "text": self.text}


@dataclass(frozen=True)
class ThinkingBlock:
    thinking: str
    signature: Optional[str] = None
    type: str = field(default="thinking", init=False)

    def to_dict(self) -> dict:
        data = {"type": "thinking", "thinking": self.thinking}
        if self.signature is not None:
            data["signature"] = self.signature
        return data


@dataclass(frozen=True)
class ToolUseBlock:
    name: str
    input: dict
    id: Optional[str] = None
    type: str = field(default="tool_use", init=False)

    def to_dict(self) -> dict:
        return {"type": "tool_use", "id": self.id, "name": self.name, "input": self.input}


@dataclass(frozen=True)
class ToolResultBlock:
    """Result of a tool call; ``content`` is a string or a list of sub-blocks."""

    content: Union[str, list]
    tool_use_id: Optional[str] = None
    is_error: bool = False
    type: str = field(default="tool_result", init=False)

    def to_dict(self) -> dict:
        if isinstance(self.content, list):
            content = [block.to_dict() for block in self.content]
        else:
            content = self.content
        return {
            "type": "tool_result",
            "tool_use_id": self.tool_use_id,
            "content": content,
            "is_error": self.is_error,
        }


@dataclass(frozen=True)
class UnknownBlock:
    """Any block we don't model; the raw value is passed through untouched."""

    raw: Any

    @property
    def type(self) -> Optional[str]:
        if isinstance(self.raw, dict):
            return self.raw.get("type")
        return None

    def to_dict(self) -> Any:
        return self.raw


ContentBlock = Union[TextBlock, ThinkingBlock, ToolUseBlock, ToolResultBlock, UnknownBlock]


def parse_block(raw: Any) -> ContentBlock:
    """Convert one raw content block into its typed variant.

    Blocks whose tag is unknown, or whose payload doesn't have the expected
    shape, become ``UnknownBlock`` so they can still be rendered as-is.
    """
    if not isinstance(raw, dict):
        return UnknownBlock(raw)

    block_type = raw.get("type")

    if block_type == "text" and isinstance(raw.get("text"), str):
        return TextBlock(text=raw["text"])

    if block_type == "thinking" and isinstance(raw.get("thinking"), str):
        return ThinkingBlock(thinking=raw["thinking"], signature=raw.get("signature"))

    if block_type == "tool_use" and isinstance(raw.get("name"), str):
        tool_input = raw.get("input", {})
        if not isinstance(tool_input, dict):
            return UnknownBlock(raw)
        return ToolUseBlock(name=raw["name"], input=tool_input, id=raw.get("id"))

    if block_type == "tool_result":
        content = raw.get("content")
        if content is None:
            content = ""
        elif isinstance(content, list):
            content = [parse_block(sub) for sub in content]
        elif not isinstance(content, str):
            return UnknownBlock(raw)
        return ToolResultBlock(
            content=content,
            tool_use_id=raw.get("tool_use_id"),
            is_error=bool(raw.get("is_error", False)),
        )

    return UnknownBlock(raw)


def parse_content(content: Any) -> list[ContentBlock]:
    """Normalize a message's raw content into a list of blocks.

    A string becomes a single text block, a list is parsed block by block,
    and anything else yields an empty list.
    """
    if isinstance(content, str):
        return [TextBlock(text=content)]
    if isinstance(content, list):
        return [parse_block(block) for block in content]
    return []


# ── Conversation ─────────────────────────────────────────────────


@dataclass
class Message:
    """A single user or assistant turn of a reconstructed conversation."""

    type: str  # "user" | "assistant"
    content: list[ContentBlock] = field(default_factory=list)
    uuid: Optional[str] = None
    parent_uuid: Optional[str] = None
    timestamp: Optional[str] = None
    role: Optional[str] = None
    model: Optional[str] = None
    usage: Optional[dict] = None
    stop_reason: Optional[str] = None
    tool_use_result: Any = None
    thinking_metadata: Optional[dict] = None
    todos: Optional[list] = None
    is_sidechain: Optional[bool] = None

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "uuid": self.uuid,
            "parent_uuid": self.parent_uuid,
            "timestamp": self.timestamp,
            "role": self.role,
            "model": self.model,
            "content": [block.to_dict() for block in self.content],
            "usage": self.usage,
            "stop_reason": self.stop_reason,
            "tool_use_result": self.tool_use_result,
            "thinking_metadata": self.thinking_metadata,
            "todos": self.todos,
            "is_sidechain": self.is_sidechain,
        }


@dataclass
class Stats:
    user_messages: int = 0
    assistant_messages: int = 0
    tool_calls: int = 0
    thinking_blocks: int = 0
    total_input_tokens: int = 0
    total_output_tokens: int = 0

    def to_dict(self) -> dict:
        return {
            "user_messages": self.user_messages,
            "assistant_messages": self.assistant_messages,
            "tool_calls": self.tool_calls,
            "thinking_blocks": self.thinking_blocks,
            "total_input_tokens": self.total_input_tokens,
            "total_output_tokens": self.total_output_tokens,
        }


@dataclass
class ConversationMetadata:
    cwd: Optional[str] = None
    git_branch: Optional[str] = None
    version: Optional[str] = None
    start_time: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "cwd": self.cwd,
            "git_branch": self.git_branch,
            "version": self.version,
            "start_time": self.start_time,
        }


@dataclass
class Conversation:
    """A session reconstructed from its record stream.

    ``id`` is None for sessions that never recorded a sessionId.
    """

    id: Optional[str] = None
    slug: Optional[str] = None
    metadata: ConversationMetadata = field(default_factory=ConversationMetadata)
    messages: list[Message] = field(default_factory=list)
    stats: Stats = field(default_factory=Stats)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "slug": self.slug,
            "metadata": self.metadata.to_dict(),
            "conversation": [msg.to_dict() for msg in self.messages],
            "stats": self.stats.to_dict(),
        }


# ── Listings ─────────────────────────────────────────────────────


@dataclass
class SessionMetadata:
    """Lightweight fields read from the first few lines of a session file."""

    session_id: Optional[str] = None
    slug: Optional[str] = None
    timestamp: Optional[str] = None
    git_branch: Optional[str] = None
    version: Optional[str] = None
    first_message: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "session_id": self.session_id,
            "slug": self.slug,
            "timestamp": self.timestamp,
            "git_branch": self.git_branch,
            "version": self.version,
            "first_message": self.first_message,
        }


@dataclass
class SessionSummary:
    """A session file as shown in listings."""

    id: str  # file stem, e.g. "3f2a..." or "agent-a1b2c3"
    filename: str
    path: str
    size: int
    modified: datetime
    metadata: SessionMetadata = field(default_factory=SessionMetadata)

    @property
    def is_agent(self) -> bool:
        return self.id.startswith("agent-")

    @property
    def timestamp(self) -> Optional[str]:
        return self.metadata.timestamp

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "filename": self.filename,
            "path": self.path,
            "size": self.size,
            "modified": self.modified.isoformat(),
            "is_agent": self.is_agent,
            **self.metadata.to_dict(),
        }


@dataclass
class Project:
    """A directory of sessions belonging to one working directory."""

    id: str  # encoded directory name, e.g. "-Users-alice-dev-webapp"
    name: str
    path: str
    session_count: int = 0
    latest_session: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "path": self.path,
            "session_count": self.session_count,
            "latest_session": self.latest_session,
        }


@dataclass
class RelatedSession:
    """A parent or child session found by the hierarchy resolver."""

    id: str
    project: str
    project_id: str
    metadata: SessionMetadata = field(default_factory=SessionMetadata)
    agent_id: Optional[str] = None

    @property
    def timestamp(self) -> Optional[str]:
        return self.metadata.timestamp

    def to_dict(self) -> dict:
        data = {"id": self.id}
        if self.agent_id is not None:
            data["agent_id"] = self.agent_id
        data.update(self.metadata.to_dict())
        data["project"] = self.project
        data["project_id"] = self.project_id
        return data

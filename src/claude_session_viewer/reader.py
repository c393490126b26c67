"""Rebuild a conversation from a session's record stream."""

import logging
from pathlib import Path
from typing import Iterable

from .core import Conversation, ConversationMetadata, Message, Stats, parse_content
from .records import Record, RecordStream

logger = logging.getLogger(__name__)

MESSAGE_TYPES = ("user", "assistant")


def read_session(path: Path | str) -> Conversation:
    """Read and reconstruct one session file.

    Raises ``SessionNotFound`` or ``StorageError`` if the file can't be opened.
    Malformed lines inside the file are skipped.
    """
    with RecordStream(path) as stream:
        conversation = reconstruct(stream)

    logger.debug(
        "Reconstructed %s: %d messages from %d lines",
        path, len(conversation.messages), stream.line_number,
    )
    return conversation


def reconstruct(records: Iterable[Record]) -> Conversation:
    """Turn an ordered record sequence into a deduplicated conversation.

    - file-history-snapshot records are ignored entirely.
    - Identity and metadata come from the first record with a sessionId.
    - Only user and assistant records become messages.
    """
    conversation = Conversation()
    messages = []

    for record in records:
        if record.type == "file-history-snapshot":
            continue

        if conversation.id is None and record.session_id:
            conversation.id = record.session_id
            conversation.slug = record.slug
            conversation.metadata = ConversationMetadata(
                cwd=record.cwd,
                git_branch=record.git_branch,
                version=record.version,
                start_time=record.timestamp,
            )

        if record.type in MESSAGE_TYPES:
            messages.append(message_from_record(record))

    conversation.messages = deduplicate_messages(messages)
    conversation.stats = calculate_stats(conversation.messages)
    return conversation


def message_from_record(record: Record) -> Message:
    message = record.message or {}
    return Message(
        type=record.type,
        uuid=record.uuid,
        parent_uuid=record.parent_uuid,
        timestamp=record.timestamp,
        role=message.get("role"),
        model=message.get("model"),
        content=parse_content(message.get("content")),
        usage=message.get("usage"),
        stop_reason=message.get("stop_reason"),
        tool_use_result=record.tool_use_result,
        thinking_metadata=record.thinking_metadata,
        todos=record.todos,
        is_sidechain=record.is_sidechain,
    )


def deduplicate_messages(messages: list[Message]) -> list[Message]:
    """Collapse streamed re-emissions of assistant messages.

    An assistant message keeps the slot of its uuid's first occurrence; its
    fields come from whichever emission had the most content blocks (the
    earliest one wins ties). User messages and assistant messages without a
    uuid are always kept.
    """
    order = []  # (uuid, message); uuid is None for messages never deduplicated
    best = {}

    for msg in messages:
        if msg.type != "assistant" or not isinstance(msg.uuid, str) or not msg.uuid:
            order.append((None, msg))
            continue

        kept = best.get(msg.uuid)
        if kept is None:
            order.append((msg.uuid, msg))
            best[msg.uuid] = msg
        elif len(msg.content) > len(kept.content):
            best[msg.uuid] = msg

    return [msg if key is None else best[key] for key, msg in order]


def calculate_stats(messages: Iterable[Message]) -> Stats:
    """Count messages and blocks, and sum token usage over assistant turns."""
    stats = Stats()

    for msg in messages:
        if msg.type == "user":
            stats.user_messages += 1
        elif msg.type == "assistant":
            stats.assistant_messages += 1
            if isinstance(msg.usage, dict):
                stats.total_input_tokens += _token_count(msg.usage.get("input_tokens"))
                stats.total_output_tokens += _token_count(msg.usage.get("output_tokens"))
            for block in msg.content:
                if block.type == "tool_use":
                    stats.tool_calls += 1
                elif block.type == "thinking":
                    stats.thinking_blocks += 1

    return stats


def _token_count(value) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        return 0
    return value

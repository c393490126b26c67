"""Shared test fixtures for claude-session-viewer."""

import json

import pytest

SESSION_ID = "session-001"


def write_jsonl(path, records):
    """Write records (dicts, or raw strings for malformed lines) as JSONL."""
    lines = [r if isinstance(r, str) else json.dumps(r) for r in records]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def user_record(text, *, session_id=SESSION_ID, uuid=None, timestamp=None, **extra):
    record = {
        "type": "user",
        "sessionId": session_id,
        "uuid": uuid,
        "timestamp": timestamp,
        "message": {"role": "user", "content": text},
    }
    record.update(extra)
    return record


def assistant_record(uuid, content, *, session_id=SESSION_ID, usage=None, timestamp=None, **extra):
    record = {
        "type": "assistant",
        "sessionId": session_id,
        "uuid": uuid,
        "timestamp": timestamp,
        "message": {
            "role": "assistant",
            "model": "claude-sonnet-4-5",
            "content": content,
            "usage": usage,
            "stop_reason": None,
        },
    }
    record.update(extra)
    return record


@pytest.fixture
def main_session_records():
    """A realistic main session with streaming re-emission and a sub-agent call.

    Includes:
    - file-history-snapshot before the first user record
    - a user prompt carrying session metadata
    - one assistant uuid emitted three times with 1, 3 and 2 content blocks
    - a malformed line and a blank line
    - tool results referencing agent ids "a1" (has a file) and "b2" (doesn't)
    """
    return [
        {"type": "file-history-snapshot", "messageId": "snap-1", "snapshot": {"trackedFileBackups": {}}},
        user_record(
            "Help me refactor the auth module",
            uuid="u-1",
            timestamp="2025-01-20T10:00:00Z",
            slug="refactor-auth-module",
            cwd="/Users/testuser/dev/myapp",
            gitBranch="main",
            version="1.0.80",
            parentUuid=None,
            isSidechain=False,
        ),
        assistant_record(
            "a-1",
            [{"type": "thinking", "thinking": "Read the module first.", "signature": "sig"}],
            timestamp="2025-01-20T10:00:05Z",
            usage={"input_tokens": 10, "output_tokens": 1},
        ),
        "{not json",
        assistant_record(
            "a-1",
            [
                {"type": "thinking", "thinking": "Read the module first.", "signature": "sig"},
                {"type": "text", "text": "Let me delegate the search."},
                {"type": "tool_use", "id": "toolu_1", "name": "Task", "input": {"prompt": "find auth code"}},
            ],
            timestamp="2025-01-20T10:00:06Z",
            usage={"input_tokens": 100, "output_tokens": 50},
        ),
        assistant_record(
            "a-1",
            [
                {"type": "thinking", "thinking": "Read the module first.", "signature": "sig"},
                {"type": "text", "text": "Let me delegate the search."},
            ],
            timestamp="2025-01-20T10:00:07Z",
            usage={"input_tokens": 999, "output_tokens": 999},
        ),
        "",
        user_record(
            [{"type": "tool_result", "tool_use_id": "toolu_1", "content": [{"type": "text", "text": "Found src/auth.ts"}]}],
            uuid="u-2",
            timestamp="2025-01-20T10:03:00Z",
            toolUseResult={"status": "completed", "agentId": "a1"},
        ),
        user_record(
            [{"type": "tool_result", "tool_use_id": "toolu_2", "content": "No matches"}],
            uuid="u-3",
            timestamp="2025-01-20T10:04:00Z",
            toolUseResult={"status": "completed", "agentId": "b2"},
        ),
        {"type": "summary", "summary": "Auth refactor", "leafUuid": "a-2"},
        assistant_record(
            "a-2",
            [{"type": "text", "text": "Done."}],
            timestamp="2025-01-20T10:05:00Z",
            usage={"input_tokens": 200, "output_tokens": 20},
        ),
    ]


@pytest.fixture
def tmp_projects_dir(tmp_path, main_session_records):
    """Create a synthetic ~/.claude/projects tree.

    - -Users-testuser-dev-myapp: session-001 (main), session-002 (older),
      agent-a1 (sub-agent of session-001), plus a non-session file
    - -Users-testuser-dev-other: session-003, the most recent session
    - -Users-testuser-dev-empty: no session files
    """
    projects = tmp_path / "projects"

    myapp = projects / "-Users-testuser-dev-myapp"
    myapp.mkdir(parents=True)
    write_jsonl(myapp / "session-001.jsonl", main_session_records)
    write_jsonl(myapp / "session-002.jsonl", [
        user_record(
            "Write tests for the API",
            session_id="session-002",
            uuid="u-10",
            timestamp="2025-01-18T09:00:00Z",
            slug="api-tests",
        ),
        assistant_record("a-10", "Sure.", session_id="session-002", timestamp="2025-01-18T09:00:10Z"),
    ])
    write_jsonl(myapp / "agent-a1.jsonl", [
        user_record(
            "find auth code",
            session_id=SESSION_ID,
            uuid="s-1",
            timestamp="2025-01-20T10:02:00Z",
            isSidechain=True,
        ),
        assistant_record("s-2", [{"type": "text", "text": "Found src/auth.ts"}], isSidechain=True),
    ])
    (myapp / "notes.txt").write_text("not a session", encoding="utf-8")

    other = projects / "-Users-testuser-dev-other"
    other.mkdir()
    write_jsonl(other / "session-003.jsonl", [
        user_record(
            "Set up CI for the other project",
            session_id="session-003",
            uuid="u-20",
            timestamp="2025-02-01T08:00:00Z",
        ),
    ])

    (projects / "-Users-testuser-dev-empty").mkdir()

    return projects


@pytest.fixture
def myapp_dir(tmp_projects_dir):
    return tmp_projects_dir / "-Users-testuser-dev-myapp"

"""Claude Code session log backend.

Reads ``<root>/<encoded project path>/<sessionId>.jsonl`` files, where the
root is ``~/.claude/projects`` unless configured otherwise. Sub-agent
sessions sit beside their parent as ``agent-<agentId>.jsonl``.
"""

import logging
from pathlib import Path

from ..config import get_projects_path
from ..core import Conversation, Project, RelatedSession, SessionSummary
from ..errors import SessionNotFound
from ..hierarchy import HierarchyResolver
from ..provider import SessionProvider
from ..reader import read_session
from ..scanner import ProjectScanner

logger = logging.getLogger(__name__)


class ClaudeCodeProvider(SessionProvider):
    """Provider for Claude Code session logs."""

    name = "claude_code"

    def __init__(self, projects_path: Path | str | None = None):
        self.projects_path = Path(projects_path) if projects_path else get_projects_path()
        self.scanner = ProjectScanner(self.projects_path)
        self.hierarchy = HierarchyResolver(self.scanner)

    def get_base_path(self) -> Path:
        return self.projects_path

    def list_projects(self) -> list[Project]:
        return self.scanner.list_projects()

    def list_sessions(self, project_id: str) -> list[SessionSummary]:
        try:
            project_dir = self.scanner.project_dir(project_id)
        except SessionNotFound as e:
            logger.warning("Refusing to list sessions for %r: %s", project_id, e)
            return []
        return self.scanner.list_sessions(project_dir)

    def read_session(self, session_id: str, project_id: str | None = None) -> tuple[Conversation, Project]:
        if project_id:
            path = self.scanner.session_path(project_id, session_id)
            project = self.scanner.project_info(project_id)
        else:
            found = self.scanner.find_session_by_id(session_id)
            if found is None:
                raise SessionNotFound(f"Session not found: {session_id}")
            path, project = found

        conversation = read_session(path)
        if conversation.id is None:
            # Empty or truncated file: fall back to the id we were asked for.
            conversation.id = session_id
        return conversation, project

    def resolve_parent(self, session_id: str, project_id: str) -> RelatedSession | None:
        return self.hierarchy.resolve_parent(session_id, project_id)

    def resolve_children(self, session_id: str, project_id: str) -> list[RelatedSession]:
        return self.hierarchy.resolve_children(session_id, project_id)

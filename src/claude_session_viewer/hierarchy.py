"""Parent/child links between main sessions and the sub-agents they spawn.

A sub-agent session lives next to its parent as ``agent-<agentId>.jsonl``.
The parent mentions it in the ``toolUseResult.agentId`` field of the record
that carries the sub-agent's result.
"""

import logging
import re

from .core import RelatedSession
from .errors import SessionNotFound, StorageError
from .metadata import extract_metadata
from .records import RecordStream
from .scanner import EPOCH, SESSION_SUFFIX, ProjectScanner, parse_timestamp

logger = logging.getLogger(__name__)

AGENT_PREFIX = "agent-"
AGENT_SESSION_RE = re.compile(r"^agent-(.+)$")


def agent_id_from_session_id(session_id: str) -> str | None:
    """Return the agent id embedded in a sub-agent session id, else None."""
    match = AGENT_SESSION_RE.match(session_id)
    return match.group(1) if match else None


def agent_session_id(agent_id: str) -> str:
    return f"{AGENT_PREFIX}{agent_id}"


class HierarchyResolver:
    """Answers parent/children queries by cross-referencing a project's files."""

    def __init__(self, scanner: ProjectScanner):
        self.scanner = scanner

    def resolve_parent(self, session_id: str, project_id: str) -> RelatedSession | None:
        """Find the main session that spawned a sub-agent session.

        Returns None when ``session_id`` isn't a sub-agent id or when no
        session in the project references it. Scanning stops at the first
        matching record.
        """
        agent_id = agent_id_from_session_id(session_id)
        if agent_id is None:
            return None

        project_dir = self.scanner.project_dir(project_id)
        try:
            candidates = sorted(
                p for p in project_dir.iterdir()
                if p.suffix == SESSION_SUFFIX and not p.name.startswith(AGENT_PREFIX)
            )
        except (FileNotFoundError, NotADirectoryError) as e:
            raise SessionNotFound(f"Project not found: {project_id}") from e
        except OSError as e:
            raise StorageError(f"Cannot list {project_dir}: {e}") from e

        for path in candidates:
            try:
                with RecordStream(path, contains=agent_id) as stream:
                    found = any(record.agent_id == agent_id for record in stream)
            except (SessionNotFound, StorageError) as e:
                logger.warning("Skipping %s while resolving parent of %s: %s", path, session_id, e)
                continue

            if found:
                logger.debug("Parent of %s is %s", session_id, path.stem)
                return self._related(path.stem, project_id, path)

        return None

    def resolve_children(self, session_id: str, project_id: str) -> list[RelatedSession]:
        """Return the sub-agent sessions spawned by a session, newest first.

        Agent ids referenced by the session but lacking an ``agent-*.jsonl``
        file in the project are ignored. Raises ``SessionNotFound`` if the
        session file itself doesn't exist.
        """
        session_path = self.scanner.session_path(project_id, session_id)

        agent_ids = {}  # ordered set
        with RecordStream(session_path) as stream:
            for record in stream:
                if record.agent_id is not None:
                    agent_ids[record.agent_id] = None

        children = []
        for agent_id in agent_ids:
            child_id = agent_session_id(agent_id)
            try:
                child_path = self.scanner.session_path(project_id, child_id)
            except SessionNotFound:
                continue
            if not child_path.is_file():
                continue
            try:
                children.append(self._related(child_id, project_id, child_path, agent_id=agent_id))
            except (SessionNotFound, StorageError) as e:
                logger.warning("Skipping child session %s: %s", child_path, e)

        children.sort(key=lambda c: parse_timestamp(c.timestamp) or EPOCH, reverse=True)
        return children

    def _related(self, session_id, project_id, path, agent_id=None) -> RelatedSession:
        return RelatedSession(
            id=session_id,
            project=self.scanner.project_info(project_id).name,
            project_id=project_id,
            metadata=extract_metadata(path),
            agent_id=agent_id,
        )

"""Abstract base class for session log providers."""

from abc import ABC, abstractmethod
from pathlib import Path

from .core import Conversation, Project, RelatedSession, SessionSummary
from .scanner import session_sort_key

MIN_QUERY_LENGTH = 2
MAX_SEARCH_RESULTS = 100


class SessionProvider(ABC):
    """Interface the HTTP layer and CLI use to reach session data.

    Every call re-reads storage; providers hold no cached session state.
    """

    name: str

    @abstractmethod
    def get_base_path(self) -> Path:
        """Return the root directory holding one directory per project."""
        ...

    def is_available(self) -> bool:
        return self.get_base_path().is_dir()

    @abstractmethod
    def list_projects(self) -> list[Project]:
        """Return projects with at least one session, most recent first."""
        ...

    @abstractmethod
    def list_sessions(self, project_id: str) -> list[SessionSummary]:
        """Return a project's sessions, most recent first."""
        ...

    @abstractmethod
    def read_session(self, session_id: str, project_id: str | None = None) -> tuple[Conversation, Project]:
        """Reconstruct a session, searching all projects when none is given.

        Raises ``SessionNotFound`` if no such session exists.
        """
        ...

    @abstractmethod
    def resolve_parent(self, session_id: str, project_id: str) -> RelatedSession | None:
        ...

    @abstractmethod
    def resolve_children(self, session_id: str, project_id: str) -> list[RelatedSession]:
        ...

    def list_all_sessions(self, exclude_agents: bool = False) -> list[tuple[SessionSummary, Project]]:
        """Return sessions from every project paired with their project, newest first."""
        pairs = []
        for project in self.list_projects():
            for session in self.list_sessions(project.id):
                if exclude_agents and session.is_agent:
                    continue
                pairs.append((session, project))

        pairs.sort(key=lambda pair: session_sort_key(pair[0]), reverse=True)
        return pairs

    def search_sessions(self, query: str, exclude_agents: bool = False) -> list[tuple[SessionSummary, Project]]:
        """Case-insensitive match on slug, first message and project name.

        Queries shorter than two characters match nothing. Projects are
        scanned until at least ``MAX_SEARCH_RESULTS`` results are collected.
        """
        query = (query or "").lower()
        if len(query) < MIN_QUERY_LENGTH:
            return []

        results = []
        for project in self.list_projects():
            project_match = query in project.name.lower()
            for session in self.list_sessions(project.id):
                if exclude_agents and session.is_agent:
                    continue
                meta = session.metadata
                if project_match or _contains(meta.slug, query) or _contains(meta.first_message, query):
                    results.append((session, project))

            if len(results) >= MAX_SEARCH_RESULTS:
                break

        return results


def _contains(value, query: str) -> bool:
    return isinstance(value, str) and query in value.lower()

"""Discovery of projects and session files under the projects root.

Layout::

    <projects root>/
        -Users-alice-dev-webapp/        one directory per working directory
            3f2a9c...jsonl              main session
            agent-a1b2c3.jsonl          sub-agent session

Directory names encode the working directory by replacing every "/" with
"-". Decoding is lossy: a "-" inside a path component can't be told apart
from an encoded separator, so "/Users/alice/my-app" comes back as
"/Users/alice/my/app".
"""

import logging
import posixpath
from datetime import datetime, timezone
from pathlib import Path

from .core import Project, SessionSummary
from .errors import SessionNotFound, StorageError
from .metadata import extract_metadata

logger = logging.getLogger(__name__)

SESSION_SUFFIX = ".jsonl"

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def encode_project_path(path: str) -> str:
    """Encode a filesystem path as a project directory name."""
    return path.replace("/", "-")


def decode_project_path(encoded_name: str) -> str:
    """Decode a project directory name back into a path (lossy, see module docs)."""
    if encoded_name.startswith("-"):
        encoded_name = "/" + encoded_name[1:]
    return encoded_name.replace("-", "/")


def get_project_name(encoded_name: str) -> str:
    """Return the last component of the decoded project path."""
    return posixpath.basename(decode_project_path(encoded_name).rstrip("/"))


def safe_child(base: Path, name: str) -> Path:
    """Join a single directory entry name onto ``base``.

    Raises ``SessionNotFound`` for names that could escape ``base``.
    """
    if not name or name in (".", "..") or "/" in name or "\\" in name or "\0" in name:
        raise SessionNotFound(f"Invalid name: {name!r}")
    return base / name


class ProjectScanner:
    """Lists projects and sessions beneath a projects root."""

    def __init__(self, projects_path: Path | str):
        self.projects_path = Path(projects_path)

    def project_dir(self, project_id: str) -> Path:
        return safe_child(self.projects_path, project_id)

    def session_path(self, project_id: str, session_id: str) -> Path:
        return safe_child(self.project_dir(project_id), f"{session_id}{SESSION_SUFFIX}")

    def project_info(self, project_id: str) -> Project:
        """Project identity derived from its directory name alone (no scan)."""
        return Project(
            id=project_id,
            name=get_project_name(project_id),
            path=decode_project_path(project_id),
        )

    def list_projects(self) -> list[Project]:
        """Return every project with at least one session, most recent first.

        Scan failures are logged and yield an empty list.
        """
        try:
            entries = sorted(self.projects_path.iterdir())
        except OSError as e:
            logger.error("Error scanning projects in %s: %s", self.projects_path, e)
            return []

        projects = []
        for entry in entries:
            if not entry.is_dir():
                continue

            sessions = self.list_sessions(entry)
            if not sessions:
                continue

            latest = sessions[0]
            project = self.project_info(entry.name)
            project.session_count = len(sessions)
            if parse_timestamp(latest.timestamp):
                project.latest_session = latest.timestamp
            else:
                project.latest_session = latest.modified.isoformat()
            projects.append(project)

        projects.sort(key=lambda p: parse_timestamp(p.latest_session) or EPOCH, reverse=True)
        return projects

    def list_sessions(self, project_path: Path | str) -> list[SessionSummary]:
        """Return summaries of every session file in a project directory.

        Sorted most recent first by in-file timestamp, falling back to the
        file's modification time. Scan failures are logged and yield an
        empty list.
        """
        project_path = Path(project_path)
        try:
            entries = sorted(project_path.iterdir())
        except OSError as e:
            logger.error("Error scanning sessions in %s: %s", project_path, e)
            return []

        sessions = []
        for entry in entries:
            if entry.suffix != SESSION_SUFFIX or not entry.is_file():
                continue
            try:
                sessions.append(summarize_session(entry))
            except (SessionNotFound, StorageError, OSError) as e:
                logger.warning("Skipping unreadable session %s: %s", entry, e)

        sessions.sort(key=session_sort_key, reverse=True)
        return sessions

    def find_session_by_id(self, session_id: str) -> tuple[Path, Project] | None:
        """Locate a session file by id across all projects.

        Projects are searched in listing order and the first match wins; the
        same id in two projects is not disambiguated.
        """
        try:
            filename = safe_child(self.projects_path, f"{session_id}{SESSION_SUFFIX}").name
        except SessionNotFound:
            return None

        for project in self.list_projects():
            path = self.project_dir(project.id) / filename
            if path.is_file():
                return path, project
        return None


def summarize_session(path: Path) -> SessionSummary:
    """Build a listing entry for one session file from stat + head metadata."""
    stat = path.stat()
    return SessionSummary(
        id=path.stem,
        filename=path.name,
        path=str(path),
        size=stat.st_size,
        modified=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
        metadata=extract_metadata(path),
    )


def session_sort_key(session: SessionSummary) -> datetime:
    return parse_timestamp(session.timestamp) or session.modified


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO 8601 timestamp; naive values are taken as UTC."""
    if not value or not isinstance(value, str):
        return None
    try:
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        parsed = datetime.fromisoformat(value)
    except (ValueError, TypeError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed

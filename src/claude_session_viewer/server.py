"""FastAPI web server for claude-session-viewer."""

import logging
import math
from pathlib import Path

from fastapi import Depends, FastAPI, HTTPException, Query, Request

from . import __version__
from .backends import get_provider
from .core import Project, SessionSummary
from .errors import SessionNotFound, StorageError
from .provider import SessionProvider

logger = logging.getLogger(__name__)


def create_app(projects_path: Path | str | None = None) -> FastAPI:
    """Build the API for a projects root (the configured default if None)."""
    app = FastAPI(title="claude-session-viewer", version=__version__)
    app.state.provider = get_provider(projects_path)
    logger.info("Serving sessions from %s", app.state.provider.get_base_path())
    _register_routes(app)
    return app


def _get_provider(request: Request) -> SessionProvider:
    return request.app.state.provider


def _listed_session(session: SessionSummary, project: Project) -> dict:
    """A session summary annotated with its owning project."""
    return {
        **session.to_dict(),
        "project": project.name,
        "project_id": project.id,
        "project_path": project.path,
    }


def _require_project(project: str | None) -> str:
    if not project:
        raise HTTPException(status_code=400, detail="project parameter required")
    return project


# ── Routes ───────────────────────────────────────────────────────


def _register_routes(app: FastAPI) -> None:
    # Plain functions: the scans block, so FastAPI runs them in its threadpool.

    @app.get("/api/projects")
    def get_projects(provider: SessionProvider = Depends(_get_provider)):
        """Return all projects, most recent first."""
        return [p.to_dict() for p in provider.list_projects()]

    @app.get("/api/projects/{project_id}/sessions")
    def get_project_sessions(
        project_id: str,
        exclude_agents: bool = Query(False, description="Hide agent-* sessions"),
        provider: SessionProvider = Depends(_get_provider),
    ):
        """Return the sessions of one project."""
        sessions = provider.list_sessions(project_id)
        if exclude_agents:
            sessions = [s for s in sessions if not s.is_agent]
        return [s.to_dict() for s in sessions]

    @app.get("/api/sessions")
    def get_sessions(
        exclude_agents: bool = Query(False, description="Hide agent-* sessions"),
        page: int = Query(1, ge=1),
        limit: int = Query(50, ge=1, le=1000),
        provider: SessionProvider = Depends(_get_provider),
    ):
        """Return sessions across all projects, newest first, paginated."""
        pairs = provider.list_all_sessions(exclude_agents=exclude_agents)

        total = len(pairs)
        start = (page - 1) * limit
        return {
            "sessions": [_listed_session(s, p) for s, p in pairs[start: start + limit]],
            "total": total,
            "page": page,
            "pages": math.ceil(total / limit),
        }

    @app.get("/api/sessions/{session_id}")
    def get_session(
        session_id: str,
        project: str | None = Query(None, description="Project id; searched for if omitted"),
        provider: SessionProvider = Depends(_get_provider),
    ):
        """Return a reconstructed session."""
        try:
            conversation, project_info = provider.read_session(session_id, project)
        except SessionNotFound:
            raise HTTPException(status_code=404, detail="Session not found")
        except StorageError as e:
            logger.error("Failed to read session %s: %s", session_id, e)
            raise HTTPException(status_code=500, detail="Failed to read session")

        data = conversation.to_dict()
        data["project"] = {
            "id": project_info.id,
            "name": project_info.name,
            "path": project_info.path,
        }
        return data

    @app.get("/api/sessions/{session_id}/parent")
    def get_session_parent(
        session_id: str,
        project: str | None = Query(None),
        provider: SessionProvider = Depends(_get_provider),
    ):
        """Return the main session that spawned an agent session, if any."""
        project_id = _require_project(project)
        try:
            parent = provider.resolve_parent(session_id, project_id)
        except SessionNotFound:
            raise HTTPException(status_code=404, detail="Project not found")
        except StorageError as e:
            logger.error("Failed to resolve parent of %s: %s", session_id, e)
            raise HTTPException(status_code=500, detail="Failed to resolve parent")

        return {"parent": parent.to_dict() if parent else None}

    @app.get("/api/sessions/{session_id}/children")
    def get_session_children(
        session_id: str,
        project: str | None = Query(None),
        provider: SessionProvider = Depends(_get_provider),
    ):
        """Return the agent sessions spawned by a session."""
        project_id = _require_project(project)
        try:
            children = provider.resolve_children(session_id, project_id)
        except SessionNotFound:
            raise HTTPException(status_code=404, detail="Session not found")
        except StorageError as e:
            logger.error("Failed to resolve children of %s: %s", session_id, e)
            raise HTTPException(status_code=500, detail="Failed to resolve children")

        return {"children": [c.to_dict() for c in children]}

    @app.get("/api/search")
    def search(
        q: str | None = Query(None, description="Search in slugs, first messages and project names"),
        exclude_agents: bool = Query(False),
        provider: SessionProvider = Depends(_get_provider),
    ):
        """Search session summaries."""
        results = provider.search_sessions(q or "", exclude_agents=exclude_agents)
        return {"results": [_listed_session(s, p) for s, p in results]}

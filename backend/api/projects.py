"""
Projects API endpoints
"""

import logging
from datetime import datetime
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel
from typing import Optional

from backend.config import DB_PATH, STORAGE_DIR, PUBLIC_URL, BUCKET, MAX_UPLOAD_BYTES
from core.auth import LocalSessionProvider
from core.catalog import ProjectCatalog
from core.errors import IdentityMissing
from core.labeling import LabelingSession
from core.models import Coverage, Identity, Project, ProjectKind
from core.object_store import LocalObjectStore
from core.ports import EntityStore, ObjectStore, SessionProvider
from core.store import SqliteEntityStore

logger = logging.getLogger(__name__)

router = APIRouter()

# Process-wide collaborators and UI state
_store: Optional[EntityStore] = None
_objects: Optional[ObjectStore] = None
_sessions: Optional[SessionProvider] = None
_catalog: Optional[ProjectCatalog] = None
_labeling: Optional[LabelingSession] = None
_unsubscribe = None


def configure(
    store: EntityStore,
    objects: ObjectStore,
    sessions: SessionProvider,
    bucket: str = BUCKET,
) -> None:
    """Install the collaborators the API works against."""
    global _store, _objects, _sessions, _catalog, _labeling, _unsubscribe

    if _unsubscribe is not None:
        _unsubscribe()
    _store = store
    _objects = objects
    _sessions = sessions
    _catalog = ProjectCatalog(store)
    _labeling = LabelingSession(store, objects, bucket=bucket)
    _unsubscribe = sessions.on_change(_on_identity_change)


def _on_identity_change(identity: Optional[Identity]) -> None:
    """Forget the previous identity's projects and open session."""
    _catalog.projects = []
    _labeling.close()


def _ensure_configured() -> None:
    if _store is None:
        store = SqliteEntityStore.open(DB_PATH)
        logger.info(f"Using entity store at {DB_PATH}")
        configure(
            store,
            LocalObjectStore(STORAGE_DIR, PUBLIC_URL, max_bytes=MAX_UPLOAD_BYTES),
            LocalSessionProvider(store),
        )


def get_store() -> EntityStore:
    _ensure_configured()
    return _store


def get_objects() -> ObjectStore:
    _ensure_configured()
    return _objects


def get_sessions() -> SessionProvider:
    _ensure_configured()
    return _sessions


def get_catalog() -> ProjectCatalog:
    _ensure_configured()
    return _catalog


def get_labeling() -> LabelingSession:
    _ensure_configured()
    return _labeling


def require_identity() -> Identity:
    """Get the signed-in identity."""
    identity = get_sessions().current_identity()
    if identity is None:
        raise IdentityMissing("Not signed in")
    return identity


def get_project() -> Project:
    """Get the project open in the labeling session."""
    require_identity()
    project = get_labeling().project
    if project is None:
        raise HTTPException(status_code=400, detail="No project open")
    return project


class ProjectResponse(BaseModel):
    id: str
    name: str
    description: str
    type: ProjectKind
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_project(cls, project: Project):
        return cls(
            id=project.id,
            name=project.name,
            description=project.description,
            type=project.kind,
            created_at=project.created_at,
            updated_at=project.updated_at,
        )


class CreateProjectRequest(BaseModel):
    name: str
    description: str = ""
    type: str = ProjectKind.IMAGE.value


class CoverageResponse(BaseModel):
    file_count: int
    text_item_count: int
    image_item_count: int
    percent: int

    @classmethod
    def from_coverage(cls, coverage: Coverage):
        return cls(
            file_count=coverage.file_count,
            text_item_count=coverage.text_item_count,
            image_item_count=coverage.image_item_count,
            percent=coverage.percent,
        )


@router.get("", response_model=list[ProjectResponse])
async def list_projects():
    """List the signed-in user's projects, newest first."""
    identity = require_identity()
    projects = get_catalog().list_projects(identity)
    return [ProjectResponse.from_project(p) for p in projects]


@router.post("", response_model=ProjectResponse)
async def create_project(request: CreateProjectRequest):
    """Create a new project."""
    identity = require_identity()
    project = get_catalog().create_project(
        identity,
        name=request.name,
        description=request.description,
        kind=request.type,
    )
    return ProjectResponse.from_project(project)


@router.get("/coverage", response_model=dict[str, CoverageResponse])
async def get_coverage():
    """Coverage statistics for every loaded project."""
    require_identity()
    coverage = get_catalog().coverage_for()
    return {pid: CoverageResponse.from_coverage(c) for pid, c in coverage.items()}


@router.get("/current", response_model=Optional[ProjectResponse])
async def get_current_project():
    """Get the project open in the labeling session."""
    project = get_labeling().project
    if project is None:
        return None
    return ProjectResponse.from_project(project)


@router.post("/close")
async def close_project():
    """Close the open project."""
    get_labeling().close()
    return {"status": "closed"}


@router.post("/{project_id}/open", response_model=ProjectResponse)
async def open_project(project_id: str):
    """Open a project in the labeling session."""
    identity = require_identity()
    catalog = get_catalog()

    project = catalog.get_project(project_id)
    if project is None:
        catalog.list_projects(identity)
        project = catalog.get_project(project_id)
    if project is None:
        raise HTTPException(status_code=404, detail="Project not found")

    get_labeling().open(project)
    return ProjectResponse.from_project(project)


@router.delete("/{project_id}")
async def delete_project(project_id: str):
    """Delete one of the signed-in user's projects with all its items and labels."""
    identity = require_identity()
    catalog = get_catalog()

    catalog.list_projects(identity)
    if catalog.get_project(project_id) is None:
        raise HTTPException(status_code=404, detail="Project not found")

    catalog.delete_project(project_id)

    labeling = get_labeling()
    if labeling.project is not None and labeling.project.id == project_id:
        labeling.close()
    return {"status": "deleted", "id": project_id}

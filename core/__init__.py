"""
Core module - Data model, storage adapters, catalog, labeling session and export
"""

from core.models import (
    Identity, Profile, Project, ProjectKind, DatasetItem, ImageContent, TextContent,
    Label, Coverage, EntityKind,
)
from core.errors import (
    LabelledError, StoreUnavailable, ValidationError, UploadFailure, IdentityMissing, AuthError,
)
from core.store import SqliteEntityStore
from core.object_store import LocalObjectStore
from core.auth import LocalSessionProvider
from core.catalog import ProjectCatalog, compute_coverage
from core.labeling import LabelingSession, IngestFile, IngestReport
from core.export_json import export_labeled_json, export_filename, write_export

__all__ = [
    "Identity", "Profile", "Project", "ProjectKind", "DatasetItem", "ImageContent",
    "TextContent", "Label", "Coverage", "EntityKind",
    "LabelledError", "StoreUnavailable", "ValidationError", "UploadFailure",
    "IdentityMissing", "AuthError",
    "SqliteEntityStore", "LocalObjectStore", "LocalSessionProvider",
    "ProjectCatalog", "compute_coverage",
    "LabelingSession", "IngestFile", "IngestReport",
    "export_labeled_json", "export_filename", "write_export",
]

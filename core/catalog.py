"""
Project catalog: lists, creates and deletes the current identity's projects
and derives per-project coverage statistics.
"""

import math
import logging
from typing import Iterable, Optional, Union

from core.errors import IdentityMissing, ValidationError
from core.models import (
    Coverage, DatasetItem, EntityKind, Identity, Profile, Project, ProjectKind
)
from core.ports import EntityStore

logger = logging.getLogger(__name__)

# Non text/* MIME types that still hold text payloads
TEXT_MIME_TYPES = {"application/json", "application/csv", "application/xml"}


def is_image_type(file_type: str) -> bool:
    return file_type.lower().startswith("image/")


def is_text_type(file_type: str) -> bool:
    file_type = file_type.lower()
    return file_type.startswith("text/") or file_type in TEXT_MIME_TYPES


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def compute_coverage(
    projects: Iterable[Project],
    dataset_items: Iterable[DatasetItem],
) -> dict[str, Coverage]:
    """
    Compute coverage statistics for each project.

    Args:
        projects: Projects to report on
        dataset_items: Items of any of those projects; others are ignored

    Returns:
        Mapping of project id to Coverage
    """
    coverage = {project.id: Coverage() for project in projects}
    for item in dataset_items:
        stats = coverage.get(item.project_id)
        if stats is None:
            continue
        stats.file_count += 1
        if is_image_type(item.file_type):
            stats.image_item_count += 1
        elif is_text_type(item.file_type):
            stats.text_item_count += 1

    for stats in coverage.values():
        if stats.file_count > 0:
            identified = stats.image_item_count + stats.text_item_count
            stats.percent = round_half_up(100 * identified / stats.file_count)
    return coverage


class ProjectCatalog:
    """
    Project list of one identity, kept newest first.

    The store is the source of truth; ``projects`` is updated in place after
    each successful mutation so no reload is needed.
    """

    compute_coverage = staticmethod(compute_coverage)

    def __init__(self, store: EntityStore):
        self.store = store
        self.projects: list[Project] = []

    def ensure_profile(self, identity: Identity, full_name: Optional[str] = None) -> Profile:
        """Idempotently upsert the profile mirroring ``identity``."""
        record = {"id": identity.id, "email": identity.email}
        if full_name is not None:
            record["full_name"] = full_name
        return Profile.from_record(
            self.store.upsert(EntityKind.PROFILES, record, conflict_key="id")
        )

    def list_projects(self, identity: Identity) -> list[Project]:
        """
        Load all projects owned by ``identity``, newest first.

        Raises:
            IdentityMissing: if no identity is given
            StoreUnavailable: if the store cannot be queried
        """
        if identity is None:
            raise IdentityMissing("Sign in to list projects")
        records = self.store.select(
            EntityKind.PROJECTS,
            filters={"user_id": identity.id},
            order=("created_at", False),
        )
        self.projects = [Project.from_record(record) for record in records]
        return self.projects

    def create_project(
        self,
        identity: Optional[Identity],
        name: str,
        description: str = "",
        kind: Union[ProjectKind, str] = ProjectKind.IMAGE,
    ) -> Project:
        """
        Create a project for ``identity`` and prepend it to the list.

        The identity's profile is upserted first; if that fails the error is
        re-raised unchanged and nothing is inserted.

        Raises:
            IdentityMissing: if no identity is given
            ValidationError: if the name is blank or the kind is unknown
            StoreUnavailable: if the store rejects the profile or project
        """
        if identity is None:
            raise IdentityMissing("Sign in to create a project")
        if not name or not name.strip():
            raise ValidationError("Project name is required")
        try:
            kind = ProjectKind(kind)
        except ValueError:
            raise ValidationError(f"Unknown project type: {kind}")

        self.ensure_profile(identity)

        record = self.store.insert(EntityKind.PROJECTS, {
            "user_id": identity.id,
            "name": name,
            "description": description or "",
            "type": kind.value,
        })
        project = Project.from_record(record)
        self.projects = [project] + self.projects
        logger.info(f"Created {kind.value} project '{name}' ({project.id})")
        return project

    def delete_project(self, project_id: str) -> None:
        """
        Delete a project; its items and labels go with it by cascade.

        The in-memory list changes only after the store delete succeeds.
        """
        self.store.delete(EntityKind.PROJECTS, project_id)
        self.projects = [p for p in self.projects if p.id != project_id]
        logger.info(f"Deleted project {project_id}")

    def get_project(self, project_id: str) -> Optional[Project]:
        """Look up a project in the loaded list."""
        for project in self.projects:
            if project.id == project_id:
                return project
        return None

    def coverage_for(self, projects: Optional[list[Project]] = None) -> dict[str, Coverage]:
        """Fetch each project's items and compute its coverage."""
        if projects is None:
            projects = self.projects
        items = []
        for project in projects:
            records = self.store.select(EntityKind.DATASETS, filters={"project_id": project.id})
            items.extend(DatasetItem.from_record(record) for record in records)
        return compute_coverage(projects, items)

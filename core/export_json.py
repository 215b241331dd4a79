"""
JSON export of a project's labeled data.

Produces one array with an entry per dataset item:
    {"file_name": ..., "content": ..., "labels": [...]}
where content is the inline text if present, else the URL.
"""

import json
import logging
from pathlib import Path
from typing import Iterable, Union

from core.models import DatasetItem, EntityKind, Label, Project
from core.ports import EntityStore

logger = logging.getLogger(__name__)


def export_filename(project: Project) -> str:
    """Download name of a project's export."""
    return f"{project.name}-labeled-data.json"


def safe_export_filename(project: Project) -> str:
    """Export filename usable as a single path component."""
    name = export_filename(project).replace("/", "_").replace("\\", "_")
    return Path(name).name


def build_export(items: Iterable[DatasetItem], labels: Iterable[Label]) -> list[dict]:
    """
    Flatten items and their labels into export entries.

    Args:
        items: Dataset items, in the order they should appear
        labels: Labels of those items, in creation order

    Returns:
        List of export entries
    """
    texts_by_item: dict[str, list[str]] = {}
    for label in labels:
        texts_by_item.setdefault(label.dataset_id, []).append(label.label_text)

    return [
        {
            "file_name": item.file_name,
            "content": item.payload,
            "labels": texts_by_item.get(item.id, []),
        }
        for item in items
    ]


def export_labeled_json(
    project: Project,
    items: Iterable[DatasetItem],
    labels: Iterable[Label],
) -> str:
    """Serialize a project's items and labels as an indented JSON array."""
    entries = build_export(items, labels)
    logger.debug(f"Exporting {len(entries)} item(s) from project {project.id}")
    return json.dumps(entries, indent=2, ensure_ascii=False)


def collect_project(store: EntityStore, project_id: str) -> tuple[Project, list[DatasetItem], list[Label]]:
    """
    Load a project with its items and labels straight from the store.

    Raises:
        ValueError: if the project does not exist
    """
    records = store.select(EntityKind.PROJECTS, filters={"id": project_id})
    if not records:
        raise ValueError(f"Project {project_id} not found")
    project = Project.from_record(records[0])

    items = [
        DatasetItem.from_record(record)
        for record in store.select(
            EntityKind.DATASETS, filters={"project_id": project_id}, order=("created_at", True)
        )
    ]
    labels = []
    for item in items:
        labels.extend(
            Label.from_record(record)
            for record in store.select(
                EntityKind.LABELS, filters={"dataset_id": item.id}, order=("created_at", True)
            )
        )
    return project, items, labels


def write_export(
    project: Project,
    items: Iterable[DatasetItem],
    labels: Iterable[Label],
    out_dir: Union[str, Path],
) -> Path:
    """
    Write the export document to ``out_dir``.

    Path separators in the project name become underscores, so the file
    always lands directly inside ``out_dir``.

    Returns:
        Path of the written file
    """
    out_path = Path(out_dir)
    out_path.mkdir(parents=True, exist_ok=True)
    target = out_path / safe_export_filename(project)
    target.write_text(export_labeled_json(project, items, labels), encoding="utf-8")
    return target

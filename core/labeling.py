"""
Labeling session for one open project.

Holds the project's dataset items in creation order, a cursor into them and
the labels of the item at the cursor. Bulk ingestion uploads files
concurrently and reconciles by reloading the item list afterwards.
"""

import io
import time
import base64
import asyncio
import logging
import secrets
import mimetypes
from dataclasses import dataclass, field
from typing import Optional

from PIL import Image, UnidentifiedImageError

from core.errors import UploadFailure, ValidationError
from core.models import (
    DatasetItem, EntityKind, ImageContent, Label, Project, ProjectKind, TextContent,
    content_to_record,
)
from core.ports import EntityStore, ObjectStore

logger = logging.getLogger(__name__)

DEFAULT_BUCKET = "datasets"


@dataclass
class IngestFile:
    """A file selected for upload."""
    file_name: str
    data: bytes
    content_type: str = ""


@dataclass
class IngestError:
    """A file that could not be ingested."""
    file_name: str
    message: str


@dataclass
class IngestReport:
    """Outcome of one bulk ingestion."""
    project_id: str
    created: list[DatasetItem] = field(default_factory=list)
    errors: list[IngestError] = field(default_factory=list)
    discarded: int = 0  # Results dropped because the project was closed meanwhile


def strip_nul(text: str) -> str:
    """Remove NUL characters, which the store cannot persist."""
    return text.replace("\x00", "")


def detect_content_type(file: IngestFile) -> str:
    """Best guess at a file's MIME type."""
    if file.content_type:
        return file.content_type
    guessed, _ = mimetypes.guess_type(file.file_name)
    if guessed:
        return guessed
    try:
        with Image.open(io.BytesIO(file.data)) as img:
            return Image.MIME.get(img.format, "")
    except (UnidentifiedImageError, OSError):
        return ""


def to_data_url(data: bytes, content_type: str) -> str:
    """Self-contained inline representation of a file."""
    encoded = base64.b64encode(data).decode("ascii")
    return strip_nul(f"data:{content_type or 'application/octet-stream'};base64,{encoded}")


def object_path(project_id: str, file_name: str) -> str:
    """Unique object name for an upload: <project>/<millis>-<random>.<ext>"""
    ext = file_name.rsplit(".", 1)[-1] if "." in file_name else "bin"
    return f"{project_id}/{int(time.time() * 1000)}-{secrets.token_hex(6)}.{ext}"


class LabelingSession:
    """
    Cursor-based labeling over one project's dataset items.
    """

    def __init__(self, store: EntityStore, objects: ObjectStore, bucket: str = DEFAULT_BUCKET):
        self.store = store
        self.objects = objects
        self.bucket = bucket
        self.project: Optional[Project] = None
        self.items: list[DatasetItem] = []
        self.cursor = 0
        self.labels: list[Label] = []
        self.last_report: Optional[IngestReport] = None

    # ==================== Loading ====================

    @property
    def current_item(self) -> Optional[DatasetItem]:
        if not self.items:
            return None
        return self.items[self.cursor]

    def _fetch_items(self, project_id: str) -> list[DatasetItem]:
        records = self.store.select(
            EntityKind.DATASETS,
            filters={"project_id": project_id},
            order=("created_at", True),
        )
        return [DatasetItem.from_record(record) for record in records]

    def _fetch_labels(self, item: Optional[DatasetItem]) -> list[Label]:
        if item is None:
            return []
        records = self.store.select(
            EntityKind.LABELS,
            filters={"dataset_id": item.id},
            order=("created_at", True),
        )
        return [Label.from_record(record) for record in records]

    def open(self, project: Project) -> None:
        """Load a project's items in creation order and reset the cursor."""
        items = self._fetch_items(project.id)
        labels = self._fetch_labels(items[0] if items else None)
        self.project = project
        self.items = items
        self.cursor = 0
        self.labels = labels
        self.last_report = None
        logger.info(f"Opened project {project.id} with {len(items)} item(s)")

    def close(self) -> None:
        """Drop the project from scope. Pending ingest results become stale."""
        self.project = None
        self.items = []
        self.cursor = 0
        self.labels = []

    def load_labels(self) -> list[Label]:
        """Reload labels of the item at the cursor."""
        self.labels = self._fetch_labels(self.current_item)
        return self.labels

    def _reload_items(self) -> None:
        items = self._fetch_items(self.project.id)
        cursor = min(self.cursor, max(len(items) - 1, 0))
        labels = self._fetch_labels(items[cursor] if items else None)
        self.items = items
        self.cursor = cursor
        self.labels = labels

    # ==================== Navigation ====================

    def _move_to(self, index: int) -> None:
        if index == self.cursor:
            return
        labels = self._fetch_labels(self.items[index])
        self.cursor = index
        self.labels = labels

    def previous(self) -> int:
        """Step back one item; no-op at the first item."""
        if self.items:
            self._move_to(max(0, self.cursor - 1))
        return self.cursor

    def next(self) -> int:
        """Step forward one item; no-op at the last item."""
        if self.items:
            self._move_to(min(len(self.items) - 1, self.cursor + 1))
        return self.cursor

    def go_to(self, index: int) -> int:
        """Jump to an index, clamped into range."""
        if self.items:
            self._move_to(min(max(index, 0), len(self.items) - 1))
        return self.cursor

    # ==================== Labels ====================

    def add_label(self, text: str) -> Optional[Label]:
        """
        Attach a label to the current item.

        Returns:
            The new Label, or None if text is blank or no item is loaded
        """
        item = self.current_item
        if item is None or not text or not text.strip():
            return None
        record = self.store.insert(EntityKind.LABELS, {
            "dataset_id": item.id,
            "label_text": text.strip(),
        })
        label = Label.from_record(record)
        self.labels = self.labels + [label]
        return label

    def remove_label(self, label_id: str) -> Optional[Label]:
        """
        Delete one of the current item's labels.

        Returns:
            The removed Label, or None if it is not a label of the current item
        """
        label = next((label for label in self.labels if label.id == label_id), None)
        if label is None:
            return None
        self.store.delete(EntityKind.LABELS, label_id)
        self.labels = [existing for existing in self.labels if existing.id != label_id]
        return label

    def all_labels(self) -> list[Label]:
        """Labels of every loaded item, in item then creation order."""
        labels = []
        for item in self.items:
            labels.extend(self._fetch_labels(item))
        return labels

    # ==================== Items ====================

    def delete_current_item(self) -> Optional[DatasetItem]:
        """
        Delete the item at the cursor along with its labels.

        Returns:
            The deleted item, or None if there was nothing to delete
        """
        item = self.current_item
        if item is None:
            return None

        self.store.delete(EntityKind.DATASETS, item.id)

        self.items = [i for i in self.items if i.id != item.id]
        self.labels = []
        if not self.items:
            self.cursor = 0
        elif self.cursor >= len(self.items):
            self.cursor -= 1
        self.labels = self._fetch_labels(self.current_item)
        logger.info(f"Deleted dataset item {item.id} ({item.file_name})")
        return item

    def _in_scope(self, project_id: str) -> bool:
        return self.project is not None and self.project.id == project_id

    def _ingest_one(self, project: Project, file: IngestFile) -> DatasetItem:
        """Upload (image) or read (text) one file and insert its dataset item."""
        file_type = detect_content_type(file)

        if project.kind is ProjectKind.IMAGE:
            try:
                url = self.objects.upload(
                    self.bucket, object_path(project.id, file.file_name), file.data, file_type
                )
            except UploadFailure as e:
                logger.warning(f"Storage upload of {file.file_name} failed, storing inline: {e}")
                url = to_data_url(file.data, file_type)
            content = ImageContent(url)
        else:
            content = TextContent(strip_nul(file.data.decode("utf-8", errors="replace")))

        record = {
            "project_id": project.id,
            "file_name": file.file_name,
            "file_type": file_type,
            **content_to_record(content),
        }
        return DatasetItem.from_record(self.store.insert(EntityKind.DATASETS, record))

    async def ingest(self, files: list[IngestFile]) -> IngestReport:
        """
        Upload files into the open project, one concurrent task per file.

        Failures are recorded per file and never stop the others. Results
        that complete after the session has moved to another project are
        discarded. Afterwards the item list is reloaded from the store.

        Raises:
            ValidationError: if no project is open
        """
        project = self.project
        if project is None:
            raise ValidationError("No project is open")
        report = IngestReport(project_id=project.id)

        async def run(file: IngestFile) -> None:
            try:
                item = await asyncio.to_thread(self._ingest_one, project, file)
                error = None
            except Exception as e:
                logger.error(f"Error inserting dataset item for {file.file_name}: {e}")
                item, error = None, e

            if not self._in_scope(project.id):
                report.discarded += 1
                return
            if error is not None:
                report.errors.append(IngestError(file.file_name, str(error)))
            else:
                report.created.append(item)

        await asyncio.gather(*(run(file) for file in files))

        if self._in_scope(project.id):
            self._reload_items()
            self.last_report = report
        else:
            logger.info(f"Discarded {report.discarded} ingest result(s) for closed project {project.id}")
        return report

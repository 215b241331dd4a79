"""
Core data models for Labelled.

Dataclasses representing the entities stored in the backing store, plus
conversion to and from the flat records the store exchanges.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Union


class ProjectKind(str, Enum):
    """Kind of data a project holds. Fixed at creation."""
    IMAGE = "image"
    TEXT = "text"


class EntityKind(str, Enum):
    """Tables in the entity store."""
    PROFILES = "profiles"
    PROJECTS = "projects"
    DATASETS = "datasets"
    LABELS = "labels"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def timestamp() -> str:
    """Current time as a sortable ISO-8601 string."""
    return utcnow().isoformat(timespec="microseconds")


def parse_timestamp(value) -> datetime:
    """Parse a stored timestamp (ISO string or datetime)."""
    if isinstance(value, datetime):
        return value
    if not value:
        return utcnow()
    return datetime.fromisoformat(value)


@dataclass(frozen=True)
class Identity:
    """The authenticated principal of the current session."""
    id: str
    email: str


@dataclass
class Profile:
    """Mirrors a session identity in the entity store."""
    id: str
    email: str
    full_name: Optional[str]
    created_at: datetime

    @classmethod
    def from_record(cls, record: dict) -> 'Profile':
        return cls(
            id=record['id'],
            email=record['email'],
            full_name=record.get('full_name'),
            created_at=parse_timestamp(record.get('created_at')),
        )


@dataclass
class Project:
    """Represents a labeling project."""
    id: str
    user_id: str
    name: str
    description: str
    kind: ProjectKind
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_record(cls, record: dict) -> 'Project':
        return cls(
            id=record['id'],
            user_id=record['user_id'],
            name=record['name'],
            description=record.get('description') or "",
            kind=ProjectKind(record['type']),
            created_at=parse_timestamp(record.get('created_at')),
            updated_at=parse_timestamp(record.get('updated_at')),
        )


@dataclass(frozen=True)
class ImageContent:
    """Payload reachable at a URL (public object URL or data: URL)."""
    url: str


@dataclass(frozen=True)
class TextContent:
    """Payload stored inline as text."""
    text: str


ContentLocator = Union[ImageContent, TextContent]


@dataclass
class DatasetItem:
    """One unit of data to be labeled."""
    id: str
    project_id: str
    file_name: str
    content: ContentLocator
    file_type: str
    created_at: datetime

    @property
    def file_url(self) -> Optional[str]:
        return self.content.url if isinstance(self.content, ImageContent) else None

    @property
    def text(self) -> Optional[str]:
        return self.content.text if isinstance(self.content, TextContent) else None

    @property
    def payload(self) -> str:
        """Inline text when present, else the URL."""
        if isinstance(self.content, TextContent):
            return self.content.text
        return self.content.url

    @classmethod
    def from_record(cls, record: dict) -> 'DatasetItem':
        url = record.get('file_url')
        text = record.get('content')
        if (url is None) == (text is None):
            raise ValueError(
                f"Dataset item {record.get('id')} must have exactly one of file_url/content"
            )
        content = ImageContent(url) if url is not None else TextContent(text)
        return cls(
            id=record['id'],
            project_id=record['project_id'],
            file_name=record['file_name'],
            content=content,
            file_type=record.get('file_type') or "",
            created_at=parse_timestamp(record.get('created_at')),
        )


def content_to_record(content: ContentLocator) -> dict:
    """Map a content locator onto the store's two payload columns."""
    if isinstance(content, ImageContent):
        return {"file_url": content.url, "content": None}
    return {"file_url": None, "content": content.text}


@dataclass
class Label:
    """A free-text tag attached to one dataset item."""
    id: str
    dataset_id: str
    label_text: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_record(cls, record: dict) -> 'Label':
        return cls(
            id=record['id'],
            dataset_id=record['dataset_id'],
            label_text=record['label_text'],
            created_at=parse_timestamp(record.get('created_at')),
            updated_at=parse_timestamp(record.get('updated_at')),
        )


@dataclass
class Coverage:
    """Derived per-project statistics over its dataset items."""
    file_count: int = 0
    text_item_count: int = 0
    image_item_count: int = 0
    percent: int = 0

"""
Dataset items API endpoints: upload, navigation and deletion
"""

from datetime import datetime
from fastapi import APIRouter, File, HTTPException, UploadFile
from pydantic import BaseModel
from typing import Optional

from core.labeling import IngestFile, LabelingSession
from core.models import DatasetItem
from backend.api.labels import LabelResponse
from backend.api.projects import get_labeling, get_project

router = APIRouter()


class DatasetItemResponse(BaseModel):
    id: str
    project_id: str
    file_name: str
    file_url: Optional[str] = None
    content: Optional[str] = None
    file_type: str
    created_at: datetime

    @classmethod
    def from_item(cls, item: DatasetItem):
        return cls(
            id=item.id,
            project_id=item.project_id,
            file_name=item.file_name,
            file_url=item.file_url,
            content=item.text,
            file_type=item.file_type,
            created_at=item.created_at,
        )


class SessionResponse(BaseModel):
    project_id: str
    cursor: int
    total: int
    current: Optional[DatasetItemResponse] = None
    items: list[DatasetItemResponse]
    labels: list[LabelResponse]

    @classmethod
    def from_session(cls, session: LabelingSession):
        current = session.current_item
        return cls(
            project_id=session.project.id,
            cursor=session.cursor,
            total=len(session.items),
            current=DatasetItemResponse.from_item(current) if current else None,
            items=[DatasetItemResponse.from_item(item) for item in session.items],
            labels=[LabelResponse.from_label(label) for label in session.labels],
        )


class IngestErrorResponse(BaseModel):
    file_name: str
    message: str


class UploadResponse(BaseModel):
    created: int
    discarded: int
    errors: list[IngestErrorResponse]
    session: Optional[SessionResponse] = None


@router.get("", response_model=SessionResponse)
async def get_session():
    """Items of the open project, cursor position and current labels."""
    get_project()
    return SessionResponse.from_session(get_labeling())


@router.post("/upload", response_model=UploadResponse)
async def upload_files(files: list[UploadFile] = File(...)):
    """Upload files into the open project."""
    get_project()
    labeling = get_labeling()

    batch = []
    for upload in files:
        batch.append(IngestFile(
            file_name=upload.filename or "unnamed",
            data=await upload.read(),
            content_type=upload.content_type or "",
        ))

    report = await labeling.ingest(batch)

    in_scope = labeling.project is not None and labeling.project.id == report.project_id
    return UploadResponse(
        created=len(report.created),
        discarded=report.discarded,
        errors=[IngestErrorResponse(file_name=e.file_name, message=e.message) for e in report.errors],
        session=SessionResponse.from_session(labeling) if in_scope else None,
    )


@router.post("/next", response_model=SessionResponse)
async def next_item():
    """Move to the next item."""
    get_project()
    labeling = get_labeling()
    labeling.next()
    return SessionResponse.from_session(labeling)


@router.post("/previous", response_model=SessionResponse)
async def previous_item():
    """Move to the previous item."""
    get_project()
    labeling = get_labeling()
    labeling.previous()
    return SessionResponse.from_session(labeling)


@router.post("/go/{index}", response_model=SessionResponse)
async def go_to_item(index: int):
    """Jump to an item by position."""
    get_project()
    labeling = get_labeling()
    labeling.go_to(index)
    return SessionResponse.from_session(labeling)


@router.delete("/current", response_model=SessionResponse)
async def delete_current_item():
    """Delete the current item and its labels."""
    get_project()
    labeling = get_labeling()
    if labeling.delete_current_item() is None:
        raise HTTPException(status_code=404, detail="No item to delete")
    return SessionResponse.from_session(labeling)

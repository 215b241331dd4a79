"""
Labels API endpoints
"""

from datetime import datetime
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel
from typing import Optional

from core.models import Label
from backend.api.projects import get_labeling, get_project

router = APIRouter()


class LabelResponse(BaseModel):
    id: str
    dataset_id: str
    label_text: str
    created_at: datetime

    @classmethod
    def from_label(cls, label: Label):
        return cls(
            id=label.id,
            dataset_id=label.dataset_id,
            label_text=label.label_text,
            created_at=label.created_at,
        )


class CreateLabelRequest(BaseModel):
    text: str


@router.get("", response_model=list[LabelResponse])
async def list_labels():
    """List labels of the current item."""
    get_project()
    return [LabelResponse.from_label(label) for label in get_labeling().labels]


@router.post("", response_model=Optional[LabelResponse])
async def create_label(request: CreateLabelRequest):
    """Label the current item. Blank text is ignored."""
    get_project()
    label = get_labeling().add_label(request.text)
    if label is None:
        return None
    return LabelResponse.from_label(label)


@router.delete("/{label_id}")
async def delete_label(label_id: str):
    """Delete a label of the current item."""
    get_project()
    if get_labeling().remove_label(label_id) is None:
        raise HTTPException(status_code=404, detail="Label not found")
    return {"status": "deleted", "id": label_id}

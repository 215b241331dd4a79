"""
Export API endpoints
"""

from urllib.parse import quote
from fastapi import APIRouter, HTTPException
from fastapi.responses import Response
from pydantic import BaseModel

from core.export_json import export_filename, export_labeled_json, write_export
from backend.api.projects import get_labeling, get_project

router = APIRouter()


class ExportRequest(BaseModel):
    output_dir: str


class ExportResponse(BaseModel):
    path: str
    items: int


@router.get("/json")
async def export_json():
    """Download the open project's labeled data as JSON."""
    project = get_project()
    labeling = get_labeling()

    document = export_labeled_json(project, labeling.items, labeling.all_labels())
    filename = export_filename(project)
    return Response(
        content=document.encode("utf-8"),
        media_type="application/json",
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(filename, safe='')}"},
    )


@router.post("/json", response_model=ExportResponse)
async def export_json_to_dir(request: ExportRequest):
    """Write the open project's labeled data to a directory."""
    project = get_project()
    labeling = get_labeling()

    try:
        path = write_export(project, labeling.items, labeling.all_labels(), request.output_dir)
    except OSError as e:
        raise HTTPException(status_code=400, detail=f"Invalid output directory: {e}")

    return ExportResponse(path=str(path), items=len(labeling.items))

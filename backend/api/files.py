"""
Object serving routes for uploaded files
"""

from fastapi import APIRouter, HTTPException
from fastapi.responses import FileResponse

from core.errors import UploadFailure
from backend.api.projects import get_objects

router = APIRouter()


@router.get("/{bucket}/{path:path}")
async def get_object(bucket: str, path: str):
    """
    Serve an uploaded object.

    Security: Only paths inside the bucket directory are served.
    """
    objects = get_objects()
    if not hasattr(objects, "resolve"):
        raise HTTPException(status_code=404, detail="Object store does not serve files")

    try:
        target = objects.resolve(bucket, path)
    except UploadFailure:
        raise HTTPException(status_code=404, detail="Object not found")

    if not target.is_file():
        raise HTTPException(status_code=404, detail="Object not found")

    return FileResponse(str(target), filename=target.name)

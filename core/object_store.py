"""
Local-directory object store.

Uploaded objects are written under ``<root_dir>/<bucket>/<path>`` and served
back by the backend's files router.
"""

import os
import logging
from pathlib import Path
from typing import Optional

from core.errors import UploadFailure

logger = logging.getLogger(__name__)


class LocalObjectStore:
    """Object store backed by a directory on disk."""

    def __init__(self, root_dir: str, public_url: str, max_bytes: Optional[int] = None):
        """
        Args:
            root_dir: Directory holding one subdirectory per bucket
            public_url: Base URL the backend is reachable at
            max_bytes: Reject uploads larger than this (None for no limit)
        """
        self.root_dir = Path(root_dir).resolve()
        self.public_url = public_url.rstrip("/")
        self.max_bytes = max_bytes

    def resolve(self, bucket: str, path: str) -> Path:
        """Absolute location of an object, refusing paths outside the bucket."""
        bucket_dir = (self.root_dir / bucket).resolve()
        target = (bucket_dir / path).resolve()
        if bucket_dir != self.root_dir / bucket or bucket_dir not in target.parents:
            raise UploadFailure(f"Invalid object path: {bucket}/{path}")
        return target

    def url_for(self, bucket: str, path: str) -> str:
        return f"{self.public_url}/api/files/{bucket}/{path}"

    def upload(self, bucket: str, path: str, data: bytes, content_type: str = "") -> str:
        """
        Store an object and return its public URL.

        Existing objects are never overwritten.

        Raises:
            UploadFailure: if the path is invalid, taken, too large or unwritable
        """
        if self.max_bytes is not None and len(data) > self.max_bytes:
            raise UploadFailure(
                f"Object {path} is {len(data)} bytes, limit is {self.max_bytes}"
            )

        target = self.resolve(bucket, path)
        try:
            os.makedirs(target.parent, exist_ok=True)
            with open(target, "xb") as f:
                f.write(data)
        except FileExistsError as e:
            raise UploadFailure(f"Object already exists: {bucket}/{path}") from e
        except OSError as e:
            logger.error(f"Failed to write object {target}: {e}")
            raise UploadFailure(str(e)) from e

        logger.debug(f"Stored {len(data)} bytes at {bucket}/{path} ({content_type or 'unknown type'})")
        return self.url_for(bucket, path)

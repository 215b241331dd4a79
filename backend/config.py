"""
Backend configuration
"""

import os
from pathlib import Path

# Base paths
ROOT_DIR = Path(__file__).parent.parent  # labelled/
DATA_DIR = Path(os.getenv("LABELLED_DATA_DIR", str(ROOT_DIR / "data")))

# API settings
API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", "8000"))

# CORS origins (frontend URL)
CORS_ORIGINS = os.getenv(
    "CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173"
).split(",")

# Entity store
DB_PATH = os.getenv("LABELLED_DB_PATH", str(DATA_DIR / "labelled.db"))

# Object store
STORAGE_DIR = os.getenv("LABELLED_STORAGE_DIR", str(DATA_DIR / "storage"))
PUBLIC_URL = os.getenv("LABELLED_PUBLIC_URL", f"http://localhost:{API_PORT}")
BUCKET = os.getenv("LABELLED_BUCKET", "datasets")
MAX_UPLOAD_BYTES = int(os.getenv("LABELLED_MAX_UPLOAD_BYTES", str(50 * 1024 * 1024)))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

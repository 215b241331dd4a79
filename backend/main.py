"""
FastAPI application entry point
"""

import logging
import traceback

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

from backend.config import CORS_ORIGINS, API_HOST, API_PORT, LOG_LEVEL
from backend.api import auth, projects, datasets, labels, export, files
from core.errors import (
    AuthError, IdentityMissing, LabelledError, StoreUnavailable, UploadFailure, ValidationError
)

# Configure logging
logging.basicConfig(
    level=LOG_LEVEL, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

ERROR_STATUS = {
    ValidationError: 400,
    IdentityMissing: 401,
    AuthError: 401,
    UploadFailure: 502,
    StoreUnavailable: 503,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    logger.info("Labelled API starting...")
    yield
    # Shutdown
    logger.info("Labelled API shutting down...")


app = FastAPI(
    title="Labelled API",
    description="Data labeling API for image and text datasets",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(LabelledError)
async def labelled_error_handler(request: Request, exc: LabelledError):
    """Turn domain errors into displayable messages."""
    status_code = ERROR_STATUS.get(type(exc), 400)
    logger.warning(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Log all unhandled exceptions with full traceback."""
    logger.error(f"Unhandled exception on {request.method} {request.url.path}:")
    logger.error(traceback.format_exc())
    return JSONResponse(status_code=500, content={"detail": str(exc)})


# CORS middleware for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Mount routers
app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
app.include_router(projects.router, prefix="/api/projects", tags=["Projects"])
app.include_router(datasets.router, prefix="/api/datasets", tags=["Datasets"])
app.include_router(labels.router, prefix="/api/labels", tags=["Labels"])
app.include_router(export.router, prefix="/api/export", tags=["Export"])
app.include_router(files.router, prefix="/api/files", tags=["Files"])


@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "labelled-api"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=API_HOST, port=API_PORT)

"""Galleria — FastAPI Application.

This module is the single entry point for the web application.  It defines
the :func:`create_app` factory, the default ``app`` instance, all REST API
routes, and the ``main()`` CLI function that launches the uvicorn server.

Architecture
------------
The application is a thin request layer over
:class:`~galleria.core.gallery_service.GalleryService`:

- **Configuration** comes from :class:`~galleria.core.config.GalleriaConfig`.
- **Gallery persistence** uses a single ``gallery.json`` file — no database
  required.
- **Uploaded images** are written to ``public/images/gallery`` and served by
  FastAPI's ``StaticFiles`` at ``/images``, so every record's ``src`` is a
  fetchable URL.
- **Errors** raised by the service are :class:`~galleria.core.errors.GalleryError`
  subclasses; one exception handler turns them into JSON envelopes.

Endpoints
---------
========  ====================================  ==============================
Method    Path                                  Purpose
========  ====================================  ==============================
GET       ``/api/gallery``                      List every image
GET       ``/api/gallery/category/{category}``  List one category (or ``all``)
POST      ``/api/gallery/upload``               Upload an image (multipart)
DELETE    ``/api/gallery/{id}``                 Delete image and record
GET       ``/api/health``                       Liveness probe
GET       ``/images/...``                       Uploaded image files
========  ====================================  ==============================

Usage
-----
CLI (installed entry point)::

    galleria

Direct invocation::

    python -m galleria.api.main
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import APIRouter, Depends, FastAPI, Form, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.datastructures import UploadFile

from galleria import __version__
from galleria.api.models import (
    ErrorResponse,
    HealthResponse,
    ImageListResponse,
    ImageResponse,
    MessageResponse,
)
from galleria.core.blob_store import DiskBlobStore
from galleria.core.config import GalleriaConfig, config
from galleria.core.errors import GalleryError
from galleria.core.gallery_service import GalleryService
from galleria.core.metadata_store import JsonMetadataStore
from galleria.core.records import utc_timestamp

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


def build_gallery_service(cfg: GalleriaConfig) -> GalleryService:
    """Wire the on-disk stores described by *cfg* into a gallery service."""
    metadata = JsonMetadataStore(cfg.gallery_db)
    blobs = DiskBlobStore(
        cfg.gallery_dir,
        url_prefix=cfg.public_url_prefix,
        allowed_mime_types=cfg.allowed_mime_types,
        max_bytes=cfg.max_upload_bytes,
    )
    return GalleryService(metadata, blobs)


def get_gallery(request: Request) -> GalleryService:
    """FastAPI dependency returning the application's gallery service."""
    return request.app.state.gallery


# ---------------------------------------------------------------------------
# Routes.
# ---------------------------------------------------------------------------


@router.get("/gallery", response_model=ImageListResponse)
async def list_images(gallery: GalleryService = Depends(get_gallery)) -> ImageListResponse:
    """Return every gallery image, newest first.

    An unreadable gallery document is reported as an empty gallery.
    """
    return ImageListResponse(data=gallery.list())


@router.get("/gallery/category/{category}", response_model=ImageListResponse)
async def list_images_by_category(
    category: str,
    gallery: GalleryService = Depends(get_gallery),
) -> ImageListResponse:
    """Return the images tagged *category*; ``all`` returns everything.

    Args:
        category: Exact, case-sensitive category name, or ``all``.
    """
    return ImageListResponse(data=gallery.list_by_category(category))


@router.post(
    "/gallery/upload",
    response_model=ImageResponse,
    status_code=status.HTTP_201_CREATED,
)
async def upload_image(
    request: Request,
    alt: str | None = Form(default=None),
    category: str | None = Form(default=None),
    gallery: GalleryService = Depends(get_gallery),
) -> ImageResponse:
    """Upload an image with its description and category.

    Expects ``multipart/form-data`` with an ``image`` file part and ``alt``
    and ``category`` text parts.

    Returns:
        The created record wrapped in an :class:`ImageResponse`.

    Raises:
        MissingFile: No ``image`` file part, or an empty one.
        InvalidFileType: ``image`` is not JPEG, PNG or WEBP.
        PayloadTooLarge: ``image`` is larger than the configured limit.
        MissingFields: ``alt`` or ``category`` is missing.
        PersistFailure: The gallery document could not be written.
    """
    data: bytes | None = None
    original_name: str | None = None
    mime_type: str | None = None

    # A text part named "image" is not a file; treat it like no file at all.
    image = (await request.form()).get("image")
    if isinstance(image, UploadFile):
        # Read one byte past the limit: enough for the size check to fail
        # without buffering an arbitrarily large body.
        limit = request.app.state.config.max_upload_bytes
        try:
            data = await image.read(limit + 1)
        finally:
            await image.close()
        original_name = image.filename
        mime_type = image.content_type

    record = gallery.upload(data, original_name, mime_type, alt, category)
    return ImageResponse(message="Image uploaded successfully", data=record)


@router.delete("/gallery/{image_id}", response_model=MessageResponse)
async def delete_image(
    image_id: str,
    gallery: GalleryService = Depends(get_gallery),
) -> MessageResponse:
    """Delete an image file and its gallery record.

    Raises:
        NotFound: No record has *image_id*.
        PersistFailure: The shortened gallery could not be saved.
    """
    gallery.delete(image_id)
    return MessageResponse(message="Image deleted successfully")


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Liveness probe with the current server time."""
    return HealthResponse(timestamp=utc_timestamp())


# ---------------------------------------------------------------------------
# Exception handlers.
# ---------------------------------------------------------------------------


def _error_response(status_code: int, kind: str, message: str) -> JSONResponse:
    body = ErrorResponse(error=kind, message=message)
    return JSONResponse(status_code=status_code, content=body.model_dump())


async def gallery_error_handler(request: Request, exc: GalleryError) -> JSONResponse:
    """Map a typed gallery error onto its HTTP status and envelope."""
    log = logger.error if exc.status_code >= 500 else logger.info
    log("%s on %s %s: %s", exc.kind, request.method, request.url.path, exc.message)
    return _error_response(exc.status_code, exc.kind, exc.message)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed requests with the standard envelope."""
    logger.info("Validation error on %s %s: %s", request.method, request.url.path, exc.errors())
    return _error_response(
        422,
        "ValidationError",
        "Invalid request",
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler: log the traceback, answer with a generic 500."""
    logger.error(
        "Unhandled exception on %s %s: %s",
        request.method,
        request.url.path,
        exc,
        exc_info=exc,
    )
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "InternalError",
        "Internal server error",
    )


# ---------------------------------------------------------------------------
# Application factory.
# ---------------------------------------------------------------------------


def create_app(cfg: GalleriaConfig | None = None) -> FastAPI:
    """Build a configured Galleria application.

    Args:
        cfg: Configuration to use.  Defaults to the global
            :data:`~galleria.core.config.config`.

    Returns:
        A FastAPI application with routes, static files, CORS and error
        handlers installed, and its gallery service on ``app.state.gallery``.
    """
    cfg = cfg or config

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Create the gallery document on startup and report where data lives."""
        app.state.gallery.metadata.initialize()
        logger.info("Image uploads directory: %s", cfg.gallery_dir)
        logger.info("Database file: %s", cfg.gallery_db)
        yield

    app = FastAPI(
        title="Galleria",
        description="Image gallery API backed by a JSON document and a directory of uploads.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = cfg
    app.state.gallery = build_gallery_service(cfg)

    # Credentials cannot be combined with a wildcard origin.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors_origins,
        allow_credentials="*" not in cfg.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router)

    # Serve uploads read-only at the same path stored in each record's src.
    app.mount(cfg.static_url, StaticFiles(directory=str(cfg.static_dir)), name="images")

    app.add_exception_handler(GalleryError, gallery_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    return app


app = create_app()


# ---------------------------------------------------------------------------
# CLI entry point.
# ---------------------------------------------------------------------------


def main() -> None:
    """Launch the uvicorn ASGI server.

    Reads host, port and log level from :data:`~galleria.core.config.config`
    (``GALLERIA_SERVER_HOST``, ``GALLERIA_SERVER_PORT``,
    ``GALLERIA_LOG_LEVEL``).  Defaults to ``0.0.0.0:5000``.

    This function is registered as the ``galleria`` console script in
    ``pyproject.toml``.
    """
    import uvicorn

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger.info("Gallery API server starting on %s:%s", config.server_host, config.server_port)

    uvicorn.run(
        "galleria.api.main:app",
        host=config.server_host,
        port=config.server_port,
        reload=False,
    )


if __name__ == "__main__":
    main()

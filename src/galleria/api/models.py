"""Pydantic response models for the Galleria API.

These models define the JSON envelopes every endpoint answers with.  FastAPI
uses them for response validation, serialisation, and OpenAPI documentation
generation.  Every envelope carries a ``success`` flag; records are serialised
with their JSON aliases (``createdAt``).

Models
------
ImageListResponse
    ``GET /api/gallery`` and ``GET /api/gallery/category/{category}``.
ImageResponse
    ``POST /api/gallery/upload`` — the created record.
MessageResponse
    ``DELETE /api/gallery/{id}`` — confirmation without payload.
ErrorResponse
    Any failed request.
HealthResponse
    ``GET /api/health``.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from galleria.core.records import ImageRecord


class ImageListResponse(BaseModel):
    """Envelope for a list of gallery records.

    Attributes:
        success: Always ``True``.
        data: Records in gallery order (newest first).
    """

    success: bool = Field(default=True)
    data: list[ImageRecord] = Field(default_factory=list)


class ImageResponse(BaseModel):
    """Envelope for a single created record."""

    success: bool = Field(default=True)
    message: str = Field(..., description="Human-readable outcome.")
    data: ImageRecord


class MessageResponse(BaseModel):
    """Envelope carrying only a confirmation message."""

    success: bool = Field(default=True)
    message: str = Field(..., description="Human-readable outcome.")


class ErrorResponse(BaseModel):
    """Envelope for a failed request.

    Attributes:
        success: Always ``False``.
        error: Machine-readable error kind (e.g. ``"NotFound"``).
        message: Human-readable explanation.
    """

    success: bool = Field(default=False)
    error: str = Field(..., description="Error kind.")
    message: str = Field(..., description="Human-readable explanation.")


class HealthResponse(BaseModel):
    """Liveness probe payload."""

    success: bool = Field(default=True)
    message: str = Field(default="API is running")
    timestamp: str = Field(..., description="Current server time, ISO-8601 UTC.")

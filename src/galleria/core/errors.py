"""Typed errors raised by the gallery stores and service.

Every failure the gallery can report is a subclass of :class:`GalleryError`.
Each class carries a stable ``kind`` string (its class name) and the HTTP
status the request layer answers with, so ``galleria.api.main`` needs a single
exception handler to turn any of them into a JSON envelope.

``ReadFailure`` exists for completeness of the error vocabulary but is never
raised across the service boundary: an unreadable metadata document degrades
to an empty gallery (see :class:`galleria.core.metadata_store.LoadStatus`).
"""

from __future__ import annotations


class GalleryError(Exception):
    """Base class for all gallery failures."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def kind(self) -> str:
        return type(self).__name__


class MissingFile(GalleryError):
    status_code = 400
    default_message = "No image file provided"


class MissingFields(GalleryError):
    status_code = 400
    default_message = "Alt text and category are required"


class InvalidFileType(GalleryError):
    status_code = 400
    default_message = "Invalid file type. Only JPEG, PNG and WEBP are allowed."


class PayloadTooLarge(GalleryError):
    status_code = 400
    default_message = "File too large. Maximum size is 5MB"


class NotFound(GalleryError):
    status_code = 404
    default_message = "Image not found"


class PersistFailure(GalleryError):
    status_code = 500
    default_message = "Failed to save image data"


class ReadFailure(GalleryError):
    """Gallery document could not be read.

    Never raised by the stores or the service.  A read failure is reported as
    :attr:`galleria.core.metadata_store.LoadStatus.CORRUPT` and lists as an
    empty gallery.
    """

    status_code = 500
    default_message = "Failed to read gallery data"

"""On-disk storage for uploaded gallery images.

Blobs are written to a single directory under generated names of the form
``gallery-<epoch-ms>-<random><ext>``.  The timestamp and a random component
keep names unique, and ``<ext>`` is copied from the uploaded filename so the
static file server can guess the content type.

A blob is addressed by its public ``src`` path (``/images/gallery/<name>``).
Only the last path component of a ``src`` is ever used to locate a file, so a
record can never reach outside the blob directory.
"""

from __future__ import annotations

import logging
import random
import time
from abc import ABC, abstractmethod
from collections.abc import Iterable
from pathlib import Path, PurePosixPath

from galleria.core.errors import InvalidFileType, PayloadTooLarge

logger = logging.getLogger(__name__)

FILENAME_PREFIX = "gallery-"
DEFAULT_ALLOWED_MIME_TYPES = ("image/jpeg", "image/jpg", "image/png", "image/webp")
DEFAULT_MAX_UPLOAD_BYTES = 5 * 1024 * 1024


def generate_filename(original_name: str | None) -> str:
    """Return a fresh blob filename keeping the extension of *original_name*.

    >>> generate_filename("cat.JPG").endswith(".JPG")
    True
    """
    unique_suffix = f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}"
    ext = PurePosixPath(original_name or "").suffix
    return f"{FILENAME_PREFIX}{unique_suffix}{ext}"


class BlobStore(ABC):
    """Contract for storing and removing uploaded image bytes."""

    @abstractmethod
    def check(self, mime_type: str | None, size: int) -> None:
        """Raise if an upload of this type and size would be rejected.

        Raises:
            InvalidFileType: If *mime_type* is not allowed.
            PayloadTooLarge: If *size* exceeds the limit.
        """

    @abstractmethod
    def put(self, original_name: str | None, mime_type: str | None, data: bytes) -> str:
        """Store *data* and return the public ``src`` path of the new blob."""

    @abstractmethod
    def delete(self, src: str) -> bool:
        """Remove the blob at *src*. Returns ``False`` if it was already gone."""


class DiskBlobStore(BlobStore):
    """Blob store backed by a local directory.

    Args:
        directory: Directory blobs are written to.
        url_prefix: Public URL path the directory is served under.
        allowed_mime_types: Accepted content types.
        max_bytes: Largest accepted payload in bytes.
    """

    def __init__(
        self,
        directory: Path,
        url_prefix: str = "/images/gallery",
        allowed_mime_types: Iterable[str] = DEFAULT_ALLOWED_MIME_TYPES,
        max_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
    ) -> None:
        self.directory = Path(directory)
        self.url_prefix = "/" + url_prefix.strip("/")
        self.allowed_mime_types = frozenset(allowed_mime_types)
        self.max_bytes = max_bytes

    def initialize(self) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)

    def path_for(self, src: str) -> Path:
        """Map a public ``src`` back to the file it names."""
        return self.directory / PurePosixPath(src).name

    def src_for(self, filename: str) -> str:
        return f"{self.url_prefix}/{filename}"

    def check(self, mime_type: str | None, size: int) -> None:
        if mime_type not in self.allowed_mime_types:
            raise InvalidFileType()
        if size > self.max_bytes:
            raise PayloadTooLarge()

    def put(self, original_name: str | None, mime_type: str | None, data: bytes) -> str:
        """Validate and write an uploaded image.

        Nothing touches the disk unless the type and size checks pass.  If the
        write itself fails the partial file is removed before the error
        propagates.

        Args:
            original_name: Client-supplied filename; only its extension is kept.
            mime_type: Client-supplied content type.
            data: Raw image bytes.

        Returns:
            Public ``src`` path of the stored blob.

        Raises:
            InvalidFileType: If *mime_type* is not in the allow-list.
            PayloadTooLarge: If *data* is larger than ``max_bytes``.
            OSError: If the file cannot be written.
        """
        self.check(mime_type, len(data))
        self.initialize()

        while True:
            filename = generate_filename(original_name)
            filepath = self.directory / filename
            try:
                handle = open(filepath, "xb")
            except FileExistsError:
                continue
            break

        try:
            with handle:
                handle.write(data)
        except OSError:
            filepath.unlink(missing_ok=True)
            raise

        logger.debug("Stored %d bytes as %s", len(data), filepath)
        return self.src_for(filename)

    def delete(self, src: str) -> bool:
        if not PurePosixPath(src).name:
            return False
        filepath = self.path_for(src)
        try:
            filepath.unlink()
        except FileNotFoundError:
            logger.debug("Blob %s already absent", filepath)
            return False
        logger.debug("Removed blob %s", filepath)
        return True

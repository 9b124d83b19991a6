"""Gallery service: list, filter, upload and delete over the two stores.

The service is the only writer of the metadata store and the blob store, and
it keeps them consistent:

- an upload either ends with a stored blob *and* a record pointing at it, or
  with neither (every failure after the blob is written removes the blob)
- a delete removes the blob first and then the record; if the record cannot
  be saved the blob is already gone, which is reported as ``PersistFailure``

Load-modify-save sequences are serialised with a per-service lock, so
overlapping requests in one process cannot lose each other's updates.
Several processes sharing the same files are still last-writer-wins.
"""

from __future__ import annotations

import logging
import threading

from galleria.core.blob_store import BlobStore
from galleria.core.errors import MissingFields, MissingFile, NotFound, PersistFailure
from galleria.core.metadata_store import MetadataStore
from galleria.core.records import ImageRecord

logger = logging.getLogger(__name__)

ALL_CATEGORIES = "all"


class GalleryService:
    """Orchestrates the metadata and blob stores.

    Args:
        metadata: Store holding the gallery index.
        blobs: Store holding the image bytes.
    """

    def __init__(self, metadata: MetadataStore, blobs: BlobStore) -> None:
        self.metadata = metadata
        self.blobs = blobs
        self._lock = threading.Lock()

    def list(self) -> list[ImageRecord]:
        """Return every record, newest first."""
        return self.metadata.load()

    def list_by_category(self, category: str) -> list[ImageRecord]:
        """Return the records tagged *category*, in index order.

        The special value ``"all"`` disables the filter.  Matching is exact
        and case-sensitive.
        """
        records = self.metadata.load()
        if category == ALL_CATEGORIES:
            return records
        return [record for record in records if record.category == category]

    def get(self, image_id: str) -> ImageRecord:
        """Return the record with *image_id*.

        Raises:
            NotFound: If no record has that id.
        """
        record = next((r for r in self.metadata.load() if r.id == image_id), None)
        if record is None:
            raise NotFound()
        return record

    def upload(
        self,
        data: bytes | None,
        original_name: str | None,
        mime_type: str | None,
        alt: str | None,
        category: str | None,
    ) -> ImageRecord:
        """Store an image and prepend a record for it to the gallery.

        Validation order follows the order a multipart upload is processed
        in: the file must be present, its type and size acceptable, and only
        then are the form fields checked.  All checks run before any bytes
        are written.

        Args:
            data: Raw image bytes.
            original_name: Client filename; its extension is kept.
            mime_type: Client content type.
            alt: Image description.
            category: Classification tag.

        Returns:
            The newly created :class:`ImageRecord`.

        Raises:
            MissingFile: No or empty file payload.
            InvalidFileType: Content type outside the allow-list.
            PayloadTooLarge: Payload above the size limit.
            MissingFields: ``alt`` or ``category`` missing or empty.
            PersistFailure: The gallery document could not be saved.
        """
        if not data:
            raise MissingFile()

        self.blobs.check(mime_type, len(data))

        if not alt or not category:
            raise MissingFields()

        src = self.blobs.put(original_name, mime_type, data)
        try:
            record = ImageRecord.create(src=src, alt=alt, category=category)
            with self._lock:
                records = self.metadata.load()
                records.insert(0, record)
                saved = self.metadata.save(records)
        except BaseException:
            self.blobs.delete(src)
            raise

        if not saved:
            self.blobs.delete(src)
            raise PersistFailure("Failed to save image data")

        logger.info("Uploaded image %s (%s) to category %r", record.id, src, category)
        return record

    def delete(self, image_id: str) -> None:
        """Remove a record and its blob.

        Raises:
            NotFound: If no record has *image_id*.
            PersistFailure: If the shortened index could not be saved.  The
                blob has already been removed at that point.
        """
        with self._lock:
            records = self.metadata.load()
            record = next((r for r in records if r.id == image_id), None)
            if record is None:
                raise NotFound()

            if not self.blobs.delete(record.src):
                logger.warning("Blob for image %s was already missing: %s", image_id, record.src)

            remaining = [r for r in records if r.id != image_id]
            if not self.metadata.save(remaining):
                raise PersistFailure("Failed to update database")

        logger.info("Deleted image %s", image_id)

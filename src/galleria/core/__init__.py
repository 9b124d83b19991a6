"""Core gallery components: configuration, stores, and the gallery service.

Modules
-------
config
    Pydantic Settings configuration loaded from ``GALLERIA_*`` variables.
errors
    Typed gallery error hierarchy.
records
    The ``ImageRecord`` model and identifier helpers.
metadata_store
    JSON document persistence for the gallery index.
blob_store
    On-disk storage for uploaded image bytes.
gallery_service
    Orchestration of both stores into list, filter, upload and delete.
"""

from galleria.core.blob_store import BlobStore, DiskBlobStore
from galleria.core.errors import GalleryError
from galleria.core.gallery_service import GalleryService
from galleria.core.metadata_store import (
    InMemoryMetadataStore,
    JsonMetadataStore,
    LoadResult,
    LoadStatus,
    MetadataStore,
)
from galleria.core.records import ImageRecord

__all__ = [
    "BlobStore",
    "DiskBlobStore",
    "GalleryError",
    "GalleryService",
    "ImageRecord",
    "InMemoryMetadataStore",
    "JsonMetadataStore",
    "LoadResult",
    "LoadStatus",
    "MetadataStore",
]

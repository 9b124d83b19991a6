"""Shared pytest fixtures for Galleria tests."""

import shutil
import tempfile
from pathlib import Path
from typing import Generator

import pytest
from fastapi.testclient import TestClient

from galleria.api.main import create_app
from galleria.core.blob_store import DiskBlobStore
from galleria.core.config import GalleriaConfig
from galleria.core.gallery_service import GalleryService
from galleria.core.metadata_store import InMemoryMetadataStore, JsonMetadataStore
from galleria.core.records import ImageRecord

JPEG_BYTES = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01" + b"\x00" * 64 + b"\xff\xd9"
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to temporary directory

    Cleanup:
        Directory is removed after test completes
    """
    temp_path = Path(tempfile.mkdtemp())
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def test_config(temp_dir: Path) -> GalleriaConfig:
    """Create a test configuration rooted in a temporary directory.

    Args:
        temp_dir: Temporary directory from fixture

    Returns:
        GalleriaConfig instance for testing
    """
    return GalleriaConfig(
        data_dir=str(temp_dir / "data"),
        public_dir=str(temp_dir / "public"),
        _env_file=None,
    )


@pytest.fixture
def gallery_dir(test_config: GalleriaConfig) -> Path:
    """Directory the test configuration writes blobs to."""
    return test_config.gallery_dir


@pytest.fixture
def blob_store(test_config: GalleriaConfig) -> DiskBlobStore:
    """Disk blob store matching the test configuration."""
    return DiskBlobStore(
        test_config.gallery_dir,
        url_prefix=test_config.public_url_prefix,
        max_bytes=test_config.max_upload_bytes,
    )


@pytest.fixture
def json_store(test_config: GalleriaConfig) -> JsonMetadataStore:
    """JSON metadata store at the test configuration's document path."""
    return JsonMetadataStore(test_config.gallery_db)


@pytest.fixture
def memory_store() -> InMemoryMetadataStore:
    """Empty in-memory metadata store."""
    return InMemoryMetadataStore()


@pytest.fixture
def service(memory_store: InMemoryMetadataStore, blob_store: DiskBlobStore) -> GalleryService:
    """Gallery service over an in-memory index and a temporary blob directory."""
    return GalleryService(memory_store, blob_store)


@pytest.fixture
def test_client(test_config: GalleriaConfig) -> Generator[TestClient, None, None]:
    """FastAPI TestClient for an app built from the test configuration.

    Runs the application lifespan so the gallery document is initialised.
    """
    app = create_app(test_config)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def jpeg_bytes() -> bytes:
    """Small payload that passes for a JPEG upload."""
    return JPEG_BYTES


@pytest.fixture
def png_bytes() -> bytes:
    """Small payload that passes for a PNG upload."""
    return PNG_BYTES


@pytest.fixture
def sample_records() -> list[ImageRecord]:
    """Five records, newest first, alternating between two categories."""
    categories = ["cats", "dogs", "cats", "dogs", "cats"]
    return [
        ImageRecord(
            id=f"sample-{i}",
            src=f"/images/gallery/gallery-170000000000{i}-{i}.jpg",
            alt=f"Sample image {i}",
            category=category,
            created_at=f"2026-01-0{5 - i}T12:00:00.000Z",
        )
        for i, category in enumerate(categories)
    ]


@pytest.fixture
def sample_gallery(
    test_config: GalleriaConfig,
    sample_records: list[ImageRecord],
) -> list[ImageRecord]:
    """Persist the sample records and create a blob file for each.

    Returns:
        The persisted records in gallery order.
    """
    store = JsonMetadataStore(test_config.gallery_db)
    assert store.save(sample_records)
    for record in sample_records:
        (test_config.gallery_dir / Path(record.src).name).write_bytes(JPEG_BYTES)
    return sample_records

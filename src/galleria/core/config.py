"""Configuration management for Galleria.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the GALLERIA_ prefix,
allowing easy customization without code changes.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Environment variables (GALLERIA_* prefix)
2. .env file in the project root
3. Default values defined in GalleriaConfig

Example .env file:
    GALLERIA_DATA_DIR=/var/lib/galleria/data
    GALLERIA_PUBLIC_DIR=/var/lib/galleria/public
    GALLERIA_SERVER_PORT=5000
    GALLERIA_CORS_ORIGINS=["http://localhost:3000"]

Global Configuration Instance
------------------------------
A global `config` instance is created automatically at module import time and
is what the default FastAPI application is built from.  Tests and embedders
build their own ``GalleriaConfig`` and pass it to
:func:`galleria.api.main.create_app`.

Directory Layout
----------------
With the defaults the service uses::

    data/gallery.json            metadata document (JSON array)
    public/images/gallery/       uploaded blobs
    public/images/               served read-only at /images

The ``src`` stored on every record is ``/images/gallery/<filename>``, which is
exactly the URL the static mount serves the file under.
"""

from pathlib import Path, PurePosixPath
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from galleria.core.blob_store import DEFAULT_ALLOWED_MIME_TYPES, DEFAULT_MAX_UPLOAD_BYTES


class GalleriaConfig(BaseSettings):
    """Main configuration for Galleria.

    Values are loaded from environment variables with the GALLERIA_ prefix,
    with fallback to defaults defined here.  The data and blob directories are
    created if they don't exist.

    Attributes
    ----------
    Storage:
        data_dir : Path
            Directory holding the ``gallery.json`` metadata document
        public_dir : Path
            Root of the publicly served tree
        gallery_subdir : str
            Blob directory relative to ``public_dir``, also the URL path
            below the site root (``images/gallery``)

    Upload Limits:
        max_upload_bytes : int
            Largest accepted upload in bytes (5 MiB)
        allowed_mime_types : list[str]
            Accepted upload content types

    Server:
        server_host : str
            Bind address for uvicorn
        server_port : int
            Port for uvicorn (1024-65535)
        cors_origins : list[str]
            Origins allowed by the CORS middleware
        log_level : str
            Root logging level used by the CLI entry point
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="GALLERIA_",
        case_sensitive=False,
    )

    # Storage
    data_dir: Path = Field(
        default=Path("data"),
        description="Directory holding the gallery metadata document",
    )
    public_dir: Path = Field(
        default=Path("public"),
        description="Root directory of publicly served files",
    )
    gallery_subdir: str = Field(
        default="images/gallery",
        description="Blob directory relative to public_dir (and URL path)",
    )

    # Upload limits
    max_upload_bytes: int = Field(
        default=DEFAULT_MAX_UPLOAD_BYTES,
        description="Maximum accepted upload size in bytes",
        gt=0,
    )
    allowed_mime_types: list[str] = Field(
        default_factory=lambda: list(DEFAULT_ALLOWED_MIME_TYPES),
        description="Accepted upload content types",
    )

    # Server
    server_host: str = Field(
        default="0.0.0.0",
        description="Server bind address",
    )
    server_port: int = Field(
        default=5000,
        description="Server port",
        ge=1024,
        le=65535,
    )
    cors_origins: list[str] = Field(
        default_factory=lambda: ["*"],
        description="Origins allowed to call the API from a browser",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level for the CLI entry point",
    )

    def __init__(self, **kwargs):
        """Initialize configuration and create required directories.

        Args:
            **kwargs: Configuration overrides (typically from environment variables)
        """
        super().__init__(**kwargs)

        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.gallery_dir.mkdir(parents=True, exist_ok=True)

    @property
    def gallery_db(self) -> Path:
        """Path to the ``gallery.json`` metadata document."""
        return self.data_dir / "gallery.json"

    @property
    def gallery_dir(self) -> Path:
        """Directory that uploaded blobs are written to."""
        return self.public_dir / self.gallery_subdir

    @property
    def static_dir(self) -> Path:
        """Directory served at ``/<first segment of gallery_subdir>``."""
        return self.public_dir / PurePosixPath(self.gallery_subdir).parts[0]

    @property
    def static_url(self) -> str:
        """URL path the static directory is mounted at."""
        return "/" + PurePosixPath(self.gallery_subdir).parts[0]

    @property
    def public_url_prefix(self) -> str:
        """URL path prefix stored in every record's ``src``."""
        return "/" + PurePosixPath(self.gallery_subdir).as_posix().strip("/")


# Global configuration instance
config = GalleriaConfig()

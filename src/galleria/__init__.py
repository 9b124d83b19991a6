"""Galleria - file-backed image gallery API."""

__version__ = "1.0.0"

from galleria.core.config import GalleriaConfig, config

__all__ = [
    "GalleriaConfig",
    "config",
]

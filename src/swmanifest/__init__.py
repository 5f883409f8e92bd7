"""Precache manifest generation and injection into service worker scripts."""

from .entries import ManifestEntry, get_file_manifest_entries
from .errors import (
    ERRORS,
    AcquisitionError,
    DirectoryCreationError,
    InvalidArgumentError,
    ManifestError,
    TransformError,
)
from .prepend import prepend_manifest, prepend_manifest_async

__all__ = [
    "ERRORS",
    "AcquisitionError",
    "DirectoryCreationError",
    "InvalidArgumentError",
    "ManifestEntry",
    "ManifestError",
    "TransformError",
    "get_file_manifest_entries",
    "prepend_manifest",
    "prepend_manifest_async",
]

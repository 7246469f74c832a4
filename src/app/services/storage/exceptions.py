"""Object storage exceptions."""

from __future__ import annotations


class StorageError(Exception):
    """Base exception for object storage errors."""


class StorageNotConfiguredError(StorageError):
    """No bucket is configured."""


class StorageUploadError(StorageError):
    """S3 rejected an upload or a presign request."""


class InvalidImageDataError(StorageError):
    """Base64 image data could not be decoded."""

"""Object storage for uploaded images."""

from app.services.storage.service import StorageService


__all__ = ["StorageService"]

"""Image proxy exceptions."""

from __future__ import annotations


class ImageProxyError(Exception):
    """Base exception for the recipe image proxy."""


class InvalidRecipeIdError(ImageProxyError):
    """The recipe id is not a positive integer."""


class ImageNotFoundError(ImageProxyError):
    """The recipe does not exist or has no image URL."""


class ImageFetchError(ImageProxyError):
    """The upstream image could not be fetched."""

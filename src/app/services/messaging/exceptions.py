"""Messaging exceptions."""

from __future__ import annotations


class MessagingError(Exception):
    """Base exception for messaging operations."""


class ConversationNotFoundError(MessagingError):
    """The conversation does not exist or the caller is not part of it."""


class InvalidRecipientError(MessagingError):
    """The message has no target, or targets the sender."""

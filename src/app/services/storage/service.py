"""S3-compatible storage for user-uploaded images.

boto3 is synchronous, so each S3 call runs in a worker thread.
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import re
import uuid
from typing import TYPE_CHECKING, Any

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from app.core.config import get_settings
from app.observability.logging import get_logger
from app.services.storage.exceptions import (
    InvalidImageDataError,
    StorageNotConfiguredError,
    StorageUploadError,
)


if TYPE_CHECKING:
    from app.core.config import Settings


logger = get_logger(__name__)

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def sanitize_file_name(file_name: str) -> str:
    """Keep letters, digits, dot, dash and underscore; never return empty."""
    cleaned = _UNSAFE_KEY_CHARS.sub("_", file_name.strip())[:100]
    return cleaned or "upload"


def decode_image_data(data: str) -> bytes:
    """Decode base64 image data, accepting a ``data:image/...;base64,`` prefix."""
    if data.startswith("data:") and "," in data:
        data = data.split(",", 1)[1]
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidImageDataError("Image data is not valid base64") from e


class StorageService:
    """Presigned uploads and direct uploads to one bucket."""

    def __init__(self, settings: Settings | None = None, client: Any = None) -> None:
        self._settings = settings or get_settings()
        self._client = client

    @property
    def bucket(self) -> str | None:
        return self._settings.storage.bucket

    @property
    def is_configured(self) -> bool:
        return bool(self.bucket)

    def _get_client(self) -> Any:
        if not self.is_configured:
            raise StorageNotConfiguredError("S3 bucket is not configured")
        if self._client is None:
            storage = self._settings.storage
            self._client = boto3.client(
                "s3",
                region_name=storage.region,
                endpoint_url=storage.endpoint_url,
                aws_access_key_id=self._settings.AWS_ACCESS_KEY_ID,
                aws_secret_access_key=self._settings.AWS_SECRET_ACCESS_KEY,
                config=Config(signature_version="s3v4"),
            )
        return self._client

    def new_key(self, file_name: str) -> str:
        prefix = self._settings.storage.upload_prefix.strip("/")
        return f"{prefix}/{uuid.uuid4()}-{sanitize_file_name(file_name)}"

    def public_url(self, key: str) -> str:
        storage = self._settings.storage
        if storage.public_base_url:
            return f"{storage.public_base_url.rstrip('/')}/{key}"
        if storage.region == "us-east-1":
            return f"https://{self.bucket}.s3.amazonaws.com/{key}"
        return f"https://{self.bucket}.s3.{storage.region}.amazonaws.com/{key}"

    async def create_upload_url(
        self, file_name: str, content_type: str = "image/jpeg"
    ) -> tuple[str, str]:
        """Return ``(upload_url, public_url)`` for a direct client PUT."""
        client = self._get_client()
        key = self.new_key(file_name)
        try:
            upload_url = await asyncio.to_thread(
                client.generate_presigned_url,
                "put_object",
                Params={"Bucket": self.bucket, "Key": key, "ContentType": content_type},
                ExpiresIn=self._settings.storage.presign_expires,
            )
        except (BotoCoreError, ClientError) as e:
            logger.warning("Failed to presign upload", error=str(e))
            raise StorageUploadError(f"Could not create upload URL: {e}") from e
        return upload_url, self.public_url(key)

    async def upload_image(
        self, data: str, file_name: str, content_type: str = "image/jpeg"
    ) -> str:
        """Store base64 image data and return a presigned GET URL for it.

        The presigned URL works for private buckets too, which lets the LLM
        fetch the image for recognition.
        """
        body = decode_image_data(data)
        client = self._get_client()
        key = self.new_key(file_name)
        try:
            await asyncio.to_thread(
                client.put_object,
                Bucket=self.bucket,
                Key=key,
                Body=body,
                ContentType=content_type,
            )
            url: str = await asyncio.to_thread(
                client.generate_presigned_url,
                "get_object",
                Params={"Bucket": self.bucket, "Key": key},
                ExpiresIn=self._settings.storage.presign_expires,
            )
        except (BotoCoreError, ClientError) as e:
            logger.warning("S3 upload failed", key=key, error=str(e))
            raise StorageUploadError(f"S3 upload failed: {e}") from e
        logger.info("Image uploaded", key=key, size=len(body))
        return url

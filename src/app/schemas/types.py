"""Reusable annotated field types."""

from __future__ import annotations

from typing import Annotated
from urllib.parse import urlparse

from pydantic import AfterValidator, Field


def _check_http_url(value: str) -> str:
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        msg = "must be an http(s) URL"
        raise ValueError(msg)
    return value


HttpUrlStr = Annotated[str, Field(max_length=500), AfterValidator(_check_http_url)]
LongHttpUrlStr = Annotated[
    str, Field(max_length=1000), AfterValidator(_check_http_url)
]

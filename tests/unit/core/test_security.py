"""Unit tests for input hardening helpers."""

from __future__ import annotations

import pytest

from app.core.security import is_valid_external_url, sanitize_string, secure_compare


pytestmark = pytest.mark.unit


class TestSanitizeString:
    def test_strips_control_characters(self) -> None:
        assert sanitize_string("  Soup\x00\x07 of the\tday\n ") == "Soup of the\tday"

    def test_truncates(self) -> None:
        assert sanitize_string("abcdef", max_length=3) == "abc"


class TestIsValidExternalUrl:
    """Tests for outbound URL checks."""

    @pytest.mark.parametrize(
        "url",
        [
            "https://www.allrecipes.com/recipe/1/soup",
            "http://93.184.216.34/recipe",
        ],
    )
    def test_public_urls(self, url: str) -> None:
        assert is_valid_external_url(url) is True

    @pytest.mark.parametrize(
        "url",
        [
            "ftp://example.com/file",
            "file:///etc/passwd",
            "http://localhost:8000/admin",
            "http://api.localhost/",
            "http://127.0.0.1/",
            "http://10.0.0.5/",
            "http://192.168.1.1/",
            "http://169.254.169.254/latest/meta-data",
            "http://[::1]/",
            "http://0.0.0.0/",
            "https://",
        ],
    )
    def test_rejected_urls(self, url: str) -> None:
        assert is_valid_external_url(url) is False


class TestSecureCompare:
    def test_equal(self) -> None:
        assert secure_compare("Bearer abc", "Bearer abc") is True

    def test_different(self) -> None:
        assert secure_compare("Bearer abc", "Bearer abd") is False

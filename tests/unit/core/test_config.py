"""Unit tests for application configuration.

Tests cover:
- List parsing and YAML merging
- Settings loaded from base and per-environment YAML
- Environment variable overrides
- Computed URLs
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from app.core.config import Settings, get_settings
from app.core.config.settings import parse_list
from app.core.config.yaml_source import deep_merge, load_yaml_dir


if TYPE_CHECKING:
    from pathlib import Path


pytestmark = pytest.mark.unit


class TestParseList:
    """Tests for parse_list helper function."""

    def test_comma_separated(self) -> None:
        result = parse_list("https://a.example.com , ,https://b.example.com ")
        assert result == ["https://a.example.com", "https://b.example.com"]

    def test_passes_through_list(self) -> None:
        assert parse_list(["x"]) == ["x"]


class TestYamlSource:
    def test_deep_merge(self) -> None:
        base = {"llm": {"model": "a", "cache": {"enabled": True, "ttl": 60}}}
        override = {"llm": {"cache": {"enabled": False}}}

        merged = deep_merge(base, override)

        assert merged == {"llm": {"model": "a", "cache": {"enabled": False, "ttl": 60}}}
        assert base["llm"]["cache"]["enabled"] is True

    def test_load_yaml_dir_in_name_order(self, tmp_path: Path) -> None:
        (tmp_path / "a.yaml").write_text("server:\n  port: 1\n")
        (tmp_path / "b.yaml").write_text("server:\n  port: 2\n")
        (tmp_path / "empty.yaml").write_text("")

        assert load_yaml_dir(tmp_path) == {"server": {"port": 2}}

    def test_missing_dir(self, tmp_path: Path) -> None:
        assert load_yaml_dir(tmp_path / "nope") == {}


class TestSettings:
    """Tests for Settings loading."""

    def test_base_yaml_values(self) -> None:
        settings = Settings()

        assert settings.app.name == "Kitchen Companion Service"
        assert settings.api.v1_prefix == "/api/v1"
        assert settings.auth.session.cookie_name == "app_session_id"
        assert settings.push.url == "https://exp.host/--/api/v2/push/send"

    def test_test_environment_overrides(self) -> None:
        settings = get_settings()

        assert settings.is_testing is True
        assert settings.logging.level == "WARNING"
        assert settings.llm.cache.enabled is False
        assert settings.observability.metrics.enabled is False

    def test_env_beats_yaml(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LLM__MODEL", "gpt-4o")
        monkeypatch.setenv("STRIPE__PRICES__LIFETIME", "price_life")

        settings = Settings()

        assert settings.llm.model == "gpt-4o"
        assert settings.lifetime_price_ids == {"price_life"}

    def test_extra_cors_origins(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("EXTRA_CORS_ORIGINS", "https://app.example.com")

        settings = Settings()

        assert "https://app.example.com" in settings.cors_origins
        assert "http://localhost:3000" in settings.cors_origins

    @pytest.mark.parametrize(
        ("env", "development", "production", "non_production"),
        [
            ("development", True, False, True),
            ("production", False, True, False),
            ("test", False, False, True),
        ],
    )
    def test_environment_flags(
        self,
        monkeypatch: pytest.MonkeyPatch,
        env: str,
        development: bool,
        production: bool,
        non_production: bool,
    ) -> None:
        monkeypatch.setenv("APP_ENV", env)

        settings = Settings()

        assert settings.is_development is development
        assert settings.is_production is production
        assert settings.is_non_production is non_production

    def test_get_settings_is_cached(self) -> None:
        assert get_settings() is get_settings()


class TestComputedUrls:
    """Tests for derived connection URLs."""

    def test_oauth_urls(self) -> None:
        settings = Settings(auth={"oauth": {"server_url": "https://auth.example.com/"}})

        assert settings.oauth_token_url == (
            "https://auth.example.com/webdev.v1.WebDevAuthPublicService/ExchangeToken"
        )
        assert settings.oauth_userinfo_url is not None
        assert settings.oauth_userinfo_url.endswith("/GetUserInfo")

    def test_oauth_unconfigured(self) -> None:
        settings = Settings(auth={"oauth": {"server_url": None}})

        assert settings.oauth_token_url is None

    @pytest.mark.parametrize(
        ("user", "password", "expected"),
        [
            (None, "", "redis://cache:6379/0"),
            (None, "pw", "redis://:pw@cache:6379/0"),
            ("svc", "pw", "redis://svc:pw@cache:6379/0"),
            ("svc", "", "redis://svc@cache:6379/0"),
        ],
    )
    def test_redis_url(self, user: str | None, password: str, expected: str) -> None:
        settings = Settings(
            redis={"host": "cache", "port": 6379, "user": user, "cache_db": 0},
            REDIS_PASSWORD=password,
        )

        assert settings.redis_cache_url == expected

    def test_database_url_omits_password(self) -> None:
        settings = Settings(
            database={"host": "db", "port": 5432, "name": "kitchen", "user": "app"},
            DATABASE_PASSWORD="secret",
        )

        assert settings.database_url == "postgresql://app@db:5432/kitchen"

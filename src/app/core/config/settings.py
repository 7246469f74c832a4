"""Application configuration using Pydantic Settings with YAML support.

Configuration is split by domain into nested sections loaded from
``config/base/*.yaml`` and overridden per environment from
``config/environments/{APP_ENV}/*.yaml``. Secrets are read from the
environment (or ``.env``) only and are declared as UPPERCASE fields.
"""

from __future__ import annotations

from functools import lru_cache
from typing import TYPE_CHECKING, Annotated

from pydantic import BaseModel, BeforeValidator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .yaml_source import MultiYamlConfigSettingsSource


if TYPE_CHECKING:
    from pydantic_settings import PydanticBaseSettingsSource


def parse_list(v: str | list[str]) -> list[str]:
    """Parse comma-separated string or list into list of strings."""
    if isinstance(v, str):
        return [x.strip() for x in v.split(",") if x.strip()]
    return v


# =============================================================================
# Nested Configuration Models (from YAML)
# =============================================================================


class AppSettings(BaseModel):
    """Application identity settings."""

    name: str = "Kitchen Companion Service"
    version: str = "0.1.0"
    debug: bool = False
    public_url: str = "http://localhost:3000"


class ServerSettings(BaseModel):
    """Server configuration settings."""

    host: str = "127.0.0.1"
    port: int = 8000


class ApiSettings(BaseModel):
    """API configuration settings."""

    v1_prefix: str = "/api/v1"
    cors_origins: list[str] = []


class SessionSettings(BaseModel):
    """Session token and cookie settings."""

    cookie_name: str = "app_session_id"
    algorithm: str = "HS256"
    expire_days: int = 365


class OAuthSettings(BaseModel):
    """External OAuth server settings."""

    server_url: str | None = None
    timeout: float = 10.0


class AuthSettings(BaseModel):
    """Authentication configuration settings."""

    app_id: str = "kitchen-companion"
    owner_open_id: str | None = None
    anonymous_fallback: bool = True
    anonymous_open_id: str = "anonymous"
    session: SessionSettings = SessionSettings()
    oauth: OAuthSettings = OAuthSettings()


class RedisSettings(BaseModel):
    """Redis configuration settings."""

    host: str = "localhost"
    port: int = 6379
    user: str | None = None  # Redis ACL username (Redis 6.0+)
    cache_db: int = 0
    queue_db: int = 1
    rate_limit_db: int = 2


class DatabaseSettings(BaseModel):
    """PostgreSQL database configuration settings."""

    host: str = "localhost"
    port: int = 5432
    name: str = "kitchen"
    user: str | None = None
    min_pool_size: int = 2
    max_pool_size: int = 10
    command_timeout: float = 30.0  # seconds
    ssl: bool = False
    apply_schema: bool = False


class RateLimitingSettings(BaseModel):
    """Rate limiting configuration."""

    default: str = "100/minute"
    auth: str = "5/minute"
    llm: str = "10/minute"


class LoggingSettings(BaseModel):
    """Logging configuration settings."""

    level: str = "INFO"
    format: str = "json"


class TracingSettings(BaseModel):
    """Tracing configuration settings."""

    enabled: bool = False
    otlp_endpoint: str | None = None


class MetricsSettings(BaseModel):
    """Metrics configuration settings."""

    enabled: bool = True


class ObservabilitySettings(BaseModel):
    """Observability configuration settings."""

    tracing: TracingSettings = TracingSettings()
    metrics: MetricsSettings = MetricsSettings()


class LLMCacheSettings(BaseModel):
    """LLM response caching configuration."""

    enabled: bool = True
    ttl: int = 3600


class LLMSettings(BaseModel):
    """OpenAI-compatible LLM provider configuration."""

    enabled: bool = True
    url: str = "https://api.openai.com/v1"
    model: str = "gpt-4o-mini"
    vision_model: str = "gpt-4o-mini"
    timeout: float = 60.0
    max_retries: int = 2
    requests_per_minute: float = 30.0
    cache: LLMCacheSettings = LLMCacheSettings()


class ScrapingSettings(BaseModel):
    """Recipe URL scraping configuration."""

    fetch_timeout: float = 30.0
    cache_enabled: bool = True
    cache_ttl: int = 86400  # 24 hours
    llm_max_html_chars: int = 30000


class MealDBSettings(BaseModel):
    """TheMealDB public API configuration."""

    base_url: str = "https://www.themealdb.com/api/json/v1/1"
    timeout: float = 10.0


class PushSettings(BaseModel):
    """Expo push API configuration."""

    url: str = "https://exp.host/--/api/v2/push/send"
    timeout: float = 10.0


class StorageSettings(BaseModel):
    """S3-compatible object storage configuration."""

    region: str = "us-east-1"
    bucket: str | None = None
    endpoint_url: str | None = None
    public_base_url: str | None = None
    upload_prefix: str = "uploads"
    presign_expires: int = 3600


class StripePriceSettings(BaseModel):
    """Stripe price identifiers per plan."""

    premium_monthly: str | None = None
    premium_yearly: str | None = None
    family_monthly: str | None = None
    family_yearly: str | None = None
    lifetime: str | None = None


class StripeSettings(BaseModel):
    """Stripe billing configuration."""

    api_version: str | None = None
    default_price_id: str | None = None
    prices: StripePriceSettings = StripePriceSettings()


class CookNudgeSettings(BaseModel):
    """Cook-nudge reminder configuration."""

    min_age_days: int = 3
    hour: int = 12
    minute: int = 0


class CronSettings(BaseModel):
    """Scheduled job configuration."""

    cook_nudge: CookNudgeSettings = CookNudgeSettings()


class ArqJobIdsSettings(BaseModel):
    """Fixed job IDs used for ARQ job deduplication."""

    cook_nudge: str = "cook_nudge"


class ArqSettings(BaseModel):
    """ARQ background worker configuration."""

    job_ids: ArqJobIdsSettings = ArqJobIdsSettings()
    queue_name: str = "kitchen:queue:jobs"
    health_check_key: str = "kitchen:queue:health-check"


# =============================================================================
# Main Settings Class
# =============================================================================


class Settings(BaseSettings):
    """Application settings with YAML + environment variable support.

    Priority (highest to lowest): init arguments, environment variables,
    ``.env``, environment-specific YAML, base YAML, code defaults.

    Any setting can be overridden with the nested delimiter ``__``, for
    example ``STRIPE__PRICES__LIFETIME=price_123``.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
        case_sensitive=False,
        env_nested_delimiter="__",
    )

    APP_ENV: str = "development"

    app: AppSettings = AppSettings()
    server: ServerSettings = ServerSettings()
    api: ApiSettings = ApiSettings()
    auth: AuthSettings = AuthSettings()
    redis: RedisSettings = RedisSettings()
    database: DatabaseSettings = DatabaseSettings()
    rate_limiting: RateLimitingSettings = RateLimitingSettings()
    logging: LoggingSettings = LoggingSettings()
    observability: ObservabilitySettings = ObservabilitySettings()
    llm: LLMSettings = LLMSettings()
    scraping: ScrapingSettings = ScrapingSettings()
    mealdb: MealDBSettings = MealDBSettings()
    push: PushSettings = PushSettings()
    storage: StorageSettings = StorageSettings()
    stripe: StripeSettings = StripeSettings()
    cron: CronSettings = CronSettings()
    arq: ArqSettings = ArqSettings()

    # =========================================================================
    # Secrets (from environment / .env only - never in YAML)
    # =========================================================================
    JWT_SECRET_KEY: str = ""
    REDIS_PASSWORD: str = ""
    DATABASE_PASSWORD: str = ""
    LLM_API_KEY: str = ""
    STRIPE_SECRET_KEY: str = ""
    STRIPE_WEBHOOK_SECRET: str = ""
    AWS_ACCESS_KEY_ID: str | None = None
    AWS_SECRET_ACCESS_KEY: str | None = None
    CRON_SECRET: str = ""

    # Extra origins allowed to call the API (comma-separated in .env)
    EXTRA_CORS_ORIGINS: Annotated[list[str], BeforeValidator(parse_list)] = []

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings loading order."""
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            MultiYamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )

    # =========================================================================
    # Computed Fields
    # =========================================================================

    @property
    def cors_origins(self) -> list[str]:
        """All allowed CORS origins."""
        return [*self.api.cors_origins, *self.EXTRA_CORS_ORIGINS]

    @property
    def oauth_token_url(self) -> str | None:
        """OAuth code exchange endpoint."""
        if self.auth.oauth.server_url:
            return (
                f"{self.auth.oauth.server_url.rstrip('/')}"
                "/webdev.v1.WebDevAuthPublicService/ExchangeToken"
            )
        return None

    @property
    def oauth_userinfo_url(self) -> str | None:
        """OAuth user info endpoint."""
        if self.auth.oauth.server_url:
            return (
                f"{self.auth.oauth.server_url.rstrip('/')}"
                "/webdev.v1.WebDevAuthPublicService/GetUserInfo"
            )
        return None

    @property
    def lifetime_price_ids(self) -> set[str]:
        """Price IDs billed as one-time payments."""
        return {p for p in (self.stripe.prices.lifetime,) if p}

    def _build_redis_url(self, db: int) -> str:
        """Build Redis connection URL with optional authentication.

        URL format: redis://[user:password@]host:port/db
        """
        auth_part = ""
        if self.redis.user and self.REDIS_PASSWORD:
            auth_part = f"{self.redis.user}:{self.REDIS_PASSWORD}@"
        elif self.REDIS_PASSWORD:
            auth_part = f":{self.REDIS_PASSWORD}@"
        elif self.redis.user:
            auth_part = f"{self.redis.user}@"

        return f"redis://{auth_part}{self.redis.host}:{self.redis.port}/{db}"

    @property
    def redis_cache_url(self) -> str:
        """Build Redis cache connection URL."""
        return self._build_redis_url(self.redis.cache_db)

    @property
    def redis_queue_url(self) -> str:
        """Build Redis queue connection URL for ARQ."""
        return self._build_redis_url(self.redis.queue_db)

    @property
    def redis_rate_limit_url(self) -> str:
        """Build Redis rate limit connection URL."""
        return self._build_redis_url(self.redis.rate_limit_db)

    @property
    def database_url(self) -> str:
        """Build PostgreSQL connection URL (password omitted)."""
        auth_part = f"{self.database.user}@" if self.database.user else ""
        return (
            f"postgresql://{auth_part}{self.database.host}:"
            f"{self.database.port}/{self.database.name}"
        )

    # =========================================================================
    # Environment Helpers
    # =========================================================================

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.APP_ENV == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.APP_ENV == "production"

    @property
    def is_non_production(self) -> bool:
        """Check if API docs and verbose errors should be enabled."""
        return self.APP_ENV in ("local", "test", "development")

    @property
    def is_testing(self) -> bool:
        """Check if running in test environment."""
        return self.APP_ENV == "test"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

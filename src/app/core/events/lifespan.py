"""Application lifespan event handlers.

Startup opens the shared pools and clients and stores every service on
``app.state``; shutdown closes them in reverse order. Only the database is
critical: any other integration that fails to start leaves its service as
``None`` and the endpoints that need it answer 503.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from app.auth.oauth import OAuthClient
from app.auth.service import AuthService
from app.cache.redis import close_redis_pools, get_cache_client, init_redis_pools
from app.core.config import Settings, get_settings
from app.database.connection import close_database_pool, init_database_pool
from app.database.repositories.users import UserRepository
from app.llm.client.chat import ChatCompletionClient
from app.llm.exceptions import LLMConfigurationError
from app.observability.logging import get_logger, setup_logging
from app.observability.tracing import shutdown_tracing
from app.services.billing import BillingService
from app.services.images import RecipeImageProxy
from app.services.ingredients import IngredientService
from app.services.mealdb import MealDBClient
from app.services.messaging import MessagingService
from app.services.notifications import NotificationService, PushClient
from app.services.nudges import CookNudgeService
from app.services.recipes import RecipeService
from app.services.scraping import RecipeScraperService
from app.services.shopping import ShoppingListService
from app.services.storage import StorageService
from app.workers.jobs import close_arq_pool, get_arq_pool


if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from fastapi import FastAPI
    from redis.asyncio import Redis


logger = get_logger(__name__)

# Clients with initialize()/shutdown(), in startup order
_CLIENT_ATTRS = (
    "oauth_client",
    "push_client",
    "mealdb_client",
    "scraper_service",
    "llm_client",
    "image_proxy",
)


async def _init_cache() -> Redis[Any] | None:
    try:
        await init_redis_pools()
        return get_cache_client()
    except Exception:
        logger.exception("Failed to initialize Redis - continuing without cache")
        return None


async def _init_arq() -> None:
    try:
        await get_arq_pool()
    except Exception:
        logger.exception("Failed to initialize ARQ pool - background jobs unavailable")


async def _start(client: Any, name: str) -> Any:
    """Initialize an optional client; ``None`` if it fails."""
    try:
        await client.initialize()
    except Exception:
        logger.exception(f"Failed to initialize {name}")
        return None
    return client


def _build_llm_client(
    settings: Settings, cache_client: Redis[Any] | None
) -> ChatCompletionClient | None:
    if not settings.llm.enabled:
        logger.info("LLM features disabled")
        return None
    try:
        return ChatCompletionClient(
            api_key=settings.LLM_API_KEY,
            base_url=settings.llm.url,
            model=settings.llm.model,
            vision_model=settings.llm.vision_model,
            timeout=settings.llm.timeout,
            max_retries=settings.llm.max_retries,
            cache_client=cache_client,
            cache_ttl=settings.llm.cache.ttl,
            cache_enabled=settings.llm.cache.enabled,
            requests_per_minute=settings.llm.requests_per_minute,
        )
    except LLMConfigurationError:
        logger.warning("LLM_API_KEY not set - LLM features unavailable")
        return None


async def _startup(app: FastAPI, settings: Settings) -> None:
    setup_logging(
        log_level=settings.logging.level,
        log_format=settings.logging.format,
        is_development=settings.is_development,
    )
    logger.info(
        "Starting application",
        app_name=settings.app.name,
        environment=settings.APP_ENV,
    )

    await init_database_pool()
    cache_client = await _init_cache()
    await _init_arq()

    state = app.state
    state.oauth_client = await _start(OAuthClient(), "OAuth client")
    state.push_client = await _start(PushClient(), "push client")
    state.mealdb_client = await _start(MealDBClient(), "TheMealDB client")
    state.scraper_service = await _start(
        RecipeScraperService(cache_client=cache_client), "recipe scraper"
    )
    llm_client = _build_llm_client(settings, cache_client)
    state.llm_client = await _start(llm_client, "LLM client") if llm_client else None
    state.image_proxy = await _start(RecipeImageProxy(), "image proxy")

    state.user_repository = UserRepository()
    state.auth_service = AuthService(oauth_client=state.oauth_client)
    state.recipe_service = RecipeService(
        scraper=state.scraper_service,
        llm_client=state.llm_client,
        mealdb=state.mealdb_client,
    )
    state.ingredient_service = IngredientService(llm_client=state.llm_client)
    state.storage_service = StorageService(settings)
    state.shopping_list_service = ShoppingListService()
    state.notification_service = NotificationService(push_client=state.push_client)
    state.messaging_service = MessagingService()
    state.billing_service = BillingService()
    state.cook_nudge_service = (
        CookNudgeService(state.push_client) if state.push_client else None
    )

    logger.info(
        "Application startup complete",
        llm_enabled=state.llm_client is not None,
        storage_configured=state.storage_service.is_configured,
        billing_configured=state.billing_service.is_configured,
    )


async def _shutdown(app: FastAPI) -> None:
    logger.info("Shutting down application")

    for attr in reversed(_CLIENT_ATTRS):
        client = getattr(app.state, attr, None)
        if client is not None:
            await client.shutdown()

    shutdown_tracing()
    await close_arq_pool()
    await close_redis_pools()
    await close_database_pool()
    logger.info("Application shutdown complete")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Open shared resources for the lifetime of the application."""
    settings = get_settings()
    await _startup(app, settings)
    yield
    await _shutdown(app)

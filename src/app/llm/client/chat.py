"""HTTP client for OpenAI-compatible chat completion APIs.

Supports JSON mode for structured output and image inputs for vision
models. Completions are optionally cached in Redis.
"""

from __future__ import annotations

import hashlib
from typing import TYPE_CHECKING, Any, cast

import httpx
from aiolimiter import AsyncLimiter
from pydantic import BaseModel

from app.llm.exceptions import (
    LLMConfigurationError,
    LLMRateLimitError,
    LLMResponseError,
    LLMTimeoutError,
    LLMUnavailableError,
    LLMValidationError,
)
from app.llm.models import ChatRequest, ChatResponse, LLMCompletionResult
from app.observability.logging import get_logger


if TYPE_CHECKING:
    from redis.asyncio import Redis

    from app.llm.prompts.base import BasePrompt


logger = get_logger(__name__)


class ChatCompletionClient:
    """Async client for ``/chat/completions``.

    Attributes:
        base_url: Provider base URL, e.g. ``https://api.openai.com/v1``.
        model: Default text model.
        vision_model: Model used when an image is attached.
        max_retries: Retries for timeouts and connection errors.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str,
        model: str,
        vision_model: str | None = None,
        timeout: float = 60.0,
        max_retries: int = 2,
        cache_client: Redis[Any] | None = None,
        cache_ttl: int = 3600,
        cache_enabled: bool = True,
        requests_per_minute: float = 30.0,
    ) -> None:
        if not api_key:
            msg = "LLM API key is not configured"
            raise LLMConfigurationError(msg)
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.vision_model = vision_model or model
        self.timeout = timeout
        self.max_retries = max_retries
        self.cache_client = cache_client
        self.cache_ttl = cache_ttl
        self.cache_enabled = cache_enabled
        self._http_client: httpx.AsyncClient | None = None
        # One request per interval, no initial burst
        self._rate_limiter = AsyncLimiter(1, 60.0 / requests_per_minute)

    @property
    def chat_url(self) -> str:
        return f"{self.base_url}/chat/completions"

    async def initialize(self) -> None:
        """Create the HTTP client with auth headers."""
        if self._http_client is not None:
            return
        self._http_client = httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
            limits=httpx.Limits(max_keepalive_connections=5, max_connections=10),
        )
        logger.info("ChatCompletionClient initialized", model=self.model)

    async def shutdown(self) -> None:
        """Close the HTTP client."""
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None
            logger.debug("ChatCompletionClient shutdown")

    def _get_cache_key(
        self,
        prompt: str,
        model: str,
        schema: type[BaseModel] | None,
        system: str | None,
        image_url: str | None,
    ) -> str:
        schema_str = str(schema.model_json_schema()) if schema else ""
        content = f"{model}:{system or ''}:{prompt}:{image_url or ''}:{schema_str}"
        content_hash = hashlib.sha256(content.encode()).hexdigest()[:16]
        return f"llm:generate:{content_hash}"

    async def _get_cached_result(self, cache_key: str) -> LLMCompletionResult | None:
        if not self.cache_enabled or not self.cache_client:
            return None
        try:
            cached = await self.cache_client.get(cache_key)
            if cached:
                logger.debug("Cache hit for LLM completion", cache_key=cache_key)
                result = LLMCompletionResult.model_validate_json(cached)
                return result.model_copy(update={"cached": True})
        except Exception as e:  # noqa: BLE001
            logger.warning("Failed to read from LLM cache", error=str(e))
        return None

    async def _cache_result(self, cache_key: str, result: LLMCompletionResult) -> None:
        if not self.cache_enabled or not self.cache_client:
            return
        try:
            await self.cache_client.set(
                cache_key, result.model_dump_json(), ex=self.cache_ttl
            )
        except Exception as e:  # noqa: BLE001
            logger.warning("Failed to cache LLM completion", error=str(e))

    async def _execute_with_retry(self, request: ChatRequest) -> ChatResponse:
        """POST the request, retrying timeouts and connection errors."""
        if self._http_client is None:
            await self.initialize()
        assert self._http_client is not None

        last_exception: Exception | None = None
        for attempt in range(self.max_retries + 1):
            await self._rate_limiter.acquire()
            try:
                response = await self._http_client.post(
                    self.chat_url,
                    json=request.model_dump(exclude_none=True),
                )
                if response.status_code == 429:
                    retry_after = response.headers.get("retry-after", "60")
                    msg = f"LLM rate limit exceeded, retry after {retry_after}s"
                    raise LLMRateLimitError(msg)
                response.raise_for_status()
                return ChatResponse.model_validate(response.json())

            except httpx.TimeoutException as e:
                last_exception = e
                logger.warning(
                    "LLM request timeout",
                    attempt=attempt + 1,
                    max_retries=self.max_retries,
                )
                if attempt < self.max_retries:
                    continue
                msg = f"LLM timeout after {self.timeout}s"
                raise LLMTimeoutError(msg) from e

            except httpx.HTTPStatusError as e:
                logger.warning(
                    "LLM request failed",
                    status_code=e.response.status_code,
                    body=e.response.text[:500],
                )
                msg = f"LLM provider returned {e.response.status_code}"
                raise LLMResponseError(msg) from e

            except httpx.RequestError as e:
                last_exception = e
                logger.warning(
                    "LLM connection error",
                    attempt=attempt + 1,
                    max_retries=self.max_retries,
                    error=str(e),
                )
                if attempt < self.max_retries:
                    continue
                msg = f"Cannot connect to LLM provider: {e}"
                raise LLMUnavailableError(msg) from e

            except ValueError as e:
                # Non-JSON body or a payload without choices
                logger.warning("Malformed LLM response", error=str(e)[:500])
                msg = f"LLM provider returned a malformed response: {e}"
                raise LLMResponseError(msg) from e

        msg = "Max retries exceeded"
        raise LLMUnavailableError(msg) from last_exception

    async def generate(
        self,
        prompt: str,
        *,
        model: str | None = None,
        system: str | None = None,
        schema: type[BaseModel] | None = None,
        image_url: str | None = None,
        temperature: float = 0.1,
        max_tokens: int | None = None,
        skip_cache: bool = False,
    ) -> LLMCompletionResult:
        """Run one chat completion.

        Args:
            prompt: User message text.
            model: Model override; defaults to ``vision_model`` when an image
                is attached, otherwise ``model``.
            system: Optional system message.
            schema: Pydantic model the JSON response must validate against.
            image_url: Image to attach to the user message.
            skip_cache: Bypass the Redis cache.

        Raises:
            LLMUnavailableError: Provider unreachable or timed out.
            LLMRateLimitError: Provider returned 429.
            LLMResponseError: Provider returned another HTTP error.
            LLMValidationError: Response does not match ``schema``.
        """
        use_model = model or (self.vision_model if image_url else self.model)

        cache_key = self._get_cache_key(prompt, use_model, schema, system, image_url)
        if not skip_cache:
            cached = await self._get_cached_result(cache_key)
            if cached is not None:
                # Cached structured output comes back as a plain dict
                if schema is not None and isinstance(cached.parsed, dict):
                    return cached.model_copy(
                        update={"parsed": schema.model_validate(cached.parsed)}
                    )
                return cached

        system_content = system or ""
        if schema is not None:
            schema_instruction = (
                "You must respond with valid JSON matching this schema: "
                f"{schema.model_json_schema()}"
            )
            system_content = (
                f"{system_content}\n\n{schema_instruction}"
                if system_content
                else schema_instruction
            )

        messages: list[dict[str, Any]] = []
        if system_content:
            messages.append({"role": "system", "content": system_content})
        if image_url:
            messages.append(
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": prompt},
                        {"type": "image_url", "image_url": {"url": image_url}},
                    ],
                }
            )
        else:
            messages.append({"role": "user", "content": prompt})

        request = ChatRequest(
            model=use_model,
            messages=messages,
            response_format={"type": "json_object"} if schema is not None else None,
            temperature=temperature,
            max_tokens=max_tokens,
        )
        response = await self._execute_with_retry(request)
        raw_response = response.choices[0].message.content or ""

        parsed: Any = None
        if schema is not None:
            try:
                parsed = schema.model_validate_json(raw_response)
            except ValueError as e:
                logger.warning(
                    "Failed to parse structured LLM output",
                    schema=schema.__name__,
                    raw_response=raw_response[:500],
                )
                msg = f"Response does not match {schema.__name__} schema: {e}"
                raise LLMValidationError(msg) from e

        result = LLMCompletionResult(
            raw_response=raw_response,
            parsed=parsed,
            model=response.model,
            prompt_tokens=response.usage.prompt_tokens if response.usage else None,
            completion_tokens=(
                response.usage.completion_tokens if response.usage else None
            ),
        )
        if not skip_cache:
            await self._cache_result(cache_key, result)
        return result

    async def run_prompt[T: BaseModel](
        self,
        prompt: BasePrompt[T],
        *,
        image_url: str | None = None,
        skip_cache: bool = False,
        **variables: Any,
    ) -> T:
        """Format ``prompt`` and return its validated structured output."""
        result = await self.generate(
            prompt.format(**variables),
            system=prompt.system_prompt,
            schema=prompt.output_schema,
            image_url=image_url,
            temperature=prompt.temperature,
            max_tokens=prompt.max_tokens,
            skip_cache=skip_cache,
        )
        if result.parsed is None:
            msg = f"{prompt.name} returned no parsed result"
            raise LLMValidationError(msg)
        return cast("T", result.parsed)

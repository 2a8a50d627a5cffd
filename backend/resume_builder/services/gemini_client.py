"""
Gemini client wrapper: key rotation, timeout, retry with exponential backoff,
error classification and an optional response cache.
"""
import asyncio
import logging
import time
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from google import genai
from google.genai import types
from tenacity import AsyncRetrying, retry_if_exception, stop_after_attempt, wait_exponential

from ..config import get_settings
from ..exceptions import AIServiceError, AIServiceUnavailableError
from .response_cache import ResponseCache

logger = logging.getLogger(__name__)

RETRYABLE_ERRORS = {"quota_exceeded", "rate_limit", "connection_error", "timeout"}
ROTATING_ERRORS = {"quota_exceeded", "rate_limit", "invalid_key", "billing_error"}


def classify_error(error: BaseException) -> str:
    """Map a provider exception onto a coarse error type."""
    if isinstance(error, (asyncio.TimeoutError, TimeoutError)):
        return "timeout"

    message = str(error).lower()
    if "timeout" in message or "timed out" in message or "deadline" in message:
        return "timeout"
    if "quota" in message or "exceeded" in message or "resource_exhausted" in message:
        return "quota_exceeded"
    if "rate limit" in message or "429" in message:
        return "rate_limit"
    if ("invalid" in message and "key" in message) or "api_key_invalid" in message:
        return "invalid_key"
    if "billing" in message or "payment" in message:
        return "billing_error"
    if "network" in message or "connection" in message or "unavailable" in message:
        return "connection_error"
    return "unknown"


@dataclass
class KeyStats:
    key_index: int
    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    last_used: Optional[datetime] = None
    last_error: Optional[str] = None
    is_healthy: bool = True
    failure_rate: float = 0.0


class APIKeyManager:
    """Round-robin over API keys, skipping keys that keep failing."""

    def __init__(self, api_keys: List[str]):
        if not api_keys:
            raise ValueError("At least one API key is required")
        self.api_keys = list(api_keys)
        self.current_index = 0
        self.key_stats = [KeyStats(key_index=i) for i in range(len(self.api_keys))]
        logger.info(f"APIKeyManager initialized with {len(self.api_keys)} key(s)")

    @property
    def current_key(self) -> str:
        return self.api_keys[self.current_index]

    def rotate(self, reason: str) -> None:
        old_index = self.current_index
        for _ in range(len(self.api_keys)):
            self.current_index = (self.current_index + 1) % len(self.api_keys)
            stats = self.key_stats[self.current_index]
            if stats.is_healthy or stats.failure_rate < 0.8:
                break
        else:
            # Every key is unhealthy: move on anyway
            self.current_index = (old_index + 1) % len(self.api_keys)
            logger.warning(f"All keys unhealthy, using key {self.current_index + 1} anyway")
        logger.info(f"Key rotation: {old_index + 1} -> {self.current_index + 1} (reason: {reason})")

    def record_success(self, key_index: int) -> None:
        stats = self.key_stats[key_index]
        stats.total_requests += 1
        stats.successful_requests += 1
        stats.last_used = datetime.now(timezone.utc)
        stats.is_healthy = True
        stats.failure_rate = stats.failed_requests / stats.total_requests

    def record_failure(self, key_index: int, error: BaseException) -> None:
        stats = self.key_stats[key_index]
        stats.total_requests += 1
        stats.failed_requests += 1
        stats.last_used = datetime.now(timezone.utc)
        stats.last_error = str(error)[:200]
        stats.failure_rate = stats.failed_requests / stats.total_requests
        if stats.failure_rate > 0.5 and stats.total_requests > 5:
            stats.is_healthy = False

    def all_unhealthy(self) -> bool:
        return all(not stats.is_healthy for stats in self.key_stats)

    def usage_stats(self) -> List[Dict[str, Any]]:
        report = []
        for stats in self.key_stats:
            entry = asdict(stats)
            entry["last_used"] = stats.last_used.isoformat() if stats.last_used else None
            entry["success_rate"] = (
                f"{stats.successful_requests / stats.total_requests * 100:.2f}%"
                if stats.total_requests else "N/A"
            )
            report.append(entry)
        return report


def _default_client_factory(api_key: str):
    return genai.Client(api_key=api_key)


class GeminiClient:
    """
    Thin async wrapper over google-genai.

    ``client_factory`` builds one SDK client per API key; tests pass a fake.
    """

    def __init__(
        self,
        api_keys: List[str],
        model: str,
        timeout: float = 30.0,
        retry_attempts: int = 3,
        retry_delay: float = 1.0,
        cache: Optional[ResponseCache] = None,
        client_factory: Optional[Callable[[str], Any]] = None,
    ):
        self.model = model
        self.timeout = timeout
        self.retry_attempts = max(1, retry_attempts)
        self.retry_delay = retry_delay
        self.cache = cache
        self._client_factory = client_factory or _default_client_factory
        self._clients: Dict[int, Any] = {}
        self.key_manager = APIKeyManager(api_keys) if api_keys else None

    def is_available(self) -> bool:
        return self.key_manager is not None

    def _client_for(self, key_index: int):
        if key_index not in self._clients:
            self._clients[key_index] = self._client_factory(self.key_manager.api_keys[key_index])
        return self._clients[key_index]

    async def _request_once(self, contents: Any, config: types.GenerateContentConfig, attempt: int) -> str:
        key_index = self.key_manager.current_index
        client = self._client_for(key_index)
        started = time.monotonic()
        logger.info(f"AI request (attempt {attempt}, key {key_index + 1})")

        try:
            response = await asyncio.wait_for(
                client.aio.models.generate_content(model=self.model, contents=contents, config=config),
                timeout=self.timeout,
            )
        except Exception as e:
            self.key_manager.record_failure(key_index, e)
            error_type = classify_error(e)
            logger.warning(f"AI request failed (attempt {attempt}, key {key_index + 1}): {error_type}")
            if error_type in ROTATING_ERRORS and len(self.key_manager.api_keys) > 1:
                self.key_manager.rotate(error_type)
            raise AIServiceError(f"AI request failed: {str(e) or error_type}", error_type=error_type) from e

        self.key_manager.record_success(key_index)
        text = (response.text or "").strip()
        if not text:
            raise AIServiceError("AI returned an empty response", error_type="empty_response")

        logger.info(f"AI request successful ({(time.monotonic() - started) * 1000:.0f}ms, key {key_index + 1})")
        return text

    async def _request_with_retry(self, contents: Any, config: types.GenerateContentConfig) -> str:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.retry_attempts),
            wait=wait_exponential(multiplier=self.retry_delay, max=30),
            retry=retry_if_exception(
                lambda e: isinstance(e, AIServiceError) and e.error_type in RETRYABLE_ERRORS
            ),
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    return await self._request_once(contents, config, attempt.retry_state.attempt_number)
        except AIServiceError as e:
            logger.error(f"All AI request attempts failed: {e.error_type}")
            if self.key_manager.all_unhealthy():
                raise AIServiceError(
                    "All Gemini API keys exhausted. Please add new API keys.", error_type=e.error_type
                ) from e
            raise

    async def generate_text(
        self,
        contents: Any,
        *,
        temperature: float = 0.4,
        max_output_tokens: int = 4096,
        cache_key: Optional[str] = None,
    ) -> str:
        """
        Send a prompt (or a list of prompt parts) and return the response text.

        Raises AIServiceUnavailableError when no key is configured and
        AIServiceError when every attempt failed. With ``cache_key`` the
        response is served from and stored in the response cache.
        """
        if not self.is_available():
            raise AIServiceUnavailableError()

        config = types.GenerateContentConfig(temperature=temperature, max_output_tokens=max_output_tokens)

        if cache_key and self.cache is not None:
            return await self.cache.get_or_set(cache_key, lambda: self._request_with_retry(contents, config))
        return await self._request_with_retry(contents, config)

    def get_health_status(self) -> Dict[str, Any]:
        if not self.is_available():
            return {"status": "unavailable", "message": "Service not configured", "keys": []}

        return {
            "status": "degraded" if self.key_manager.all_unhealthy() else "healthy",
            "model": self.model,
            "total_keys": len(self.key_manager.api_keys),
            "current_key_index": self.key_manager.current_index,
            "key_stats": self.key_manager.usage_stats(),
            "cache": self.cache.get_stats() if self.cache is not None else None,
        }


# Lazy module-level client
_gemini_client: Optional[GeminiClient] = None


def get_gemini_client() -> GeminiClient:
    """Get the shared Gemini client, initializing lazily from settings."""
    global _gemini_client
    if _gemini_client is None:
        settings = get_settings()
        api_keys = settings.get_gemini_api_keys()
        if not api_keys:
            logger.warning("GEMINI_API_KEY not set - AI resume parsing disabled")
        _gemini_client = GeminiClient(
            api_keys=api_keys,
            model=settings.gemini_model,
            timeout=settings.ai_request_timeout,
            retry_attempts=settings.ai_retry_attempts,
            retry_delay=settings.ai_retry_delay,
            cache=ResponseCache(settings.ai_cache_ttl_seconds, settings.ai_cache_max_entries),
        )
    return _gemini_client


def reset_gemini_client() -> None:
    global _gemini_client
    _gemini_client = None

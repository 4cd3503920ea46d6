"""
Generative Text Client
======================

Async client for an OpenAI-compatible chat completions API
(OpenRouter by default).

Request body: ``{model, messages, max_tokens, temperature}``; the answer
is read from ``choices[0].message.content``.

Models are tried in priority order and the first success wins. Failures
are classified so that callers can react differently:

- HTTP 402 (status or ``error.code``) → ExternalServiceBillingExhausted
- timeouts, network errors, 401/413/429/5xx → ExternalServiceUnavailable
- missing choices or empty content → MalformedExternalResponse

Example:
    client = ChatCompletionClient()
    response = await client.complete(
        [{"role": "user", "content": "Hello"}],
        max_tokens=256,
    )
    print(response.content)
"""

from dataclasses import dataclass, field
from typing import Any

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from catalog_advisor.config.settings import Settings, get_settings
from catalog_advisor.utils.errors import (
    ConfigurationError,
    ExternalServiceBillingExhausted,
    ExternalServiceError,
    ExternalServiceUnavailable,
    MalformedExternalResponse,
)
from catalog_advisor.utils.logger import get_logger

logger = get_logger(__name__)

_STATUS_MESSAGES: dict[int, str] = {
    401: "AI service authentication failed. Please check API configuration.",
    413: "Request payload too large. Try with a shorter question or smaller document.",
    429: "Too many requests. Please wait a moment before trying again.",
}


@dataclass
class LLMResponse:
    """Response from the generative service."""

    content: str
    model: str
    usage: dict[str, int] = field(default_factory=dict)
    raw_response: dict[str, Any] | None = None

    @property
    def tokens_used(self) -> int:
        """Total tokens used in this response."""
        return self.usage.get("total_tokens", 0)


class ChatCompletionClient:
    """
    Chat completions client with a prioritized model list.

    The underlying ``httpx.AsyncClient`` is created lazily and reused;
    pass ``http_client`` to inject one (tests use ``httpx.MockTransport``).
    """

    def __init__(
        self,
        settings: Settings | None = None,
        http_client: httpx.AsyncClient | None = None,
        models: list[str] | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.models = models if models is not None else self.settings.model_list
        if self.settings.llm_api_key and not self.models:
            raise ConfigurationError(
                "LLM_API_KEY is set but no models are configured",
                remediation="Set LLM_MODELS to a comma-separated list of model names.",
            )
        self.timeout = self.settings.llm_timeout_seconds
        self._client = http_client
        self._owns_client = http_client is None
        self._log = logger.bind(component="ChatCompletionClient")

    @property
    def is_configured(self) -> bool:
        """True when an API key and at least one model are set."""
        return bool(self.settings.llm_api_key) and bool(self.models)

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.settings.llm_base_url.rstrip("/"),
                timeout=self.timeout,
                headers={
                    "Authorization": f"Bearer {self.settings.llm_api_key}",
                    "Content-Type": "application/json",
                },
            )
            self._owns_client = True
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client and self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def complete(
        self,
        messages: list[dict[str, str]],
        max_tokens: int = 1024,
        temperature: float = 0.3,
    ) -> LLMResponse:
        """
        Generate a completion, trying each configured model in order.

        Args:
            messages: Chat messages (``role``/``content`` dicts)
            max_tokens: Completion token budget
            temperature: Sampling temperature

        Returns:
            LLMResponse from the first model that answered

        Raises:
            ExternalServiceBillingExhausted: If any model failed for billing reasons
            MalformedExternalResponse: If every model answered unusably
            ExternalServiceUnavailable: For every other exhaustion case
        """
        if not self.is_configured:
            raise ExternalServiceUnavailable(
                "Generative service is not configured",
                details={"models": self.models},
                remediation="Set LLM_API_KEY (and optionally LLM_MODELS) to enable AI answers.",
            )

        failures: list[ExternalServiceError] = []

        for model in self.models:
            payload = {
                "model": model,
                "messages": messages,
                "max_tokens": max_tokens,
                "temperature": temperature,
            }
            try:
                response = await self._request_model(model, payload)
            except ExternalServiceError as e:
                self._log.warning(
                    "llm_client.model_failed",
                    model=model,
                    error_type=type(e).__name__,
                    error=e.message,
                )
                failures.append(e)
                continue

            self._log.info(
                "llm_client.completed",
                model=response.model,
                tokens=response.tokens_used,
                attempts=len(failures) + 1,
            )
            return response

        raise self._exhaustion_error(failures)

    async def _request_model(self, model: str, payload: dict[str, Any]) -> LLMResponse:
        """Send one request and classify the outcome."""
        try:
            response = await self._post(payload)
        except httpx.TimeoutException as e:
            raise ExternalServiceUnavailable(
                "Request timed out. Please try again.",
                details={"model": model, "timeout_seconds": self.timeout},
            ) from e
        except httpx.HTTPError as e:
            raise ExternalServiceUnavailable(
                f"Could not reach AI service: {e}",
                details={"model": model},
            ) from e

        body = _safe_json(response)
        error = body.get("error") if isinstance(body, dict) else None
        error_code = error.get("code") if isinstance(error, dict) else None

        if response.status_code == 402 or error_code in (402, "402"):
            raise ExternalServiceBillingExhausted(
                "LLM service billing/credits error",
                details={"model": model, "status_code": response.status_code},
                remediation=(
                    f"Purchase credits at {self.settings.llm_billing_help_url} "
                    "or use a valid API key on a funded account."
                ),
            )

        if response.status_code >= 400 or error:
            message = _STATUS_MESSAGES.get(response.status_code)
            if message is None:
                error_message = error.get("message") if isinstance(error, dict) else error
                message = f"AI service error: {error_message or response.status_code}"
            raise ExternalServiceUnavailable(
                message,
                details={"model": model, "status_code": response.status_code},
            )

        choices = body.get("choices") if isinstance(body, dict) else None
        if not choices or not isinstance(choices, list):
            raise MalformedExternalResponse(
                "Invalid response format from AI service",
                details={"model": model},
            )

        message_obj = choices[0].get("message") if isinstance(choices[0], dict) else None
        content = message_obj.get("content") if isinstance(message_obj, dict) else None
        if not isinstance(content, str) or not content.strip():
            raise MalformedExternalResponse(
                "AI service returned an empty response. Please try again.",
                details={"model": model},
            )

        usage = body.get("usage") or {}
        return LLMResponse(
            content=content,
            model=body.get("model", model),
            usage={k: v for k, v in usage.items() if isinstance(v, int)},
            raw_response=body,
        )

    @retry(
        stop=stop_after_attempt(2),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
        retry=retry_if_exception_type(httpx.ConnectError),
        reraise=True,
    )
    async def _post(self, payload: dict[str, Any]) -> httpx.Response:
        client = await self._get_client()
        return await client.post("/chat/completions", json=payload)

    def _exhaustion_error(self, failures: list[ExternalServiceError]) -> ExternalServiceError:
        """Pick the error that best describes why every model failed."""
        for failure in failures:
            if isinstance(failure, ExternalServiceBillingExhausted):
                return failure

        if failures and all(isinstance(f, MalformedExternalResponse) for f in failures):
            return failures[-1]

        last = failures[-1] if failures else None
        return ExternalServiceUnavailable(
            last.message if last else "All models failed to respond",
            details={
                "models": self.models,
                "errors": [f"{type(f).__name__}: {f.message}" for f in failures],
            },
            remediation=last.remediation if last else None,
        )


def _safe_json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None

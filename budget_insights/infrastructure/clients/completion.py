"""Generative completion HTTP client (OpenAI-compatible chat endpoint)"""

import httpx

from budget_insights.config import settings
from budget_insights.domain.exceptions import GenerativeCallFailure
from budget_insights.infrastructure.observability.metrics import completion_latency_histogram


class CompletionClient:
    """Client for the external text-completion service"""

    def __init__(
        self,
        api_base: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
    ):
        self.api_base = (api_base or settings.llm_api_base).rstrip("/")
        self.api_key = settings.llm_api_key if api_key is None else api_key
        self.timeout = timeout or settings.llm_timeout_seconds

    @property
    def is_enabled(self) -> bool:
        return bool(self.api_key)

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        model: str | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> str:
        """
        Return the first choice's text.

        Raises:
            GenerativeCallFailure: when not configured, on timeout, non-2xx,
                network errors, or a body without a message
        """
        if not self.is_enabled:
            raise GenerativeCallFailure("not_configured", "No completion API key configured")

        payload = {
            "model": model or settings.llm_model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "max_tokens": max_tokens or settings.llm_max_tokens,
            "temperature": settings.llm_temperature if temperature is None else temperature,
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                with completion_latency_histogram.time():
                    response = await client.post(
                        f"{self.api_base}/chat/completions",
                        json=payload,
                        headers=headers,
                    )
                response.raise_for_status()
                content = response.json()["choices"][0]["message"]["content"]

            except httpx.TimeoutException as e:
                raise GenerativeCallFailure("timeout", f"Completion timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise GenerativeCallFailure("http_status", f"Completion API error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise GenerativeCallFailure("network", f"Completion API unreachable: {e}") from e
            except (KeyError, IndexError, TypeError, ValueError) as e:
                raise GenerativeCallFailure("invalid_body", f"Unexpected completion body: {e}") from e

        if not isinstance(content, str):
            raise GenerativeCallFailure("invalid_body", "Completion content is not text")
        return content

import logging

import httpx

from career_api.config import GROQ_CHAT_URL, Settings
from career_api.errors import ConfigurationError, TransportError

logger = logging.getLogger(__name__)


class CompletionClient:
    """Chat-completions client for an OpenAI-compatible endpoint (Groq by default)."""

    def __init__(
        self,
        api_key: str | None,
        http: httpx.AsyncClient,
        endpoint: str = GROQ_CHAT_URL,
        model: str = "deepseek-r1-distill-llama-70b",
        max_tokens: int = 8000,
        timeout: float = 120.0,
    ):
        if not api_key:
            raise ConfigurationError("GROQ_API_KEY not configured")
        self.api_key = api_key
        self.http = http
        self.endpoint = endpoint
        self.model = model
        self.max_tokens = max_tokens
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings, http: httpx.AsyncClient) -> "CompletionClient":
        return cls(
            api_key=settings.require("GROQ_API_KEY"),
            http=http,
            endpoint=settings.llm_endpoint,
            model=settings.llm_model,
            max_tokens=settings.llm_max_tokens,
            timeout=settings.llm_timeout_seconds,
        )

    async def complete(self, messages: list[dict], temperature: float, max_tokens: int | None = None) -> str:
        payload = {
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens or self.max_tokens,
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        try:
            r = await self.http.post(self.endpoint, json=payload, headers=headers, timeout=self.timeout)
        except httpx.TimeoutException as e:
            raise TransportError(f"Completion request timed out: {e}") from e
        except httpx.RequestError as e:
            raise TransportError(f"Completion request failed: {e}") from e

        if not r.is_success:
            logger.error("Completion API error: %s %s", r.status_code, r.text)
            raise TransportError(
                f"Completion API error: {r.status_code} - {r.text}",
                status=r.status_code,
                body=r.text,
            )

        try:
            data = r.json()
        except ValueError as e:
            raise TransportError(
                f"Completion API returned non-JSON body: {e}",
                status=r.status_code,
                body=r.text,
            ) from e

        choices = (data.get("choices") if isinstance(data, dict) else None) or [{}]
        content = ((choices[0] or {}).get("message") or {}).get("content")
        logger.debug("Raw completion content: %s", content)
        return content if isinstance(content, str) else ""

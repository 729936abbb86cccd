"""
Retry policies for the analysis flow.

Two separately configured policies:

- TransportRetryPolicy resubmits the *same* request after an exponential
  backoff when the upstream answers 429/503 or the connection fails.
- ParseRetryPolicy resubmits a *reformulated* request (stricter system
  instruction, lower temperature) when the completion cannot be turned into
  a valid analysis.

AnalysisRunner composes them: every completion call made by the parse loop
is wrapped by the transport policy.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable

from tenacity import AsyncRetrying, retry_if_exception, stop_after_attempt, wait_exponential

from career_api.config import Settings
from career_api.errors import RETRYABLE_STATUSES, ExtractionError, ParseError, TransportError
from career_api.extraction import parse_analysis
from career_api.prompts import build_messages

logger = logging.getLogger(__name__)


class AnalysisState(str, Enum):
    RECEIVED = "received"
    PROMPT_BUILT = "prompt_built"
    REQUESTING = "requesting"
    RETRYING = "retrying"
    PARSED = "parsed"
    EXHAUSTED = "exhausted"
    PERSISTED = "persisted"
    RESPONDED = "responded"
    FAILED = "failed"


# ---------------------------
# Transport retry
# ---------------------------
@dataclass
class TransportRetryPolicy:
    max_retries: int = 3
    base_delay: float = 1.0
    max_delay: float = 60.0
    statuses: frozenset = RETRYABLE_STATUSES
    sleep: Callable[[float], Awaitable[None]] = field(default=asyncio.sleep)

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "TransportRetryPolicy":
        return cls(
            max_retries=settings.transport_max_retries,
            base_delay=settings.retry_base_delay,
            **kwargs,
        )

    def is_retryable(self, exc: BaseException) -> bool:
        if not isinstance(exc, TransportError):
            return False
        return exc.status is None or exc.status in self.statuses

    def _log_retry(self, retry_state) -> None:
        exc = retry_state.outcome.exception()
        logger.warning(
            "Transient upstream error (%s). Retry %d of %d in %.1fs",
            getattr(exc, "status", None) or exc,
            retry_state.attempt_number,
            self.max_retries,
            retry_state.next_action.sleep,
        )

    async def call(self, fn, *args, **kwargs):
        retrying = AsyncRetrying(
            retry=retry_if_exception(self.is_retryable),
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_exponential(multiplier=self.base_delay, exp_base=2, max=self.max_delay),
            sleep=self.sleep,
            before_sleep=self._log_retry,
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                return await fn(*args, **kwargs)


# ---------------------------
# Parse retry
# ---------------------------
@dataclass
class ParseRetryPolicy:
    max_retries: int = 1
    temperature: float = 0.7
    retry_temperature: float = 0.5

    @classmethod
    def from_settings(cls, settings: Settings) -> "ParseRetryPolicy":
        return cls(
            max_retries=settings.parse_max_retries,
            temperature=settings.llm_temperature,
            retry_temperature=settings.llm_retry_temperature,
        )


class AnalysisRunner:
    def __init__(self, completion, transport: TransportRetryPolicy, parse: ParseRetryPolicy):
        self.completion = completion
        self.transport = transport
        self.parse = parse

    async def run(self, prompt: str) -> dict:
        total = self.parse.max_retries + 1
        last_error = None

        for attempt in range(1, total + 1):
            strict = attempt > 1
            state = AnalysisState.RETRYING if strict else AnalysisState.REQUESTING
            logger.info("Analysis %s (attempt %d of %d)", state.value, attempt, total)

            text = await self.transport.call(
                self.completion.complete,
                build_messages(prompt, strict=strict),
                temperature=self.parse.retry_temperature if strict else self.parse.temperature,
            )

            try:
                analysis = parse_analysis(text)
            except (ExtractionError, ParseError) as e:
                last_error = e
                logger.warning("JSON parsing attempt %d failed: %s", attempt, e.message)
                continue

            logger.info("Analysis %s on attempt %d", AnalysisState.PARSED.value, attempt)
            return analysis

        logger.error("Analysis %s after %d attempts", AnalysisState.EXHAUSTED.value, total)
        error_cls = ExtractionError if isinstance(last_error, ExtractionError) else ParseError
        raise error_cls(f"Failed to parse JSON after {total} attempts: {last_error.message}") from last_error

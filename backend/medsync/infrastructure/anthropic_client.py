"""Resilient Anthropic Client — one-shot message calls with bounded retry.

Invariants:
    - Every SDK failure is classified once: rate_limit, transient, timeout, client_error
    - rate_limit and transient are retried up to max_retries; the rest fail at once
    - A 429 waits for Retry-After when the header is present, else jittered backoff
    - Callers only ever see AnalysisServiceError (core/errors.py)

Design Decisions:
    - SDK-level retries disabled (max_retries=0): one retry policy, owned here
    - Classification separated from the loop so the policy reads as a table
"""

import asyncio
import logging
import random

import anthropic
from anthropic import (
    APIConnectionError,
    APIError,
    APIStatusError,
    APITimeoutError,
    RateLimitError,
)

from medsync.core.errors import AnalysisServiceError, ErrorContext

logger = logging.getLogger(__name__)

_RETRYABLE_STATUS = frozenset({500, 502, 503, 504, 529})


def classify_failure(error: APIError) -> str:
    """Map an SDK exception to the retry policy bucket it belongs to."""
    if isinstance(error, RateLimitError):
        return "rate_limit"
    if isinstance(error, APITimeoutError):
        return "timeout"
    if isinstance(error, APIConnectionError):
        return "transient"
    if isinstance(error, APIStatusError) and error.status_code in _RETRYABLE_STATUS:
        return "transient"
    return "client_error"


def retry_after_ms(error: APIError) -> int | None:
    """Retry-After header of a failed response, in milliseconds."""
    response = getattr(error, "response", None)
    if response is None:
        return None
    raw = response.headers.get("retry-after")
    if not raw:
        return None
    try:
        return int(float(raw) * 1000)
    except ValueError:
        return None


class ResilientAnthropicClient:
    """AsyncAnthropic with the analysis retry policy applied."""

    def __init__(
        self,
        api_key: str,
        max_retries: int = 3,
        base_delay_ms: int = 1000,
        max_delay_ms: int = 60_000,
        timeout_seconds: int = 30,
    ):
        self.client = anthropic.AsyncAnthropic(
            api_key=api_key, timeout=timeout_seconds, max_retries=0,
        )
        self.max_retries = max_retries
        self.base_delay_ms = base_delay_ms
        self.max_delay_ms = max_delay_ms

    async def create_message(
        self,
        *,
        model: str,
        max_tokens: int,
        messages: list,
        system: str | None = None,
        context: ErrorContext | None = None,
    ):
        """Send one Messages API request, retrying transient failures."""
        request: dict = {
            "model": model, "max_tokens": max_tokens, "messages": messages,
        }
        if system:
            request["system"] = system

        attempt = 0
        while True:
            try:
                response = await self.client.messages.create(**request)
            except APIError as e:
                kind = classify_failure(e)
                wait_ms = self._plan_retry(e, kind, attempt, context)
                logger.warning(
                    f"Anthropic {kind} failure, retrying in {wait_ms}ms: {e}",
                    extra={"attempt": attempt + 1},
                )
                await asyncio.sleep(wait_ms / 1000)
                attempt += 1
                continue

            usage = response.usage
            logger.info(
                "Anthropic API success",
                extra={
                    "attempt": attempt + 1,
                    "input_tokens": usage.input_tokens,
                    "output_tokens": usage.output_tokens,
                },
            )
            return response

    def _plan_retry(
        self, error: APIError, kind: str, attempt: int,
        context: ErrorContext | None,
    ) -> int:
        """Delay before the next attempt. Raises when no retry is allowed."""
        if kind in ("timeout", "client_error"):
            raise AnalysisServiceError(
                "API timeout" if kind == "timeout" else str(error),
                kind, context=context,
            ) from error

        header_ms = retry_after_ms(error) if kind == "rate_limit" else None
        if attempt >= self.max_retries:
            if kind == "rate_limit":
                raise AnalysisServiceError(
                    "Rate limit exceeded after retries", kind,
                    retry_after_ms=header_ms, context=context,
                ) from error
            raise AnalysisServiceError(
                f"Transient failure after {self.max_retries} retries: {error}",
                "connection_error", context=context,
            ) from error
        return header_ms or self._backoff(attempt)

    def _backoff(self, attempt: int) -> int:
        """Exponential backoff with ±25% jitter."""
        delay = min(self.max_delay_ms, (2 ** attempt) * self.base_delay_ms)
        return int(delay * random.uniform(0.75, 1.25))  # nosec B311

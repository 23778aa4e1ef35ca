"""Resilient Anthropic Client tests — retry policy and error mapping.

Invariants:
    - Transient failures (5xx, connection) retry up to max_retries, then fail
    - Timeouts and 4xx client errors fail immediately without retry
    - Every failure surfaces as AnalysisServiceError
"""

import httpx
import pytest
from anthropic import (
    APIConnectionError, APIStatusError, APITimeoutError, BadRequestError,
    InternalServerError, NotFoundError, RateLimitError,
)

from medsync.core.errors import AnalysisServiceError
from medsync.infrastructure.anthropic_client import (
    ResilientAnthropicClient, classify_failure, retry_after_ms,
)

from tests.services.mock_anthropic import text_response

_REQUEST = httpx.Request("POST", "https://api.anthropic.com/v1/messages")


def _status_error(cls, status, headers=None):
    response = httpx.Response(status, request=_REQUEST, headers=headers or {})
    return cls("error", response=response, body=None)


class _FakeMessages:
    def __init__(self, outcomes):
        self._outcomes = list(outcomes)
        self.calls = 0

    async def create(self, **kwargs):
        self.calls += 1
        outcome = self._outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


class _FakeSDK:
    def __init__(self, outcomes):
        self.messages = _FakeMessages(outcomes)


def _client(outcomes, max_retries=2):
    client = ResilientAnthropicClient(
        api_key="sk-ant-test", max_retries=max_retries,
        base_delay_ms=1, max_delay_ms=5,
    )
    client.client = _FakeSDK(outcomes)
    return client


async def _call(client):
    return await client.create_message(
        model="test-model", max_tokens=10,
        messages=[{"role": "user", "content": "hi"}],
    )


async def test_success_first_attempt():
    client = _client([text_response("ok")])
    response = await _call(client)
    assert response.content[0].text == "ok"
    assert client.client.messages.calls == 1


async def test_transient_error_then_success():
    client = _client([
        _status_error(InternalServerError, 500),
        APIConnectionError(request=_REQUEST),
        text_response("ok"),
    ])
    await _call(client)
    assert client.client.messages.calls == 3


async def test_transient_errors_exhaust_retries():
    client = _client([_status_error(InternalServerError, 500)] * 3)
    with pytest.raises(AnalysisServiceError) as exc_info:
        await _call(client)
    assert exc_info.value.api_error_type == "connection_error"
    assert client.client.messages.calls == 3


async def test_rate_limit_exhausted_keeps_retry_after():
    client = _client(
        [_status_error(RateLimitError, 429, {"retry-after": "0.001"})] * 2,
        max_retries=1,
    )
    with pytest.raises(AnalysisServiceError) as exc_info:
        await _call(client)
    assert exc_info.value.api_error_type == "rate_limit"
    assert exc_info.value.context.retry_after_ms == 1


async def test_timeout_is_not_retried():
    client = _client([APITimeoutError(request=_REQUEST), text_response("ok")])
    with pytest.raises(AnalysisServiceError) as exc_info:
        await _call(client)
    assert exc_info.value.api_error_type == "timeout"
    assert client.client.messages.calls == 1


async def test_client_error_is_not_retried():
    client = _client([_status_error(BadRequestError, 400), text_response("ok")])
    with pytest.raises(AnalysisServiceError) as exc_info:
        await _call(client)
    assert exc_info.value.api_error_type == "client_error"
    assert exc_info.value.http_status == 503


def test_backoff_bounded_by_max_delay():
    client = ResilientAnthropicClient(
        api_key="sk-ant-test", base_delay_ms=1000, max_delay_ms=4000,
    )
    assert all(client._backoff(10) <= 5000 for _ in range(50))
    assert all(750 <= client._backoff(0) <= 1250 for _ in range(50))


def test_overloaded_is_transient():
    assert classify_failure(_status_error(APIStatusError, 529)) == "transient"


def test_not_found_is_client_error():
    assert classify_failure(_status_error(NotFoundError, 404)) == "client_error"


def test_retry_after_ignores_garbage_header():
    error = _status_error(RateLimitError, 429, {"retry-after": "soon"})
    assert retry_after_ms(error) is None

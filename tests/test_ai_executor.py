"""
Model fallback executor tests. Providers and sleeps are faked, nothing
touches the network.

Run with:
    python3 -m pytest tests/test_ai_executor.py -v
"""

import asyncio
from unittest.mock import AsyncMock, call

import pytest

from services.ai_executor import (
    ErrorKind,
    FallbackExecutor,
    backoff_ms,
    classify_error,
    generate_with_ai,
    suggested_retry_seconds,
)
from utils.exceptions import ConfigurationError, ModelsExhaustedError

MODELS = ["model-a", "model-b", "model-c"]


class FakeAPIError(Exception):
    """Mimics the SDK errors: an HTTP code attribute plus a message"""

    def __init__(self, code, message):
        super().__init__(message)
        self.code = code


def _executor(side_effect, models=MODELS):
    call_model = AsyncMock(side_effect=side_effect)
    sleep = AsyncMock()
    executor = FallbackExecutor("gemini", models=list(models), call_model=call_model, sleep=sleep)
    return executor, call_model, sleep


def _run(executor):
    return asyncio.run(executor.run("system", "user", "key"))


def _models_called(call_model):
    return [c.args[0] for c in call_model.await_args_list]


# ═══════════════════════════════════════════════════════════════════════════════
# 1. ERROR TRIAGE
# ═══════════════════════════════════════════════════════════════════════════════

@pytest.mark.parametrize("error,kind", [
    (FakeAPIError(404, "models/x is not found for API version v1beta"), ErrorKind.NOT_FOUND),
    (Exception("The model `gpt-x` does not exist"), ErrorKind.NOT_FOUND),
    (FakeAPIError(503, "The model is overloaded. Please try again later."), ErrorKind.OVERLOADED),
    (FakeAPIError(429, "429 RESOURCE_EXHAUSTED. You exceeded your current quota"), ErrorKind.QUOTA_EXCEEDED),
    (Exception("You exceeded your current quota, please check your plan"), ErrorKind.QUOTA_EXCEEDED),
    (FakeAPIError(429, "Rate limit reached for requests. Please retry in 2s"), ErrorKind.RATE_LIMITED),
    (Exception("rate limit hit"), ErrorKind.RATE_LIMITED),
    (ValueError("Resposta vazia do Gemini"), ErrorKind.OTHER),
])
def test_classify_error(error, kind):
    assert classify_error(error) == kind


def test_suggested_retry_seconds():
    assert suggested_retry_seconds(Exception("Please Retry in 12.5s.")) == 12.5
    assert suggested_retry_seconds(Exception("slow down")) is None


def test_backoff_is_exponential_and_capped():
    assert [backoff_ms(a) for a in (1, 2, 3, 4, 5)] == [1000, 2000, 4000, 5000, 5000]


# ═══════════════════════════════════════════════════════════════════════════════
# 2. FALLBACK BEHAVIOUR
# ═══════════════════════════════════════════════════════════════════════════════

def test_first_model_success():
    executor, call_model, sleep = _executor(["resposta"])
    assert _run(executor) == "resposta"
    assert call_model.await_args == call("model-a", "system", "user", "key")
    sleep.assert_not_awaited()


def test_not_found_moves_to_next_model_immediately():
    executor, call_model, sleep = _executor([FakeAPIError(404, "not found"), "ok"])
    assert _run(executor) == "ok"
    assert _models_called(call_model) == ["model-a", "model-b"]
    sleep.assert_not_awaited()


def test_overloaded_moves_to_next_model_immediately():
    executor, call_model, sleep = _executor([FakeAPIError(503, "overloaded"), "ok"])
    assert _run(executor) == "ok"
    assert _models_called(call_model) == ["model-a", "model-b"]
    sleep.assert_not_awaited()


def test_quota_exceeded_skips_model_without_sleeping():
    executor, call_model, sleep = _executor([
        FakeAPIError(429, "RESOURCE_EXHAUSTED: quota exceeded"),
        "ok",
    ])
    assert _run(executor) == "ok"
    assert _models_called(call_model) == ["model-a", "model-b"]
    sleep.assert_not_awaited()


def test_rate_limit_retries_same_model_with_backoff():
    executor, call_model, sleep = _executor([
        FakeAPIError(429, "rate limit"),
        FakeAPIError(429, "rate limit"),
        "ok",
    ])
    assert _run(executor) == "ok"
    assert _models_called(call_model) == ["model-a", "model-a", "model-a"]
    assert sleep.await_args_list == [call(1.0), call(2.0)]


def test_rate_limit_hint_overrides_backoff():
    executor, _, sleep = _executor([FakeAPIError(429, "rate limit, retry in 2.5s"), "ok"])
    assert _run(executor) == "ok"
    assert sleep.await_args_list == [call(2.5)]


def test_rate_limit_hint_is_capped():
    executor, _, sleep = _executor([FakeAPIError(429, "rate limit, retry in 12s"), "ok"])
    assert _run(executor) == "ok"
    assert sleep.await_args_list == [call(5.0)]


def test_long_rate_limit_hint_moves_to_next_model():
    executor, call_model, sleep = _executor([FakeAPIError(429, "rate limit, retry in 45s"), "ok"])
    assert _run(executor) == "ok"
    assert _models_called(call_model) == ["model-a", "model-b"]
    sleep.assert_not_awaited()


def test_rate_limit_on_every_attempt_falls_through_to_next_model():
    executor, call_model, sleep = _executor([FakeAPIError(429, "rate limit")] * 3 + ["ok"])
    assert _run(executor) == "ok"
    assert _models_called(call_model) == ["model-a"] * 3 + ["model-b"]
    assert sleep.await_count == 2


def test_other_error_moves_to_next_model():
    executor, call_model, _ = _executor([ValueError("Resposta vazia"), "ok"])
    assert _run(executor) == "ok"
    assert _models_called(call_model) == ["model-a", "model-b"]


def test_other_error_on_last_model_is_reraised():
    error = ValueError("boom")
    executor, _, _ = _executor([error], models=["only-model"])
    with pytest.raises(ValueError) as excinfo:
        _run(executor)
    assert excinfo.value is error


def test_all_models_exhausted():
    executor, call_model, _ = _executor([FakeAPIError(404, "not found")] * 3)
    with pytest.raises(ModelsExhaustedError) as excinfo:
        _run(executor)

    assert call_model.await_count == 3
    assert excinfo.value.provider == "gemini"
    assert excinfo.value.models == MODELS
    assert excinfo.value.message.startswith("Todos os modelos Gemini estão indisponíveis")
    assert excinfo.value.error_code == "MODELS_EXHAUSTED"


def test_single_model_out_of_quota_gives_up_without_sleeping():
    executor, call_model, sleep = _executor(
        [FakeAPIError(429, "RESOURCE_EXHAUSTED: quota exceeded")] * 3,
        models=["only-model"],
    )
    with pytest.raises(ModelsExhaustedError):
        _run(executor)
    assert call_model.await_count == 1
    sleep.assert_not_awaited()


def test_openai_exhausted_message():
    call_model = AsyncMock(side_effect=[FakeAPIError(503, "overloaded")] * 4)
    executor = FallbackExecutor("openai", call_model=call_model, sleep=AsyncMock())
    with pytest.raises(ModelsExhaustedError) as excinfo:
        _run(executor)
    assert _models_called(call_model) == ["gpt-4o", "gpt-4o-mini", "gpt-4-turbo", "gpt-3.5-turbo"]
    assert "OpenAI" in excinfo.value.message


# ═══════════════════════════════════════════════════════════════════════════════
# 3. generate_with_ai
# ═══════════════════════════════════════════════════════════════════════════════

def test_generate_with_ai_extracts_json(gemini_key):
    executor, call_model, _ = _executor(['Aqui está:\n```json\n{"a": 1}\n```'])
    result = asyncio.run(generate_with_ai("s", "u", executor=executor))
    assert result == '{"a": 1}'
    assert call_model.await_args.args[3] == gemini_key


def test_generate_with_ai_uses_openai_key_slot(no_api_keys):
    no_api_keys.setenv("OPENAI_API_KEY", "sk-default")
    no_api_keys.setenv("OPENAI_API_KEY_2", "sk-two")
    executor, call_model, _ = _executor(['{"ok": true}'])

    asyncio.run(generate_with_ai("s", "u", provider="openai", openai_key="2", executor=executor))
    assert call_model.await_args.args[3] == "sk-two"


def test_generate_with_ai_without_key(no_api_keys):
    executor, call_model, _ = _executor(["{}"])
    with pytest.raises(ConfigurationError):
        asyncio.run(generate_with_ai("s", "u", executor=executor))
    call_model.assert_not_awaited()

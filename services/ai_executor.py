"""
Provider / model fallback executor.

Each provider has an ordered chain of models. A model gets up to
MAX_ATTEMPTS_PER_MODEL attempts; what happens after a failure depends on the
kind of error (see classify_error). When the chain runs out a
ModelsExhaustedError carries the user-facing message for that provider.
"""

import asyncio
import logging
import math
import re
from enum import Enum
from typing import Awaitable, Callable, List, Optional

from clients import gemini_client, openai_client
from utils.exceptions import ConfigurationError, ModelsExhaustedError
from utils.json_repair import extract_json_from_response
from utils.model_config import (
    AIProvider,
    BASE_BACKOFF_MS,
    DEFAULT_KEY_SLOT,
    DEFAULT_PROVIDER,
    MAX_ATTEMPTS_PER_MODEL,
    MAX_BACKOFF_MS,
    MAX_SUGGESTED_WAIT_SECONDS,
    ModelConfig,
)

logger = logging.getLogger(__name__)

# (model, system_prompt, user_prompt, api_key) -> response text
ModelCaller = Callable[[str, str, str, str], Awaitable[str]]

_RETRY_HINT = re.compile(r'retry in (\d+(?:\.\d+)?)', re.IGNORECASE)

_MODEL_CALLERS = {
    AIProvider.GEMINI.value: gemini_client.generate_text,
    AIProvider.OPENAI.value: openai_client.generate_text,
}


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    OVERLOADED = "overloaded"
    QUOTA_EXCEEDED = "quota_exceeded"
    RATE_LIMITED = "rate_limited"
    OTHER = "other"


def _status_of(error: BaseException) -> Optional[int]:
    """HTTP status from whichever attribute the SDK uses"""
    for attr in ("status_code", "code", "status"):
        value = getattr(error, attr, None)
        if isinstance(value, int):
            return value
    return None


def classify_error(error: BaseException) -> ErrorKind:
    status = _status_of(error)
    message = str(error)
    lowered = message.lower()

    if status == 404 or "404" in message or "not found" in lowered or "does not exist" in lowered:
        return ErrorKind.NOT_FOUND

    if status == 503 or "503" in message or "overloaded" in lowered:
        return ErrorKind.OVERLOADED

    if status == 429 or "429" in message or "rate limit" in lowered or "quota" in lowered:
        if "quota" in lowered or "RESOURCE_EXHAUSTED" in message:
            return ErrorKind.QUOTA_EXCEEDED
        return ErrorKind.RATE_LIMITED

    return ErrorKind.OTHER


def suggested_retry_seconds(error: BaseException) -> Optional[float]:
    """Server hint such as 'Please retry in 12.5s', if present"""
    match = _RETRY_HINT.search(str(error))
    return float(match.group(1)) if match else None


def backoff_ms(attempt: int) -> int:
    """Exponential backoff for a 1-based attempt number, capped"""
    return min(BASE_BACKOFF_MS * 2 ** (attempt - 1), MAX_BACKOFF_MS)


class FallbackExecutor:
    """Runs one prompt through a provider's model chain."""

    def __init__(
        self,
        provider: str,
        models: Optional[List[str]] = None,
        call_model: Optional[ModelCaller] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        max_attempts: int = MAX_ATTEMPTS_PER_MODEL,
    ):
        self.provider = provider
        self.config = ModelConfig.get_config(provider)
        self.models = models if models is not None else ModelConfig.get_models(provider)
        self.call_model = call_model or _MODEL_CALLERS[provider]
        self.sleep = sleep
        self.max_attempts = max_attempts

    async def run(self, system_prompt: str, user_prompt: str, api_key: str) -> str:
        """
        Return the raw text of the first successful model call.

        Raises:
            ModelsExhaustedError: every model was skipped or failed
            Exception: an unclassified error from the last model, re-raised as-is
        """
        for model_index, model in enumerate(self.models):
            is_last_model = model_index == len(self.models) - 1

            for attempt in range(1, self.max_attempts + 1):
                try:
                    logger.info(f"[AI] Attempt {attempt}/{self.max_attempts} with {self.provider} model {model}")
                    text = await self.call_model(model, system_prompt, user_prompt, api_key)
                    logger.info(f"[AI] Success with model {model}")
                    return text

                except Exception as e:
                    kind = classify_error(e)
                    logger.warning(f"[AI] Error with {model} (attempt {attempt}/{self.max_attempts}, {kind.value}): {e}")

                    if kind in (ErrorKind.NOT_FOUND, ErrorKind.OVERLOADED, ErrorKind.QUOTA_EXCEEDED):
                        logger.info(f"[AI] Skipping {model} ({kind.value})")
                        break

                    if kind == ErrorKind.RATE_LIMITED:
                        wait_ms = backoff_ms(attempt)
                        hint = suggested_retry_seconds(e)
                        if hint is not None:
                            if hint > MAX_SUGGESTED_WAIT_SECONDS:
                                logger.info(f"[AI] Suggested wait too long ({hint}s), moving to next model")
                                break
                            wait_ms = min(math.ceil(hint * 1000), MAX_BACKOFF_MS)

                        if attempt < self.max_attempts:
                            logger.info(f"[AI] Waiting {wait_ms}ms before retrying {model}")
                            await self.sleep(wait_ms / 1000)
                            continue
                        break

                    if not is_last_model:
                        logger.info(f"[AI] Non-recoverable error with {model}, trying next model")
                        break
                    raise

        raise ModelsExhaustedError(self.provider, self.models, self.config["exhausted_message"])


async def generate_with_ai(
    system_prompt: str,
    user_prompt: str,
    provider: str = DEFAULT_PROVIDER,
    gemini_key: str = DEFAULT_KEY_SLOT,
    openai_key: str = DEFAULT_KEY_SLOT,
    executor: Optional[FallbackExecutor] = None,
) -> str:
    """
    Generate with the selected provider and return the JSON payload of the
    response (see extract_json_from_response).

    The OpenAI path uses openai_key; any other provider value means Gemini
    with gemini_key.
    """
    provider = AIProvider.OPENAI.value if provider == AIProvider.OPENAI.value else AIProvider.GEMINI.value
    key_slot = openai_key if provider == AIProvider.OPENAI.value else gemini_key

    api_key = ModelConfig.get_api_key(provider, key_slot)
    if not api_key:
        raise ConfigurationError(
            "IA não configurada. Configure GEMINI_API_KEY ou OPENAI_API_KEY.",
            context={"provider": provider, "key_slot": key_slot},
        )

    logger.info(f"[AI] Using provider {provider} (key slot {key_slot})")
    executor = executor or FallbackExecutor(provider)
    text = await executor.run(system_prompt, user_prompt, api_key)
    return extract_json_from_response(text)


async def generate_plain_text(
    system_prompt: str,
    user_prompt: str,
    provider: str = DEFAULT_PROVIDER,
    key_slot: str = DEFAULT_KEY_SLOT,
    executor: Optional[FallbackExecutor] = None,
) -> str:
    """Same fallback chain as generate_with_ai, without JSON extraction"""
    api_key = ModelConfig.get_api_key(provider, key_slot)
    if not api_key:
        raise ConfigurationError(
            "IA não configurada. Configure GEMINI_API_KEY ou OPENAI_API_KEY.",
            context={"provider": provider, "key_slot": key_slot},
        )

    executor = executor or FallbackExecutor(provider)
    text = await executor.run(system_prompt, user_prompt, api_key)
    return text.strip()

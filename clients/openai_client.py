"""
OpenAI client for study content generation.
One call = one model, one attempt; retries and model fallback live in
services.ai_executor.
"""

import logging
from typing import Dict

from openai import AsyncOpenAI
from dotenv import load_dotenv

from utils.model_config import ModelConfig, AIProvider

load_dotenv()

logger = logging.getLogger(__name__)

_clients: Dict[str, AsyncOpenAI] = {}


def _get_client(api_key: str) -> AsyncOpenAI:
    if api_key not in _clients:
        _clients[api_key] = AsyncOpenAI(api_key=api_key)
    return _clients[api_key]


async def generate_text(model: str, system_prompt: str, user_prompt: str, api_key: str) -> str:
    """Single chat completion with separate system and user messages"""
    config = ModelConfig.get_config(AIProvider.OPENAI.value)
    client = _get_client(api_key)

    response = await client.chat.completions.create(
        model=model,
        messages=[
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ],
        temperature=config["temperature"],
        max_tokens=config["max_tokens"],
    )

    content = response.choices[0].message.content if response.choices else None
    if not content:
        raise ValueError("Resposta vazia da OpenAI")

    logger.debug(f"OpenAI {model} returned {len(content)} chars")
    return content

"""
Gemini client for study content generation.
One call = one model, one attempt; retries and model fallback live in
services.ai_executor.
"""

import logging
from typing import Dict

from google import genai
from google.genai import types
from dotenv import load_dotenv

from utils.model_config import ModelConfig, AIProvider

load_dotenv()

logger = logging.getLogger(__name__)

# One SDK client per API key
_clients: Dict[str, genai.Client] = {}


def _get_client(api_key: str) -> genai.Client:
    if api_key not in _clients:
        _clients[api_key] = genai.Client(api_key=api_key)
    return _clients[api_key]


async def generate_text(model: str, system_prompt: str, user_prompt: str, api_key: str) -> str:
    """
    Single Gemini generation. The system prompt is sent as a prefix of the
    user turn. Raises the SDK's APIError on HTTP failures and ValueError on
    an empty response.
    """
    config = ModelConfig.get_config(AIProvider.GEMINI.value)
    client = _get_client(api_key)

    response = await client.aio.models.generate_content(
        model=model,
        contents=f"{system_prompt}\n\n{user_prompt}",
        config=types.GenerateContentConfig(
            temperature=config["temperature"],
            top_k=config["top_k"],
            top_p=config["top_p"],
            max_output_tokens=config["max_tokens"],
        ),
    )

    text = response.text
    if not text:
        raise ValueError("Resposta vazia do Gemini")

    logger.debug(f"Gemini {model} returned {len(text)} chars")
    return text

"""
Model configuration and key selection for study content generation.
Centralized provider/model management: fallback chains, sampling
parameters, retry constants and per-slot API keys.
"""

import os
from typing import Dict, Any, List
from enum import Enum

from dotenv import load_dotenv

load_dotenv()


class AIProvider(str, Enum):
    GEMINI = "gemini"
    OPENAI = "openai"


# Provider configurations. "models" is the fallback chain, in priority order.
PROVIDER_CONFIGS: Dict[str, Dict[str, Any]] = {
    AIProvider.GEMINI.value: {
        "display_name": "Gemini",
        "env_prefix": "GEMINI_API_KEY",
        "models": [
            "gemini-3-flash-preview",
            "gemini-2.5-flash",
            "gemini-2.5-lite",
        ],
        "temperature": 0.7,
        "top_k": 40,
        "top_p": 0.95,
        "max_tokens": 32768,
        "exhausted_message": (
            "Todos os modelos Gemini estão indisponíveis. Verifique se sua chave API "
            "tem cota disponível ou tente novamente em alguns minutos."
        ),
    },
    AIProvider.OPENAI.value: {
        "display_name": "OpenAI",
        "env_prefix": "OPENAI_API_KEY",
        "models": [
            "gpt-4o",
            "gpt-4o-mini",
            "gpt-4-turbo",
            "gpt-3.5-turbo",
        ],
        "temperature": 0.7,
        "max_tokens": 16384,
        "exhausted_message": (
            "Todos os modelos OpenAI estão indisponíveis. Verifique se sua chave API "
            "está configurada corretamente."
        ),
    },
}

DEFAULT_PROVIDER = AIProvider.GEMINI.value

# Key slots selectable by callers, also the rotation order for best-effort jobs
KEY_SLOTS: List[str] = ["1", "2", "3", "4", "5"]
DEFAULT_KEY_SLOT = "1"

# Retry policy shared by every provider
MAX_ATTEMPTS_PER_MODEL = 3
BASE_BACKOFF_MS = 1000
MAX_BACKOFF_MS = 5000
MAX_SUGGESTED_WAIT_SECONDS = 30

# Low-priority jobs skip AI for this long after a quota error
QUOTA_COOLDOWN_SECONDS = 5 * 60


class ModelConfig:
    """Provider configuration manager"""

    @staticmethod
    def get_config(provider: str = DEFAULT_PROVIDER) -> Dict[str, Any]:
        """Get configuration for the given provider"""
        key = provider or DEFAULT_PROVIDER
        if key not in PROVIDER_CONFIGS:
            raise ValueError(f"Unknown provider: {key}. Available: {list(PROVIDER_CONFIGS.keys())}")
        return PROVIDER_CONFIGS[key]

    @staticmethod
    def get_models(provider: str = DEFAULT_PROVIDER) -> List[str]:
        """Fallback chain for a provider, highest priority first"""
        return list(ModelConfig.get_config(provider)["models"])

    @staticmethod
    def get_available_providers() -> List[str]:
        return [p.value for p in AIProvider]

    @staticmethod
    def get_api_key(provider: str = DEFAULT_PROVIDER, key_number: str = DEFAULT_KEY_SLOT) -> str:
        """
        Resolve the API key for a slot ("1"-"5").

        GEMINI_API_KEY_3 wins for slot "3"; otherwise the unsuffixed
        GEMINI_API_KEY is used. Unknown slots behave like slot "1".
        """
        prefix = ModelConfig.get_config(provider)["env_prefix"]
        slot = str(key_number) if str(key_number) in KEY_SLOTS else DEFAULT_KEY_SLOT
        return os.getenv(f"{prefix}_{slot}") or os.getenv(prefix) or ""

    @staticmethod
    def is_configured(provider: str = DEFAULT_PROVIDER) -> bool:
        """True when at least the default slot resolves to a key"""
        return bool(ModelConfig.get_api_key(provider, DEFAULT_KEY_SLOT))

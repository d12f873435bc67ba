# Study AI Utilities
from .json_repair import (
    extract_json_from_response,
    repair_json,
    safe_json_parse
)

from .model_config import (
    ModelConfig,
    AIProvider,
    PROVIDER_CONFIGS,
    DEFAULT_PROVIDER,
    KEY_SLOTS
)

from .quota import (
    QuotaCooldown,
    is_quota_error
)

__all__ = [
    'extract_json_from_response',
    'repair_json',
    'safe_json_parse',
    'ModelConfig',
    'AIProvider',
    'PROVIDER_CONFIGS',
    'DEFAULT_PROVIDER',
    'KEY_SLOTS',
    'QuotaCooldown',
    'is_quota_error'
]

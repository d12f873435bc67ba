import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

KEY_PREFIXES = ("GEMINI_API_KEY", "OPENAI_API_KEY")


@pytest.fixture
def no_api_keys(monkeypatch):
    """Remove every provider key (suffixed or not) from the environment"""
    for prefix in KEY_PREFIXES:
        monkeypatch.delenv(prefix, raising=False)
        for slot in range(1, 6):
            monkeypatch.delenv(f"{prefix}_{slot}", raising=False)
    return monkeypatch


@pytest.fixture
def gemini_key(no_api_keys):
    no_api_keys.setenv("GEMINI_API_KEY", "test-gemini-key")
    return "test-gemini-key"

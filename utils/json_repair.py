"""
JSON extraction and best-effort repair for LLM responses.

Models wrap their JSON in markdown fences, add commentary around it, or stop
mid-object when they hit the output token limit. extract_json_from_response
finds the payload; repair_json patches the common breakages; safe_json_parse
ties the two parse attempts together.
"""

import json
import logging
import re
from typing import Any

logger = logging.getLogger(__name__)

_EXTRACTION_PATTERNS = [
    re.compile(r'```json\s*([\s\S]*?)```', re.IGNORECASE),
    re.compile(r'```\s*([\s\S]*?)```'),
    re.compile(r'^\s*(\{[\s\S]*\})\s*$'),
    re.compile(r'^\s*(\[[\s\S]*\])\s*$'),
]

_TRAILING_COMMA = re.compile(r',\s*([}\]])')
_CONTROL_CHARS = re.compile(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]')


def extract_json_from_response(text: str) -> str:
    """
    Locate the JSON payload inside a free-text model response.

    Tries, in order: a ```json fence, any fence, the whole string as an
    object, the whole string as an array. Failing that, walks from the first
    '{' or '[' counting nesting depth until the matching closer. Never
    raises: the trimmed input is returned when nothing better is found.
    """
    if not text:
        return ""

    for pattern in _EXTRACTION_PATTERNS:
        match = pattern.search(text)
        if match and match.group(1):
            extracted = match.group(1).strip()
            if extracted.startswith("{") or extracted.startswith("["):
                return extracted

    starts = [i for i in (text.find("{"), text.find("[")) if i != -1]
    if starts:
        start = min(starts)
        opener = text[start]
        closer = "}" if opener == "{" else "]"

        depth = 0
        for i in range(start, len(text)):
            char = text[i]
            if char == opener:
                depth += 1
            elif char == closer:
                depth -= 1
                if depth == 0:
                    return text[start:i + 1]

    return text.strip()


def repair_json(json_string: str) -> str:
    """
    Patch the most common LLM JSON breakages.

    Removes trailing commas before '}' / ']', strips control characters other
    than newline, carriage return and tab, and appends the missing closing
    brackets and braces of a truncated document.
    """
    repaired = _TRAILING_COMMA.sub(r'\1', json_string)
    repaired = _CONTROL_CHARS.sub('', repaired)

    missing_brackets = repaired.count("[") - repaired.count("]")
    missing_braces = repaired.count("{") - repaired.count("}")

    if missing_brackets > 0:
        repaired += "]" * missing_brackets
    if missing_braces > 0:
        repaired += "}" * missing_braces

    return repaired


def safe_json_parse(json_string: str) -> Any:
    """
    Parse JSON, retrying once on a repaired copy.

    If the repaired copy does not parse either, the error from the first
    attempt is raised since it points at the real defect.
    """
    try:
        return json.loads(json_string)
    except json.JSONDecodeError as first_error:
        logger.warning(f"First JSON parse failed ({first_error}), attempting repair...")
        try:
            return json.loads(repair_json(json_string))
        except json.JSONDecodeError as second_error:
            logger.error(f"JSON repair failed: {second_error}")
            raise first_error

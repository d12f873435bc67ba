"""
Response extraction and JSON repair tests.

Run with:
    python3 -m pytest tests/test_json_repair.py -v
"""

import json

import pytest

from utils.json_repair import extract_json_from_response, repair_json, safe_json_parse


# ═══════════════════════════════════════════════════════════════════════════════
# 1. EXTRACTION
# ═══════════════════════════════════════════════════════════════════════════════

def test_extracts_json_fence():
    text = 'Aqui está o conteúdo:\n```json\n{"weekTitle": "Fé"}\n```\nBons estudos!'
    assert extract_json_from_response(text) == '{"weekTitle": "Fé"}'


def test_extracts_untagged_fence():
    assert extract_json_from_response("```\n[1, 2, 3]\n```") == "[1, 2, 3]"


def test_skips_fence_without_json_and_walks_brackets():
    text = '```python\nprint(1)\n```\nResultado: {"a": 1}'
    assert extract_json_from_response(text) == '{"a": 1}'


def test_extracts_object_surrounded_by_prose():
    text = 'Claro! {"a": {"b": [1, 2]}} Espero ter ajudado.'
    assert extract_json_from_response(text) == '{"a": {"b": [1, 2]}}'


def test_extracts_array_when_bracket_comes_first():
    text = 'Resposta: [{"x": 1}, {"x": 2}] fim'
    assert extract_json_from_response(text) == '[{"x": 1}, {"x": 2}]'


def test_whole_object_is_returned_trimmed():
    assert extract_json_from_response('   {"ok": true}  \n') == '{"ok": true}'


def test_text_without_json_is_returned_trimmed():
    assert extract_json_from_response("  sem json aqui  ") == "sem json aqui"


def test_empty_input():
    assert extract_json_from_response("") == ""


def test_extraction_of_raw_json_is_identity():
    payload = json.dumps({"lessons": [{"title": "A", "units": []}]})
    assert extract_json_from_response(payload) == payload


# ═══════════════════════════════════════════════════════════════════════════════
# 2. REPAIR
# ═══════════════════════════════════════════════════════════════════════════════

def test_trailing_commas_are_removed():
    assert safe_json_parse('{"a": [1, 2,], "b": 3,}') == {"a": [1, 2], "b": 3}


def test_dangling_comma_in_truncated_document():
    broken = '{"items": [{"x": 1,}, {"y": 2}'
    assert safe_json_parse(broken) == {"items": [{"x": 1}, {"y": 2}]}


def test_truncated_document_is_closed():
    assert repair_json('{"lessons": [{"title": "A"}') == '{"lessons": [{"title": "A"}]}'
    assert safe_json_parse('{"lessons": [{"title": "A"}') == {"lessons": [{"title": "A"}]}


def test_control_characters_are_stripped():
    assert safe_json_parse('{"a": "b\x01c"}') == {"a": "bc"}


def test_newlines_and_tabs_are_kept_by_repair():
    assert repair_json('{"a": 1,}\n\t') == '{"a": 1}\n\t'


def test_valid_json_is_parsed_directly():
    assert safe_json_parse('[1, {"a": null}]') == [1, {"a": None}]


def test_unrepairable_input_raises_first_error():
    with pytest.raises(json.JSONDecodeError) as excinfo:
        safe_json_parse("{não é json")
    # The error refers to the original text, not the repaired copy
    assert excinfo.value.doc == "{não é json"

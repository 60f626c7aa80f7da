#!/usr/bin/env python3
"""
Tests for JSON recovery from free-text Gemini replies
"""

import pytest

from app.services.gemini import GeminiResponseParser, ParseError, detect_document_type

parse = GeminiResponseParser.parse_json_response


def test_direct_json():
    assert parse('{"a":1}') == {"a": 1}
    assert parse('  \n{"a": [1, 2]}\n  ') == {"a": [1, 2]}


def test_fenced_code_block():
    assert parse('Here is the result:\n```json\n{"a":1}\n```') == {"a": 1}
    assert parse('```JSON\n{"a": {"b": 2}}\n```\nThanks') == {"a": {"b": 2}}
    assert parse('Result:\n```\n{"untagged": true}\n```') == {"untagged": True}


def test_object_embedded_in_prose():
    text = 'Sure! The classification is {"document_type": "Invoice"} as requested.'
    assert parse(text) == {"document_type": "Invoice"}


def test_deeply_nested_object_in_prose():
    text = 'Result: {"a": {"b": {"c": {"d": {"e": [1, {"f": 2}]}}}}} done'
    assert parse(text) == {"a": {"b": {"c": {"d": {"e": [1, {"f": 2}]}}}}}


def test_braces_inside_strings_are_ignored():
    text = 'Output -> {"note": "use } and { freely", "quote": "say \\"hi\\" }"} end'
    assert parse(text) == {"note": "use } and { freely", "quote": 'say "hi" }'}


def test_scan_skips_invalid_candidates():
    # The first brace pair is not JSON; the second is
    text = 'Template {name} filled: {"name": "Acme"}'
    assert parse(text) == {"name": "Acme"}


def test_no_json_raises_parse_error():
    with pytest.raises(ParseError) as exc_info:
        parse("no json at all")
    assert str(exc_info.value) == "Unable to extract valid JSON from model response"
    assert exc_info.value.response_preview == "no json at all"


@pytest.mark.parametrize("text", ["", "   ", "\n\t"])
def test_empty_input_raises_parse_error(text):
    with pytest.raises(ParseError):
        parse(text)


def test_unbalanced_object_raises_parse_error():
    with pytest.raises(ParseError):
        parse('Here you go: {"a": [1, 2')


def test_detect_document_type():
    assert detect_document_type({"document_type": "Invoice", "data": {}}) == "Invoice"
    assert detect_document_type({"classification": {"type": "Procurement", "subtype": "Purchase Order"}}) == "Purchase Order"
    assert detect_document_type({"vendor": "Acme"}) is None
    assert detect_document_type(["not", "a", "dict"]) is None

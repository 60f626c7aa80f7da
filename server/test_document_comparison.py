#!/usr/bin/env python3
"""
Tests for the document comparison flow with mocked persistence and model
"""

import asyncio
import json
import uuid
from datetime import datetime
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from app.services.document_comparison_service import (
    DocumentComparisonService,
    DocumentNotFoundError,
    TooManyTargetsError,
    target_titles_key
)
from app.services.gemini import GeminiPrompts, ParseError

COMPARISON_REPLY = {
    "summary": {"match_score": 72.5, "overall_status": "Partial Match"},
    "targets": [
        {
            "index": 0,
            "title": "INV-7.pdf",
            "score": 72.5,
            "fields": [
                {"field": "vendor", "source_value": "ACME", "target_value": "ACME", "match": True,
                 "match_percentage": 100, "weight": 0.3},
                {"field": "po_number", "source_value": "PO-1", "target_value": None, "match": None},
            ],
            "line_items": [
                {"id": 1, "name": "Bolts", "source_quantity": 10, "target_quantity": 8,
                 "quantity_match": False, "price_match": True, "total_match": False}
            ],
            "detailed_analysis": {"critical_issues": ["PO number missing"]}
        }
    ]
}


def make_document(role, title, doc_type="Invoice", extracted_json=None):
    return SimpleNamespace(
        id=uuid.uuid4(),
        role=role,
        title=title,
        doc_type=doc_type,
        mime_type="application/pdf",
        extracted_json=extracted_json if extracted_json is not None else {"title": title},
        created_at=datetime(2024, 1, 1)
    )


def make_gemini(reply=COMPARISON_REPLY, raw=None):
    gemini_service = MagicMock()
    gemini_service.prompts = GeminiPrompts()
    gemini_service.generate_json_with_text = AsyncMock(return_value=(reply, raw or json.dumps(reply)))
    return gemini_service


class CrudPatch:
    """Patches the crud functions used by the comparison service"""

    def __init__(self, source, targets, cached=None):
        self.saved = SimpleNamespace(id=uuid.uuid4())
        self.patches = [
            patch("app.db.crud.get_comparison_document", new=AsyncMock(return_value=source)),
            patch("app.db.crud.get_comparison_documents_by_ids", new=AsyncMock(return_value=targets)),
            patch("app.db.crud.get_latest_comparison", new=AsyncMock(return_value=cached)),
            patch("app.db.crud.save_comparison_result", new=AsyncMock(return_value=self.saved)),
        ]

    def __enter__(self):
        self.mocks = [p.start() for p in self.patches]
        return self

    def __exit__(self, *exc):
        for p in self.patches:
            p.stop()

    @property
    def save(self):
        return self.mocks[3]

    @property
    def latest(self):
        return self.mocks[2]


def test_target_titles_key_is_order_independent():
    assert target_titles_key(["b.pdf", "a.pdf"]) == "a.pdf, b.pdf"
    assert target_titles_key(["a.pdf", "b.pdf"]) == target_titles_key(["b.pdf", "a.pdf"])


def test_new_comparison_calls_model_and_persists():
    source = make_document("source", "PO-100.pdf", "Purchase Order", {"po_number": "PO-1"})
    target = make_document("target", "INV-7.pdf")
    gemini_service = make_gemini()

    with CrudPatch(source, [target]) as crud_patch:
        service = DocumentComparisonService(gemini_service)
        result = asyncio.run(service.compare(MagicMock(), source.id, [target.id]))

    assert result.from_cache is False
    assert result.overall_match == 73
    assert result.comparison_id == str(crud_patch.saved.id)

    assert [row.field for row in result.header_results] == ["vendor (Target 1)", "po_number (Target 1)"]
    assert result.header_results[1].target_value == "N/A"
    assert result.header_results[1].match is False

    assert len(result.line_items) == 1
    assert result.line_items[0].target_index == 0
    assert result.comparison_summary["overall_status"] == "Partial Match"
    assert result.comparison_summary["target_specific_results"] == COMPARISON_REPLY["targets"]

    prompt = gemini_service.generate_json_with_text.call_args.args[0]
    assert json.dumps({"po_number": "PO-1"}, indent=2) in prompt
    assert '"title": "INV-7.pdf"' in prompt

    saved = crud_patch.save.call_args.kwargs
    assert saved["target_titles_key"] == "INV-7.pdf"
    assert saved["target_count"] == 1
    assert saved["match_percentage"] == 73
    assert saved["results_json"]["raw_response_preview"] == json.dumps(COMPARISON_REPLY)[:2000]


def test_raw_response_preview_is_truncated():
    source = make_document("source", "PO-100.pdf")
    target = make_document("target", "INV-7.pdf")
    raw = "x" * 5000

    with CrudPatch(source, [target]) as crud_patch:
        service = DocumentComparisonService(make_gemini(raw=raw))
        asyncio.run(service.compare(MagicMock(), source.id, [target.id]))

    assert len(crud_patch.save.call_args.kwargs["results_json"]["raw_response_preview"]) == 2000


def test_cached_comparison_skips_model():
    source = make_document("source", "PO-100.pdf")
    targets = [make_document("target", "b.pdf"), make_document("target", "a.pdf")]
    cached = SimpleNamespace(
        id=uuid.uuid4(),
        results_json={**COMPARISON_REPLY, "match_percentage": 64}
    )
    gemini_service = make_gemini()

    with CrudPatch(source, targets, cached=cached) as crud_patch:
        service = DocumentComparisonService(gemini_service)
        result = asyncio.run(service.compare(MagicMock(), source.id, [t.id for t in targets]))

    assert result.from_cache is True
    assert result.overall_match == 64
    assert result.comparison_id == str(cached.id)
    assert crud_patch.latest.call_args.args[2] == "a.pdf, b.pdf"
    gemini_service.generate_json_with_text.assert_not_called()
    crud_patch.save.assert_not_called()


def test_cached_row_without_targets_is_recomputed():
    source = make_document("source", "PO-100.pdf")
    target = make_document("target", "INV-7.pdf")
    cached = SimpleNamespace(id=uuid.uuid4(), results_json={"summary": {"match_score": 10}})
    gemini_service = make_gemini()

    with CrudPatch(source, [target], cached=cached):
        result = asyncio.run(DocumentComparisonService(gemini_service).compare(MagicMock(), source.id, [target.id]))

    assert result.from_cache is False
    gemini_service.generate_json_with_text.assert_awaited_once()


def test_reply_without_summary_raises_parse_error():
    source = make_document("source", "PO-100.pdf")
    target = make_document("target", "INV-7.pdf")

    with CrudPatch(source, [target]) as crud_patch:
        service = DocumentComparisonService(make_gemini(reply={"targets": []}))
        with pytest.raises(ParseError):
            asyncio.run(service.compare(MagicMock(), source.id, [target.id]))
        crud_patch.save.assert_not_called()


def test_missing_source_raises_not_found():
    target = make_document("target", "INV-7.pdf")

    with CrudPatch(None, [target]):
        with pytest.raises(DocumentNotFoundError):
            asyncio.run(DocumentComparisonService(make_gemini()).compare(MagicMock(), uuid.uuid4(), [target.id]))


def test_target_role_document_is_not_a_source():
    not_a_source = make_document("target", "INV-1.pdf")

    with CrudPatch(not_a_source, []):
        with pytest.raises(DocumentNotFoundError):
            asyncio.run(DocumentComparisonService(make_gemini()).compare(MagicMock(), not_a_source.id, [uuid.uuid4()]))


def test_targets_without_extraction_raise_not_found():
    source = make_document("source", "PO-100.pdf")
    target = make_document("target", "INV-7.pdf")
    target.extracted_json = None

    with CrudPatch(source, [target]):
        with pytest.raises(DocumentNotFoundError):
            asyncio.run(DocumentComparisonService(make_gemini()).compare(MagicMock(), source.id, [target.id]))


def test_more_than_five_targets_rejected():
    with pytest.raises(TooManyTargetsError):
        asyncio.run(DocumentComparisonService(make_gemini()).compare(
            MagicMock(), uuid.uuid4(), [uuid.uuid4() for _ in range(6)]
        ))


def test_duplicate_target_ids_are_skipped():
    source = make_document("source", "PO-100.pdf")
    target = make_document("target", "INV.pdf")
    others = [uuid.uuid4() for _ in range(4)]
    gemini_service = make_gemini()

    with CrudPatch(source, [target]) as crud_patch:
        service = DocumentComparisonService(gemini_service)
        result = asyncio.run(service.compare(MagicMock(), source.id, [target.id, *others, target.id]))

    loaded_ids = crud_patch.mocks[1].call_args.args[1]
    assert loaded_ids == [target.id, *others]
    assert result.target_documents == [{"index": 0, "title": "INV.pdf", "type": "Invoice", "json": {"title": "INV.pdf"}}]
    assert crud_patch.latest.call_args.args[2] == "INV.pdf"


def test_targets_with_the_same_title_are_sent_once():
    source = make_document("source", "PO-100.pdf")
    first = make_document("target", "INV.pdf")
    copy = make_document("target", "INV.pdf")
    gemini_service = make_gemini()

    with CrudPatch(source, [first, copy]) as crud_patch:
        asyncio.run(DocumentComparisonService(gemini_service).compare(MagicMock(), source.id, [first.id, copy.id]))

    prompt = gemini_service.generate_json_with_text.call_args.args[0]
    assert prompt.count('"title": "INV.pdf"') == 1
    assert crud_patch.save.call_args.kwargs["target_count"] == 1
    assert crud_patch.save.call_args.kwargs["target_titles_key"] == "INV.pdf"


def test_placeholder_text_inside_source_is_not_substituted():
    source_json = {"note": "literal {targetDocs} and {sourceDoc}", "path": "C:\\temp\\1"}
    targets = [{"index": 0, "title": "INV.pdf", "type": "Invoice", "json": {}}]

    prompt = GeminiPrompts.get_comparison_prompt(source_json, targets)

    assert json.dumps(source_json, indent=2) in prompt
    assert prompt.count('"title": "INV.pdf"') == 1
    assert "**Target Documents:** [" in prompt

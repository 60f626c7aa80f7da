#!/usr/bin/env python3
"""
Tests for quick seven-category file classification
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.services.file_classification_service import FileClassificationService
from app.services.gemini import GeminiPrompts, ParseError, UpstreamError


def make_service(reply=None):
    gemini_service = MagicMock()
    gemini_service.prompts = GeminiPrompts()
    gemini_service.analyze_document = AsyncMock(return_value=reply)
    return FileClassificationService(gemini_service), gemini_service


@pytest.mark.parametrize("file_name,mime_type,classification,confidence", [
    ("march.csv", "text/csv", "report", 0.9),
    ("Ledger.XLSX", "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet", "report", 0.9),
    ("old.xls", "application/vnd.ms-excel", "report", 0.9),
    ("thread.eml", "message/rfc822", "email", 0.95),
    ("outlook.msg", "application/vnd.ms-outlook", "email", 0.95),
    ("notes.txt", "text/plain", "other", 0.5),
    ("no_extension", "", "other", 0.5),
])
def test_non_visual_files_use_extension(file_name, mime_type, classification, confidence):
    service, gemini_service = make_service()

    result = asyncio.run(service.classify_file(file_name, mime_type, b"data"))

    assert result.classification == classification
    assert result.confidence == confidence
    gemini_service.analyze_document.assert_not_called()


def test_pdf_uses_vision_model():
    reply = {
        "classification": "invoice",
        "confidence": 0.92,
        "metadata": {"detected_id": "INV-42"}
    }
    service, gemini_service = make_service(reply)

    result = asyncio.run(service.classify_file("inv.pdf", "application/pdf", b"%PDF"))

    assert result.classification == "invoice"
    assert result.confidence == 0.92
    assert result.metadata == {"detected_id": "INV-42"}
    prompt = gemini_service.analyze_document.call_args.args[0]
    assert "purchase_order" in prompt


def test_defaults_for_missing_confidence_and_metadata():
    service, _ = make_service({"classification": "receipt"})

    result = asyncio.run(service.classify_file("photo.jpg", "image/jpeg", b"jpg"))

    assert result.classification == "receipt"
    assert result.confidence == 0.7
    assert result.metadata == {}


def test_unknown_category_becomes_other():
    service, _ = make_service({"classification": "tax_form", "confidence": 0.8})

    result = asyncio.run(service.classify_file("scan.png", "image/png", b"png"))

    assert result.classification == "other"


def test_reply_without_classification_raises():
    service, _ = make_service({"document": "invoice"})

    with pytest.raises(ParseError):
        asyncio.run(service.classify_file("scan.png", "image/png", b"png"))


@pytest.mark.parametrize("file_name,mime_type,classification", [
    ("scan.pdf", "application/pdf", "report"),
    ("photo.jpg", "image/jpeg", "receipt"),
])
def test_unparseable_reply_falls_back_by_file_type(file_name, mime_type, classification):
    service, gemini_service = make_service()
    gemini_service.analyze_document.side_effect = ParseError(
        response_preview='{"classification": "invoice", "confidence": 0.9,}'
    )

    result = asyncio.run(service.classify_file(file_name, mime_type, b"data"))

    assert result.classification == classification
    assert result.confidence == 0.6
    assert result.metadata == {}


def test_upstream_error_is_not_masked_by_fallback():
    service, gemini_service = make_service()
    gemini_service.analyze_document.side_effect = UpstreamError("Gemini API error: 500 boom", status_code=500)

    with pytest.raises(UpstreamError):
        asyncio.run(service.classify_file("scan.pdf", "application/pdf", b"%PDF"))

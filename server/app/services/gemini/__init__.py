"""
Gemini Document AI Service - Classification, Extraction and Comparison

Quick Start:
    from app.services.gemini import get_gemini_service

    service = get_gemini_service()
    extracted = await service.classify_document(pdf_bytes, "application/pdf")
"""

from .service import GeminiDocumentAIService, get_gemini_service
from .client import GeminiVisionClient
from .errors import GeminiServiceError, UpstreamError, ParseError
from .prompts import GeminiPrompts, DOCUMENT_CLASSIFICATION_PROMPT, COMPARISON_PROMPT
from .utils import GeminiResponseParser, encode_document_base64, detect_document_type
from .models import (
    ClassificationResult,
    FieldComparison,
    LineItemComparison,
    ComparisonRow,
    DetailedComparisonResult
)

__all__ = [
    'GeminiDocumentAIService',
    'get_gemini_service',
    'GeminiVisionClient',
    'GeminiServiceError',
    'UpstreamError',
    'ParseError',
    'GeminiPrompts',
    'DOCUMENT_CLASSIFICATION_PROMPT',
    'COMPARISON_PROMPT',
    'GeminiResponseParser',
    'encode_document_base64',
    'detect_document_type',
    'ClassificationResult',
    'FieldComparison',
    'LineItemComparison',
    'ComparisonRow',
    'DetailedComparisonResult'
]

"""
Quick seven-category file classification.

Spreadsheets and mail files are classified from their extension; images and
PDFs are sent to the vision model with a short classification prompt.
"""

import logging
import os
from typing import Optional

from app.services.gemini import GeminiDocumentAIService, ParseError, get_gemini_service
from app.services.gemini.models import DOCUMENT_CLASSIFICATIONS, ClassificationResult

logger = logging.getLogger(__name__)

REPORT_EXTENSIONS = {'csv', 'xlsx', 'xls'}
EMAIL_EXTENSIONS = {'eml', 'msg'}

DEFAULT_MODEL_CONFIDENCE = 0.7
FALLBACK_CONFIDENCE = 0.6


def is_visual_document(mime_type: Optional[str]) -> bool:
    mime_type = (mime_type or '').lower()
    return mime_type.startswith('image/') or mime_type == 'application/pdf'


def classify_by_extension(file_name: str) -> ClassificationResult:
    extension = os.path.splitext(file_name or '')[1].lstrip('.').lower()

    if extension in REPORT_EXTENSIONS:
        return ClassificationResult(classification='report', confidence=0.9)
    if extension in EMAIL_EXTENSIONS:
        return ClassificationResult(classification='email', confidence=0.95)
    return ClassificationResult(classification='other', confidence=0.5)


def fallback_classification(mime_type: Optional[str]) -> ClassificationResult:
    if (mime_type or '').lower() == 'application/pdf':
        return ClassificationResult(classification='report', confidence=FALLBACK_CONFIDENCE)
    return ClassificationResult(classification='receipt', confidence=FALLBACK_CONFIDENCE)


class FileClassificationService:
    def __init__(self, gemini_service: Optional[GeminiDocumentAIService] = None):
        self._gemini_service = gemini_service

    @property
    def gemini_service(self) -> GeminiDocumentAIService:
        if self._gemini_service is None:
            self._gemini_service = get_gemini_service()
        return self._gemini_service

    async def classify_file(self, file_name: str, mime_type: str, data: bytes) -> ClassificationResult:
        """
        Classify an uploaded file.

        A reply that is not JSON falls back to ``report`` for PDFs and
        ``receipt`` for images.

        Raises:
            UpstreamError: If the vision call fails
            ParseError: If the JSON reply has no usable classification
        """
        logger.info(f"🏷️ Classifying file: {file_name}, type: {mime_type}")

        if not is_visual_document(mime_type):
            result = classify_by_extension(file_name)
            logger.info(f"📁 Classified {file_name} by extension as {result.classification}")
            return result

        try:
            reply = await self.gemini_service.analyze_document(
                self.gemini_service.prompts.get_quick_classification_prompt(),
                data,
                mime_type,
                operation="quick classification"
            )
        except ParseError as e:
            fallback = fallback_classification(mime_type)
            logger.warning(
                f"⚠️ Unparseable classification reply for {file_name} ({e}), "
                f"falling back to {fallback.classification}"
            )
            return fallback

        if not isinstance(reply, dict) or not reply.get('classification'):
            raise ParseError(
                "Invalid classification result",
                response_preview=str(reply)[:200]
            )

        classification = str(reply['classification']).strip().lower()
        if classification not in DOCUMENT_CLASSIFICATIONS:
            logger.warning(f"⚠️ Unknown classification '{classification}', using 'other'")
            classification = 'other'

        confidence = reply.get('confidence')
        try:
            confidence = float(confidence) if confidence else DEFAULT_MODEL_CONFIDENCE
        except (TypeError, ValueError):
            confidence = DEFAULT_MODEL_CONFIDENCE

        metadata = reply.get('metadata')
        result = ClassificationResult(
            classification=classification,
            confidence=confidence,
            metadata=metadata if isinstance(metadata, dict) else {}
        )
        logger.info(f"✅ Classified {file_name} as {result.classification} ({result.confidence:.2f})")
        return result

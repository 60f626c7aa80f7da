"""
Gemini Document AI Service - Document Classification and Extraction

This service sends business documents to the Gemini vision API, classifies
them against a fixed 8-category taxonomy and recovers the structured JSON
the model returns.

Key Features:
- Taxonomy classification with content extraction
- Invoice field extraction
- Text-only JSON generation for document comparison
- Multi-strategy JSON recovery from free-text replies

The service calls the client exactly once per operation. Retries and
timeouts belong to GeminiVisionClient; upstream and parse failures are
surfaced to the caller unchanged.
"""

import logging
import time
from typing import Any, Dict, Optional, Tuple

from .client import GeminiVisionClient
from .errors import ParseError, UpstreamError
from .prompts import GeminiPrompts
from .utils import GeminiResponseParser, encode_document_base64

logger = logging.getLogger(__name__)


class GeminiDocumentAIService:
    """
    Gemini Document AI Service

    Wraps the Gemini vision client with the prompts and response parsing
    used by the document classification and comparison flows.
    """

    def __init__(self, client: Optional[GeminiVisionClient] = None, config: Dict[str, Any] = None):
        """
        Initialize Gemini Document AI service

        Args:
            client: Optional preconfigured client (tests inject one with a mock transport)
            config: Optional configuration dictionary
        """
        self.config = config or {}
        self.client = client or GeminiVisionClient()
        self.response_parser = GeminiResponseParser()
        self.prompts = GeminiPrompts()

        # Processing statistics
        self.stats = {
            'total_requests': 0,
            'successful_requests': 0,
            'upstream_failures': 0,
            'parse_failures': 0,
            'total_processing_time': 0.0
        }

        logger.info("✅ Gemini Document AI Service initialized")
        logger.info(f"📋 Model: {self.client.model}")

    def is_available(self) -> bool:
        return self.client.is_available()

    async def classify_document(self, document_bytes: bytes, mime_type: str) -> Any:
        """
        Classify a document and extract its content as structured JSON.

        Args:
            document_bytes: Raw document bytes (image or PDF)
            mime_type: MIME type of the document

        Returns:
            Parsed JSON produced by the model

        Raises:
            UpstreamError: If the Gemini call fails
            ParseError: If no JSON can be recovered from the reply
        """
        return await self.analyze_document(
            self.prompts.get_document_classification_prompt(),
            document_bytes,
            mime_type,
            operation="classification"
        )

    async def extract_invoice_data(self, document_bytes: bytes, mime_type: str) -> Any:
        """Extract invoice fields (number, dates, vendor, totals, line items)."""
        return await self.analyze_document(
            self.prompts.get_invoice_extraction_prompt(),
            document_bytes,
            mime_type,
            operation="invoice extraction"
        )

    async def analyze_document(
        self,
        prompt: str,
        document_bytes: bytes,
        mime_type: str,
        operation: str = "analysis"
    ) -> Any:
        """Send ``prompt`` with the inline document and parse the JSON reply."""
        base64_data = encode_document_base64(document_bytes)
        logger.info(f"📄 Starting {operation}: {mime_type}, base64 length: {len(base64_data)}")

        result, _ = await self._run(
            operation,
            prompt,
            base64_data=base64_data,
            mime_type=mime_type
        )
        return result

    async def generate_json(self, prompt: str, max_output_tokens: Optional[int] = None) -> Any:
        """
        Text-only request whose reply must contain a JSON object.

        Used by the comparison flow, which sends extracted JSON instead of
        document bytes.
        """
        result, _ = await self.generate_json_with_text(prompt, max_output_tokens)
        return result

    async def generate_json_with_text(
        self,
        prompt: str,
        max_output_tokens: Optional[int] = None
    ) -> Tuple[Any, str]:
        """Like generate_json, but also returns the raw reply text."""
        return await self._run(
            "text generation",
            prompt,
            max_output_tokens=max_output_tokens
        )

    async def _run(
        self,
        operation: str,
        prompt: str,
        base64_data: Optional[str] = None,
        mime_type: Optional[str] = None,
        max_output_tokens: Optional[int] = None
    ) -> Tuple[Any, str]:
        start_time = time.time()
        self.stats['total_requests'] += 1

        try:
            response_text = await self.client.generate_content(
                prompt,
                base64_data=base64_data,
                mime_type=mime_type,
                max_output_tokens=max_output_tokens
            )
        except UpstreamError as e:
            self.stats['upstream_failures'] += 1
            logger.error(f"❌ Gemini {operation} failed: {e}")
            raise

        try:
            result = self.response_parser.parse_json_response(response_text)
        except ParseError:
            self.stats['parse_failures'] += 1
            logger.error(f"❌ Could not parse Gemini {operation} response")
            raise

        processing_time = time.time() - start_time
        self.stats['successful_requests'] += 1
        self.stats['total_processing_time'] += processing_time
        logger.info(f"✅ Gemini {operation} completed in {processing_time:.2f}s")

        return result, response_text

    def get_stats(self) -> Dict[str, Any]:
        stats = dict(self.stats)
        total = stats['total_requests']
        stats['success_rate'] = (stats['successful_requests'] / total * 100) if total else 0.0
        return stats


_service: Optional[GeminiDocumentAIService] = None


def get_gemini_service() -> GeminiDocumentAIService:
    """Process-wide service instance, created on first use (FastAPI dependency)."""
    global _service
    if _service is None:
        _service = GeminiDocumentAIService()
    return _service

"""
Utility functions for the Gemini document service.

This module provides document encoding helpers and the response parser that
recovers JSON from free-text model replies.
"""

import base64
import json
import logging
import re
from typing import Any, Iterator, Optional, Tuple

from .errors import ParseError

logger = logging.getLogger(__name__)

# ```json { ... } ``` (tag optional, case-insensitive)
CODE_BLOCK_PATTERN = re.compile(r'```(?:json)?\s*(\{.*?\})\s*```', re.DOTALL | re.IGNORECASE)


def encode_document_base64(document_bytes: bytes) -> str:
    """Encode raw document bytes for the ``inline_data`` part of a request."""
    return base64.b64encode(document_bytes).decode('utf-8')


class GeminiResponseParser:
    """Parses JSON out of Gemini text responses"""

    @staticmethod
    def parse_json_response(response_text: str) -> Any:
        """
        Parse JSON from a Gemini reply with a precision-first fallback cascade.

        Handles:
        - Pure JSON: {"key": "value"}
        - Markdown wrapped: ```json\\n{...}\\n```
        - Conversational with JSON: "Here is the result: {...} Let me know..."

        Strategies run in order and each is tried only if the previous one
        failed. The balanced-object scan is the most lenient and can pick up
        example JSON embedded in surrounding prose.

        Args:
            response_text: Raw text returned by the model

        Returns:
            The parsed JSON value

        Raises:
            ParseError: If every strategy fails
        """
        if not response_text or not response_text.strip():
            logger.error("Empty response from Gemini")
            raise ParseError(response_preview="")

        # ✅ STRATEGY 1: Direct JSON parse
        try:
            parsed = json.loads(response_text.strip())
            logger.info("✅ Strategy 1: Direct JSON parse succeeded")
            return parsed
        except json.JSONDecodeError:
            pass

        logger.info("Strategy 1 failed - trying code block extraction...")

        # ✅ STRATEGY 2: Extract JSON from ```json``` blocks
        code_block = GeminiResponseParser._extract_code_block(response_text)
        if code_block is not None:
            try:
                parsed = json.loads(code_block)
                logger.info("✅ Strategy 2: Code block extraction succeeded")
                return parsed
            except json.JSONDecodeError as e:
                logger.warning(f"Strategy 2 failed: {e}")

        logger.info("Strategy 2 failed - trying balanced object scan...")

        # ✅ STRATEGY 3: First balanced {...} object that parses
        for start, end in GeminiResponseParser._iter_balanced_objects(response_text):
            candidate = response_text[start:end]
            try:
                parsed = json.loads(candidate)
                logger.info("✅ Strategy 3: Balanced object scan succeeded")
                return parsed
            except json.JSONDecodeError as e:
                logger.debug(f"Candidate at offset {start} rejected: {e}")

        logger.error("❌ All parsing strategies failed")
        logger.error(f"Response text (first 500 chars): {response_text[:500]}")
        raise ParseError(response_preview=response_text[:200])

    @staticmethod
    def _extract_code_block(response_text: str) -> Optional[str]:
        """Return the ``{...}`` body of the first fenced code block, if any."""
        match = CODE_BLOCK_PATTERN.search(response_text)
        if not match:
            return None
        return match.group(1).strip()

    @staticmethod
    def _iter_balanced_objects(text: str) -> Iterator[Tuple[int, int]]:
        """
        Yield ``(start, end)`` spans of balanced top-level ``{...}`` objects.

        Brace depth is tracked with an explicit counter, so nesting depth is
        unbounded. Braces inside JSON string literals (including escaped
        quotes) are ignored. When a candidate is unbalanced the scan resumes
        at the next opening brace.
        """
        search_from = 0
        while True:
            start = text.find('{', search_from)
            if start == -1:
                return

            end = GeminiResponseParser._find_matching_brace(text, start)
            if end is None:
                search_from = start + 1
                continue

            yield start, end
            search_from = start + 1

    @staticmethod
    def _find_matching_brace(text: str, start: int) -> Optional[int]:
        """Index one past the brace closing the object opened at ``start``."""
        depth = 0
        in_string = False
        escaped = False

        for i in range(start, len(text)):
            char = text[i]

            if in_string:
                if escaped:
                    escaped = False
                elif char == '\\':
                    escaped = True
                elif char == '"':
                    in_string = False
                continue

            if char == '"':
                in_string = True
            elif char == '{':
                depth += 1
            elif char == '}':
                depth -= 1
                if depth == 0:
                    return i + 1

        return None


DOCUMENT_TYPE_KEYS = ('document_type', 'documentType', 'doc_type', 'type', 'classification', 'category')


def detect_document_type(extracted: Any) -> Optional[str]:
    """Best-effort document type from a classification reply, e.g. ``{"document_type": "Invoice"}``."""
    if not isinstance(extracted, dict):
        return None

    for key in DOCUMENT_TYPE_KEYS:
        value = extracted.get(key)
        if isinstance(value, dict):
            # {"classification": {"type": "Invoice", "subtype": ...}}
            value = value.get('subtype') or value.get('type') or value.get('name')
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None

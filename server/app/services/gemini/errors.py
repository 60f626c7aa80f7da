"""Exceptions raised by the Gemini document service."""

from typing import Optional


class GeminiServiceError(Exception):
    """Base class for Gemini service failures."""
    pass


class UpstreamError(GeminiServiceError):
    """
    Raised when the call to the Gemini API fails.

    Covers transport failures, non-2xx responses, envelopes flagged with
    ``success: false`` and responses without candidate text. The provider's
    message is kept in ``str(error)``.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ParseError(GeminiServiceError):
    """Raised when no JSON value can be recovered from a model response."""

    def __init__(self, message: str = "Unable to extract valid JSON from model response", response_preview: str = ""):
        super().__init__(message)
        self.response_preview = response_preview

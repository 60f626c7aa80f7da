"""
Async HTTP client for the Gemini ``generateContent`` endpoint.

Owns the transport concerns of talking to Gemini: request body layout,
API key header, timeouts and retries. Everything above this layer sees one
call that returns the candidate text or raises ``UpstreamError``.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from app import config
from .errors import UpstreamError
from .retry_handler import RetryConfig, RetryHandler

logger = logging.getLogger(__name__)


class GeminiVisionClient:
    """
    Thin async wrapper around the Gemini REST API.

    Request body:
        {contents: [{parts: [{text}, {inline_data: {mime_type, data}}]}],
         generationConfig: {temperature, maxOutputTokens}}

    Response envelope:
        {candidates: [{content: {parts: [{text}]}}]}
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        api_base: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        max_retries: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize the Gemini client.

        Args:
            api_key: Gemini API key (defaults to GEMINI_API_KEY)
            model: Model name (defaults to GEMINI_MODEL)
            api_base: REST base URL (defaults to GEMINI_API_BASE)
            timeout_seconds: Read timeout for a single attempt
            max_retries: Retries for 429/5xx/transport errors
            transport: Optional httpx transport, used by tests
        """
        self.api_key = api_key if api_key is not None else config.GEMINI_API_KEY
        self.model = model or config.GEMINI_MODEL
        self.api_base = (api_base or config.GEMINI_API_BASE).rstrip('/')

        timeout = timeout_seconds if timeout_seconds is not None else config.GEMINI_TIMEOUT_SECONDS
        self._http_timeout = httpx.Timeout(
            timeout=timeout,
            connect=config.GEMINI_CONNECT_TIMEOUT,
            read=timeout
        )
        self._transport = transport

        retries = max_retries if max_retries is not None else config.GEMINI_HTTP_MAX_RETRIES
        self.retry_handler = RetryHandler(RetryConfig(max_retries=retries))

        if self.api_key:
            logger.info(f"✅ Gemini client initialized with model: {self.model}")
        else:
            logger.warning("⚠️ Gemini client initialized without API key")

    @property
    def endpoint(self) -> str:
        return f"{self.api_base}/models/{self.model}:generateContent"

    def is_available(self) -> bool:
        """Check if an API key is configured."""
        return bool(self.api_key)

    @staticmethod
    def build_request_body(
        prompt: str,
        base64_data: Optional[str] = None,
        mime_type: Optional[str] = None,
        temperature: float = config.GEMINI_TEMPERATURE,
        max_output_tokens: int = config.GEMINI_MAX_OUTPUT_TOKENS
    ) -> Dict[str, Any]:
        """Build a ``generateContent`` body with an optional inline document."""
        parts = [{"text": prompt}]
        if base64_data is not None:
            parts.append({
                "inline_data": {
                    "mime_type": mime_type,
                    "data": base64_data
                }
            })

        return {
            "contents": [{"parts": parts}],
            "generationConfig": {
                "temperature": temperature,
                "maxOutputTokens": max_output_tokens
            }
        }

    async def generate_content(
        self,
        prompt: str,
        base64_data: Optional[str] = None,
        mime_type: Optional[str] = None,
        max_output_tokens: Optional[int] = None
    ) -> str:
        """
        Send one ``generateContent`` request and return the candidate text.

        Args:
            prompt: Prompt text
            base64_data: Base64-encoded document, if any
            mime_type: MIME type of the inline document
            max_output_tokens: Override for generationConfig.maxOutputTokens

        Returns:
            Text of the first candidate

        Raises:
            UpstreamError: On transport failures, non-2xx responses or an
                envelope without candidate text
        """
        if not self.api_key:
            raise UpstreamError("Gemini API key not configured")

        body = self.build_request_body(
            prompt,
            base64_data=base64_data,
            mime_type=mime_type,
            max_output_tokens=max_output_tokens or config.GEMINI_MAX_OUTPUT_TOKENS
        )

        logger.info(
            f"🤖 Sending request to Gemini ({self.model}), prompt length: {len(prompt)}, "
            f"document length: {len(base64_data) if base64_data else 0}"
        )

        try:
            payload = await self.retry_handler.execute_with_retry(self._post, body)
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            error_text = e.response.text[:500]
            logger.error(f"❌ Gemini API error: {status} {error_text}")
            raise UpstreamError(f"Gemini API error: {status} {error_text}", status_code=status) from e
        except httpx.HTTPError as e:
            logger.error(f"❌ Gemini request failed: {e}")
            raise UpstreamError(f"Gemini request failed: {e}") from e

        return self.extract_candidate_text(payload)

    async def _post(self, body: Dict[str, Any]) -> Any:
        async with httpx.AsyncClient(timeout=self._http_timeout, transport=self._transport) as client:
            response = await client.post(
                self.endpoint,
                json=body,
                headers={
                    "Content-Type": "application/json",
                    "x-goog-api-key": self.api_key
                }
            )
            response.raise_for_status()

            try:
                return response.json()
            except ValueError as e:
                raise UpstreamError(
                    "Gemini returned a non-JSON response envelope",
                    status_code=response.status_code
                ) from e

    @staticmethod
    def extract_candidate_text(payload: Any) -> str:
        """
        Pull the reply text out of a response envelope.

        Also accepts the ``{success, data, error}`` envelope returned by the
        hosted proxy function, where ``success: false`` carries the provider's
        message.
        """
        if not isinstance(payload, dict):
            raise UpstreamError("Invalid response structure from Gemini API")

        if "success" in payload:
            if not payload.get("success"):
                raise UpstreamError(payload.get("error") or "Failed to process document")
            data = payload.get("data")
            if isinstance(data, str) and data:
                return data

        candidates = payload.get("candidates") or []
        if not candidates:
            raise UpstreamError("No response from Gemini API")

        parts = (candidates[0].get("content") or {}).get("parts") or []
        text = "".join(part.get("text", "") for part in parts if isinstance(part, dict))
        if not text:
            raise UpstreamError("No text extracted from the document")

        logger.info(f"✅ Gemini response received, length: {len(text)}")
        return text

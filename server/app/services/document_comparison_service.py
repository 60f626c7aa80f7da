"""
Document Comparison Service

Compares a stored source document against up to five stored target
documents. The extracted JSON of every document is sent to Gemini with the
comparison prompt; the reply (summary plus one entry per target) is
validated, flattened into header rows and line items, and persisted so that
the same source/target set is answered from the database next time.
"""

import logging
import math
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app import config
from app.constants.statuses import DOCUMENT_ROLE_SOURCE
from app.db import crud
from app.db.models import ComparisonDocument, ComparisonResult
from app.services.gemini import GeminiDocumentAIService, ParseError, get_gemini_service
from app.services.gemini.models import ComparisonRow, DetailedComparisonResult, LineItemComparison, coerce_match_flag

logger = logging.getLogger(__name__)

RAW_RESPONSE_PREVIEW_LENGTH = 2000


class DocumentNotFoundError(Exception):
    """Raised when a source or target document is missing or has no extraction."""
    pass


class TooManyTargetsError(ValueError):
    pass


def target_titles_key(titles: List[str]) -> str:
    """Order-independent key for a set of target documents."""
    return ", ".join(sorted(titles))


def _round_half_up(value: Any) -> int:
    try:
        number = float(value or 0)
    except (TypeError, ValueError):
        return 0
    if math.isnan(number):
        return 0
    return int(math.floor(number + 0.5))


def _value_or_na(value: Any) -> Any:
    return "N/A" if value is None or value == "" else value


def _source_document_dict(document: ComparisonDocument) -> Dict[str, Any]:
    return {
        "id": str(document.id),
        "title": document.title,
        "doc_type": document.doc_type,
        "mime_type": document.mime_type,
        "extracted_json": document.extracted_json,
        "created_at": document.created_at.isoformat() if document.created_at else None
    }


def build_header_results(targets: List[Any]) -> List[ComparisonRow]:
    """One row per compared field per target, labelled with the 1-based target number."""
    rows = []
    for target_index, target in enumerate(targets):
        if not isinstance(target, dict) or not isinstance(target.get("fields"), list):
            continue
        for field in target["fields"]:
            if not isinstance(field, dict):
                continue
            rows.append(ComparisonRow(
                field=f"{field.get('field')} (Target {target_index + 1})",
                source_value=_value_or_na(field.get("source_value")),
                target_value=_value_or_na(field.get("target_value")),
                match=coerce_match_flag(field.get("match"))
            ))
    return rows


def build_line_items(targets: List[Any]) -> List[LineItemComparison]:
    items = []
    for target_index, target in enumerate(targets):
        if not isinstance(target, dict) or not isinstance(target.get("line_items"), list):
            continue
        for item in target["line_items"]:
            if isinstance(item, dict):
                items.append(LineItemComparison.model_validate({**item, "target_index": target_index}))
    return items


def build_detailed_result(
    comparison_data: Dict[str, Any],
    source_document: Dict[str, Any],
    target_documents: List[Dict[str, Any]],
    overall_match: int,
    comparison_id: Optional[str] = None,
    from_cache: bool = False
) -> DetailedComparisonResult:
    targets = comparison_data.get("targets") or []
    summary = comparison_data.get("summary") or {}

    return DetailedComparisonResult(
        comparison_id=comparison_id,
        overall_match=overall_match,
        header_results=build_header_results(targets),
        line_items=build_line_items(targets),
        source_document=source_document,
        target_documents=target_documents,
        comparison_summary={
            **(summary if isinstance(summary, dict) else {}),
            "target_specific_results": targets
        },
        from_cache=from_cache
    )


def has_comparison_shape(data: Any) -> bool:
    return isinstance(data, dict) and bool(data.get("summary")) and bool(data.get("targets"))


class DocumentComparisonService:
    """
    Source-versus-targets comparison backed by Gemini and the comparison tables.
    """

    def __init__(self, gemini_service: Optional[GeminiDocumentAIService] = None):
        self._gemini_service = gemini_service

    @property
    def gemini_service(self) -> GeminiDocumentAIService:
        if self._gemini_service is None:
            self._gemini_service = get_gemini_service()
        return self._gemini_service

    async def compare(
        self,
        db: AsyncSession,
        source_document_id: UUID,
        target_document_ids: List[UUID]
    ) -> DetailedComparisonResult:
        """
        Compare a source document with its target documents.

        Raises:
            DocumentNotFoundError: Missing source, or no usable target
            TooManyTargetsError: More than MAX_TARGET_DOCUMENTS targets
            UpstreamError: The Gemini call failed
            ParseError: The reply is not a comparison JSON object
        """
        logger.info("=== STARTING DOCUMENT COMPARISON ===")

        unique_ids = list(dict.fromkeys(target_document_ids))
        if len(unique_ids) < len(target_document_ids):
            logger.warning(f"⚠️ {len(target_document_ids) - len(unique_ids)} duplicate target(s) skipped")
        target_document_ids = unique_ids

        if len(target_document_ids) > config.MAX_TARGET_DOCUMENTS:
            raise TooManyTargetsError(
                f"At most {config.MAX_TARGET_DOCUMENTS} target documents can be compared at once"
            )

        source = await self._load_source(db, source_document_id)
        target_documents, target_titles = await self._load_targets(db, target_document_ids)
        source_document = _source_document_dict(source)
        titles_key = target_titles_key(target_titles)

        cached = await self._load_cached(db, source, titles_key, source_document, target_documents)
        if cached is not None:
            return cached

        prompt = self.gemini_service.prompts.get_comparison_prompt(source.extracted_json, target_documents)
        logger.info(f"📝 Comparison prompt created, length: {len(prompt)}")

        comparison_data, response_text = await self.gemini_service.generate_json_with_text(
            prompt,
            max_output_tokens=config.GEMINI_COMPARISON_MAX_OUTPUT_TOKENS
        )

        if not has_comparison_shape(comparison_data):
            keys = list(comparison_data.keys()) if isinstance(comparison_data, dict) else type(comparison_data).__name__
            logger.error(f"❌ Invalid comparison response format: {keys}")
            raise ParseError(
                "Invalid comparison response format from Gemini API",
                response_preview=response_text[:200]
            )

        overall_match = _round_half_up(comparison_data["summary"].get("match_score")
                                       if isinstance(comparison_data["summary"], dict) else 0)

        stored = await crud.save_comparison_result(
            db,
            source_document_id=source.id,
            source_doc_type=source.doc_type,
            target_titles_key=titles_key,
            target_count=len(target_documents),
            results_json={
                "summary": comparison_data["summary"],
                "targets": comparison_data["targets"],
                "match_percentage": overall_match,
                "processed_at": datetime.utcnow().isoformat(),
                "source_document": source_document,
                "target_documents": target_documents,
                "raw_response_preview": response_text[:RAW_RESPONSE_PREVIEW_LENGTH]
            },
            match_percentage=overall_match
        )
        logger.info(f"💾 Stored comparison {stored.id}")

        result = build_detailed_result(
            comparison_data,
            source_document,
            target_documents,
            overall_match,
            comparison_id=str(stored.id)
        )
        logger.info(
            f"✅ Comparison completed: {overall_match}% match across {len(target_documents)} targets, "
            f"{len(result.header_results)} fields, {len(result.line_items)} line items"
        )
        return result

    async def get_comparison(self, db: AsyncSession, comparison_id: UUID) -> DetailedComparisonResult:
        """Rebuild a stored comparison by id."""
        stored = await crud.get_comparison_result(db, comparison_id)
        if not stored:
            raise DocumentNotFoundError(f"Comparison {comparison_id} not found")
        return self.result_from_stored(stored)

    @staticmethod
    def result_from_stored(
        stored: ComparisonResult,
        source_document: Optional[Dict[str, Any]] = None,
        target_documents: Optional[List[Dict[str, Any]]] = None
    ) -> DetailedComparisonResult:
        data = stored.results_json or {}
        summary = data.get("summary") if isinstance(data.get("summary"), dict) else {}
        overall_match = _round_half_up(data.get("match_percentage") or summary.get("match_score"))

        return build_detailed_result(
            data,
            source_document if source_document is not None else data.get("source_document") or {},
            target_documents if target_documents is not None else data.get("target_documents") or [],
            overall_match,
            comparison_id=str(stored.id),
            from_cache=True
        )

    async def _load_source(self, db: AsyncSession, source_document_id: UUID) -> ComparisonDocument:
        source = await crud.get_comparison_document(db, source_document_id)
        if not source or source.role != DOCUMENT_ROLE_SOURCE:
            logger.error(f"❌ Source document {source_document_id} not found")
            raise DocumentNotFoundError(
                "Source document needs to be processed first."
            )
        logger.info(f"✅ Source document found: {source.title} ({source.doc_type})")
        return source

    async def _load_targets(
        self,
        db: AsyncSession,
        target_document_ids: List[UUID]
    ) -> Tuple[List[Dict[str, Any]], List[str]]:
        documents = await crud.get_comparison_documents_by_ids(db, target_document_ids)

        target_documents = []
        target_titles = []
        for document in documents:
            if not document.title or document.extracted_json is None:
                logger.warning(f"⚠️ Target document {document.id} has no extraction, skipping")
                continue
            if document.title in target_titles:
                logger.warning(f"⚠️ Duplicate target {document.title} skipped")
                continue
            target_documents.append({
                "index": len(target_documents),
                "title": document.title,
                "type": document.doc_type or "Unknown",
                "json": document.extracted_json
            })
            target_titles.append(document.title)

        if not target_documents:
            logger.error("❌ No valid target documents found")
            raise DocumentNotFoundError("No target documents found for comparison.")

        logger.info(f"📋 Total target documents prepared: {len(target_documents)}")
        return target_documents, target_titles

    async def _load_cached(
        self,
        db: AsyncSession,
        source: ComparisonDocument,
        titles_key: str,
        source_document: Dict[str, Any],
        target_documents: List[Dict[str, Any]]
    ) -> Optional[DetailedComparisonResult]:
        existing = await crud.get_latest_comparison(db, source.id, titles_key)
        if not existing or not has_comparison_shape(existing.results_json):
            logger.info("❌ No existing comparison found")
            return None

        logger.info(f"🔄 Using existing comparison results from database: {existing.id}")
        return self.result_from_stored(existing, source_document, target_documents)

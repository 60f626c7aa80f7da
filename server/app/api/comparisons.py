from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from uuid import UUID
import logging

from app.config import get_db
from app.db import crud, schemas
from app.api.error_handlers import PASSTHROUGH_ERRORS
from app.services.comparison_renderer import (
    comparison_csv_filename,
    export_comparison_csv,
    match_band,
    render_field_comparisons
)
from app.services.document_comparison_service import DocumentComparisonService
from app.services.gemini import GeminiDocumentAIService, get_gemini_service
from app.services.gemini.models import DetailedComparisonResult
from app.services.organization_context import OrganizationContext, require_feature

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


def get_comparison_service(
    gemini_service: GeminiDocumentAIService = Depends(get_gemini_service)
) -> DocumentComparisonService:
    return DocumentComparisonService(gemini_service)


@router.post("/comparisons/", response_model=DetailedComparisonResult)
async def create_comparison(
    request: schemas.ComparisonRequest,
    db: AsyncSession = Depends(get_db),
    context: OrganizationContext = Depends(require_feature("ai_assistant")),
    service: DocumentComparisonService = Depends(get_comparison_service)
):
    """Compare a source document with up to five target documents"""
    try:
        logger.info(
            f"🔍 Comparison requested by organization {context.organization_id}: "
            f"{request.source_document_id} vs {len(request.target_document_ids)} targets"
        )
        return await service.compare(db, request.source_document_id, request.target_document_ids)
    except PASSTHROUGH_ERRORS:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/comparisons/", response_model=List[schemas.ComparisonResultSummary])
async def list_comparisons(
    source_document_id: Optional[UUID] = None,
    limit: int = 50,
    db: AsyncSession = Depends(get_db)
):
    """List stored comparisons, newest first, optionally for one source document"""
    try:
        return await crud.list_comparison_results(db, source_document_id=source_document_id, limit=limit)
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/comparisons/{comparison_id}", response_model=DetailedComparisonResult)
async def get_comparison(
    comparison_id: UUID,
    db: AsyncSession = Depends(get_db),
    service: DocumentComparisonService = Depends(get_comparison_service)
):
    """Get a stored comparison"""
    try:
        return await service.get_comparison(db, comparison_id)
    except PASSTHROUGH_ERRORS:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/comparisons/{comparison_id}/fields")
async def get_comparison_fields(
    comparison_id: UUID,
    target_index: Optional[int] = None,
    db: AsyncSession = Depends(get_db),
    service: DocumentComparisonService = Depends(get_comparison_service)
):
    """Field comparison rows per target, line items excluded"""
    try:
        detailed = await service.get_comparison(db, comparison_id)
        targets = detailed.comparison_summary.get("target_specific_results") or []

        rendered = []
        for index, target in enumerate(targets):
            if target_index is not None and index != target_index:
                continue
            if not isinstance(target, dict):
                continue
            rendered.append({
                "target_index": index,
                "title": target.get("title"),
                "score": target.get("score"),
                "band": match_band(target.get("score") if isinstance(target.get("score"), (int, float)) else 0),
                "fields": [row.model_dump() for row in render_field_comparisons(target.get("fields") or [])]
            })

        if target_index is not None and not rendered:
            raise HTTPException(status_code=404, detail="Target not found in comparison")

        return {"comparison_id": str(comparison_id), "overall_match": detailed.overall_match, "targets": rendered}
    except PASSTHROUGH_ERRORS:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/comparisons/{comparison_id}/export")
async def export_comparison(
    comparison_id: UUID,
    db: AsyncSession = Depends(get_db),
    service: DocumentComparisonService = Depends(get_comparison_service)
):
    """Download a comparison as CSV"""
    try:
        detailed = await service.get_comparison(db, comparison_id)
        content = export_comparison_csv(detailed)
        return Response(
            content=content,
            media_type="text/csv; charset=utf-8",
            headers={"Content-Disposition": f'attachment; filename="{comparison_csv_filename()}"'}
        )
    except PASSTHROUGH_ERRORS:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))

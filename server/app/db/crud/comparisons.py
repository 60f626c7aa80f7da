from ..models import ComparisonResult
from sqlalchemy.future import select
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Any, Dict, Optional
from uuid import UUID

async def get_latest_comparison(db: AsyncSession, source_document_id: UUID, target_titles_key: str):
    """Most recent stored comparison for this source and (sorted) set of target titles."""
    result = await db.execute(
        select(ComparisonResult)
        .where(ComparisonResult.source_document_id == source_document_id)
        .where(ComparisonResult.target_titles_key == target_titles_key)
        .order_by(ComparisonResult.created_at.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()

async def get_comparison_result(db: AsyncSession, comparison_id: UUID):
    result = await db.execute(select(ComparisonResult).where(ComparisonResult.id == comparison_id))
    return result.scalar_one_or_none()

async def save_comparison_result(
    db: AsyncSession,
    source_document_id: UUID,
    source_doc_type: Optional[str],
    target_titles_key: str,
    target_count: int,
    results_json: Dict[str, Any],
    match_percentage: Optional[int] = None
):
    db_result = ComparisonResult(
        source_document_id=source_document_id,
        source_doc_type=source_doc_type,
        target_titles_key=target_titles_key,
        target_count=target_count,
        results_json=results_json,
        match_percentage=match_percentage
    )
    db.add(db_result)
    await db.commit()
    await db.refresh(db_result)
    return db_result

async def list_comparison_results(db: AsyncSession, source_document_id: Optional[UUID] = None, limit: int = 50):
    query = select(ComparisonResult).order_by(ComparisonResult.created_at.desc())
    if source_document_id is not None:
        query = query.where(ComparisonResult.source_document_id == source_document_id)
    result = await db.execute(query.limit(limit))
    return result.scalars().all()

from ..models import ComparisonDocument
from ..schemas import ComparisonDocumentCreate
from sqlalchemy.future import select
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from uuid import UUID

async def create_comparison_document(db: AsyncSession, document: ComparisonDocumentCreate):
    db_document = ComparisonDocument(
        organization_id=document.organization_id,
        role=document.role,
        title=document.title,
        doc_type=document.doc_type,
        mime_type=document.mime_type,
        extracted_json=document.extracted_json
    )
    db.add(db_document)
    await db.commit()
    await db.refresh(db_document)
    return db_document

async def get_comparison_document(db: AsyncSession, document_id: UUID):
    result = await db.execute(select(ComparisonDocument).where(ComparisonDocument.id == document_id))
    return result.scalar_one_or_none()

async def get_comparison_documents_by_ids(db: AsyncSession, document_ids: List[UUID]):
    """Fetch documents keeping the order of ``document_ids``; unknown ids are dropped."""
    if not document_ids:
        return []
    result = await db.execute(select(ComparisonDocument).where(ComparisonDocument.id.in_(document_ids)))
    by_id = {doc.id: doc for doc in result.scalars().all()}
    return [by_id[doc_id] for doc_id in document_ids if doc_id in by_id]

async def list_comparison_documents(
    db: AsyncSession,
    role: Optional[str] = None,
    organization_id: Optional[int] = None,
    limit: int = 100
):
    query = select(ComparisonDocument).order_by(ComparisonDocument.created_at.desc())
    if role:
        query = query.where(ComparisonDocument.role == role)
    if organization_id is not None:
        query = query.where(ComparisonDocument.organization_id == organization_id)
    result = await db.execute(query.limit(limit))
    return result.scalars().all()

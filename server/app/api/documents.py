from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from uuid import UUID
import logging

from app import config
from app.config import get_db
from app.constants.statuses import is_valid_document_role
from app.db import crud, schemas
from app.api.error_handlers import PASSTHROUGH_ERRORS
from app.services.gemini import GeminiDocumentAIService, get_gemini_service, detect_document_type
from app.services.file_classification_service import FileClassificationService
from app.services.organization_context import OrganizationContext, get_organization_context

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


async def _read_upload(file: UploadFile) -> bytes:
    data = await file.read()
    if not data:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")
    if len(data) > config.MAX_UPLOAD_SIZE_MB * 1024 * 1024:
        raise HTTPException(status_code=413, detail=f"File exceeds {config.MAX_UPLOAD_SIZE_MB} MB limit")
    return data


def _mime_type(file: UploadFile) -> str:
    return file.content_type or "application/octet-stream"


def get_file_classification_service(
    gemini_service: GeminiDocumentAIService = Depends(get_gemini_service)
) -> FileClassificationService:
    return FileClassificationService(gemini_service)


@router.post("/documents/classify")
async def classify_document(
    file: UploadFile = File(...),
    role: str = Form("source"),
    persist: bool = Form(True),
    db: AsyncSession = Depends(get_db),
    context: OrganizationContext = Depends(get_organization_context),
    gemini_service: GeminiDocumentAIService = Depends(get_gemini_service)
):
    """Classify a document against the taxonomy and extract its content"""
    try:
        if not is_valid_document_role(role):
            raise HTTPException(status_code=400, detail="role must be 'source' or 'target'")

        data = await _read_upload(file)
        mime_type = _mime_type(file)
        logger.info(f"📤 Classify request: {file.filename} ({mime_type}, {len(data)} bytes) as {role}")

        extracted = await gemini_service.classify_document(data, mime_type)
        doc_type = detect_document_type(extracted)

        response = {
            "title": file.filename,
            "role": role,
            "doc_type": doc_type,
            "mime_type": mime_type,
            "extracted_json": extracted
        }

        if persist:
            document = await crud.create_comparison_document(db, schemas.ComparisonDocumentCreate(
                role=role,
                title=file.filename or "document",
                doc_type=doc_type,
                mime_type=mime_type,
                extracted_json=extracted,
                organization_id=context.organization_id
            ))
            if context.organization_id is not None:
                await crud.increment_document_count(db, context.organization_id, len(data))
            response["id"] = str(document.id)
            response["created_at"] = document.created_at

        return response
    except PASSTHROUGH_ERRORS:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/documents/quick-classify")
async def quick_classify_document(
    file: UploadFile = File(...),
    service: FileClassificationService = Depends(get_file_classification_service)
):
    """Seven-category classification (extension based for non-visual files)"""
    try:
        data = await _read_upload(file)
        result = await service.classify_file(file.filename or "", _mime_type(file), data)
        return result.model_dump()
    except PASSTHROUGH_ERRORS:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/documents/extract-invoice")
async def extract_invoice(
    file: UploadFile = File(...),
    gemini_service: GeminiDocumentAIService = Depends(get_gemini_service)
):
    """Extract invoice fields from an invoice image or PDF"""
    try:
        data = await _read_upload(file)
        extracted = await gemini_service.extract_invoice_data(data, _mime_type(file))
        return {"title": file.filename, "extracted_json": extracted}
    except PASSTHROUGH_ERRORS:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/documents/{document_id}", response_model=schemas.ComparisonDocument)
async def get_document(
    document_id: UUID,
    db: AsyncSession = Depends(get_db)
):
    """Get a stored document with its extraction"""
    try:
        document = await crud.get_comparison_document(db, document_id)
        if not document:
            raise HTTPException(status_code=404, detail="Document not found")
        return document
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/documents/", response_model=List[schemas.ComparisonDocument])
async def list_documents(
    role: Optional[str] = None,
    limit: int = 100,
    db: AsyncSession = Depends(get_db),
    context: OrganizationContext = Depends(get_organization_context)
):
    """List stored documents of the calling organization"""
    try:
        return await crud.list_comparison_documents(
            db,
            role=role,
            organization_id=context.organization_id,
            limit=limit
        )
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))

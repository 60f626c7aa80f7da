from fastapi import APIRouter, HTTPException
from app.db import schemas
from app.services.table_consolidation import consolidate_tables_with_report

router = APIRouter(prefix="/api")

@router.post("/tables/consolidate")
async def consolidate(request: schemas.TableConsolidationRequest):
    """Merge per-page tables that share the same header signature"""
    try:
        result = consolidate_tables_with_report(request.tables, request.file_name)
        if request.strict:
            return result.to_dict()
        return {"tables": result.tables}
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))

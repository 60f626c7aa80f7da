from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from app.db import crud, schemas
from app.config import get_db
from app.services.plan_features import PLAN_FEATURES, get_usage_percentage
from typing import List

router = APIRouter(prefix="/api")

@router.get("/plans/", response_model=dict)
async def get_plans():
    """Get the plan feature matrix"""
    return PLAN_FEATURES

@router.get("/organizations/", response_model=List[dict])
async def get_organizations(db: AsyncSession = Depends(get_db)):
    """Get all organizations"""
    try:
        return await crud.get_all_organizations(db)
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))

@router.post("/organizations/", response_model=dict)
async def create_organization(
    organization: schemas.OrganizationCreate,
    db: AsyncSession = Depends(get_db)
):
    """Create a new organization"""
    try:
        existing = await crud.get_organization_by_name(db, organization.name)
        if existing:
            raise HTTPException(status_code=400, detail=f"Organization '{organization.name}' already exists")

        created = await crud.create_organization(db, organization)
        return crud.organization_to_dict(created)
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))

@router.put("/organizations/{organization_id}", response_model=dict)
async def update_organization(
    organization_id: int,
    organization_update: schemas.OrganizationUpdate,
    db: AsyncSession = Depends(get_db)
):
    """Update an organization (plan changes included)"""
    try:
        if organization_update.name:
            existing = await crud.get_organization_by_name(db, organization_update.name)
            if existing and existing.id != organization_id:
                raise HTTPException(status_code=400, detail=f"Organization '{organization_update.name}' already exists")

        updated = await crud.update_organization(db, organization_id, organization_update)
        if not updated:
            raise HTTPException(status_code=404, detail="Organization not found")
        return updated
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))

@router.get("/organizations/{organization_id}/usage", response_model=schemas.OrganizationUsage)
async def get_organization_usage(
    organization_id: int,
    db: AsyncSession = Depends(get_db)
):
    """Usage of the plan limits in percent"""
    try:
        org = await crud.get_organization_by_id(db, organization_id)
        if not org:
            raise HTTPException(status_code=404, detail="Organization not found")
        return schemas.OrganizationUsage(
            organization_id=org.id,
            plan=org.plan,
            users_percentage=get_usage_percentage(org.plan, "max_users", org.users or 0),
            documents_percentage=get_usage_percentage(org.plan, "max_documents", org.documents or 0),
            storage_percentage=get_usage_percentage(org.plan, "max_storage", org.storage_used_gb or 0)
        )
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))

@router.post("/organizations/initialize/")
async def initialize_organizations(db: AsyncSession = Depends(get_db)):
    """Initialize the default organizations"""
    try:
        organizations = await crud.initialize_default_organizations(db)
        return {"message": f"Initialized {len(organizations)} organizations", "organizations": organizations}
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))

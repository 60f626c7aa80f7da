from ..models import Organization
from ..schemas import OrganizationCreate, OrganizationUpdate
from sqlalchemy.future import select
from sqlalchemy.ext.asyncio import AsyncSession
import logging

logger = logging.getLogger(__name__)

DEFAULT_ORGANIZATIONS = [
    {
        "name": "Acme Corporation",
        "plan": "Enterprise",
        "industry": "Technology",
        "company_size": "501-1000",
        "contact_email": "admin@acmecorp.com",
        "payment_status": "active",
        "users": 45,
        "documents": 3200,
        "storage_used_gb": 125,
    },
    {
        "name": "Globex Industries",
        "plan": "Professional",
        "industry": "Manufacturing",
        "company_size": "101-500",
        "contact_email": "info@globex.com",
        "payment_status": "active",
        "users": 12,
        "documents": 450,
        "storage_used_gb": 23,
    },
    {
        "name": "Stark Enterprises",
        "plan": "Enterprise",
        "industry": "Defense",
        "company_size": "1001+",
        "contact_email": "tony@stark.com",
        "payment_status": "active",
        "users": 78,
        "documents": 7500,
        "storage_used_gb": 320,
    },
    {
        "name": "Wayne Industries",
        "plan": "Professional",
        "industry": "Research",
        "company_size": "101-500",
        "contact_email": "bruce@wayne.com",
        "payment_status": "active",
        "users": 15,
        "documents": 820,
        "storage_used_gb": 42,
    },
    {
        "name": "Umbrella Corp",
        "plan": "Starter",
        "industry": "Healthcare",
        "company_size": "1-50",
        "contact_email": "hello@umbrella.com",
        "payment_status": "pending",
        "users": 3,
        "documents": 45,
        "storage_used_gb": 1.2,
    },
]

def organization_to_dict(org: Organization) -> dict:
    return {
        "id": org.id,
        "name": org.name,
        "plan": org.plan,
        "industry": org.industry,
        "company_size": org.company_size,
        "contact_email": org.contact_email,
        "billing_address": org.billing_address,
        "payment_status": org.payment_status,
        "users": org.users,
        "documents": org.documents,
        "storage_used_gb": org.storage_used_gb,
        "created_at": org.created_at
    }

async def get_all_organizations(db: AsyncSession):
    result = await db.execute(select(Organization).order_by(Organization.id))
    return [organization_to_dict(org) for org in result.scalars().all()]

async def get_organization_by_id(db: AsyncSession, organization_id: int):
    result = await db.execute(select(Organization).where(Organization.id == organization_id))
    return result.scalar_one_or_none()

async def get_organization_by_name(db: AsyncSession, name: str):
    result = await db.execute(select(Organization).where(Organization.name == name))
    return result.scalar_one_or_none()

async def create_organization(db: AsyncSession, organization: OrganizationCreate, **usage):
    # New organizations start with one user (the creator)
    db_org = Organization(
        name=organization.name,
        plan=organization.plan,
        industry=organization.industry,
        company_size=organization.company_size,
        contact_email=organization.contact_email,
        billing_address=organization.billing_address,
        payment_status=organization.payment_status,
        users=usage.get("users", 1),
        documents=usage.get("documents", 0),
        storage_used_gb=usage.get("storage_used_gb", 0.0)
    )
    db.add(db_org)
    await db.commit()
    await db.refresh(db_org)
    logger.info(f"🏢 Created organization {db_org.name} on {db_org.plan} plan")
    return db_org

async def update_organization(db: AsyncSession, organization_id: int, organization_update: OrganizationUpdate):
    db_org = await get_organization_by_id(db, organization_id)
    if not db_org:
        return None

    update_data = organization_update.model_dump(exclude_unset=True, exclude_none=True)
    for key, value in update_data.items():
        setattr(db_org, key, value)

    await db.commit()
    await db.refresh(db_org)
    return organization_to_dict(db_org)

async def increment_document_count(db: AsyncSession, organization_id: int, size_bytes: int = 0):
    db_org = await get_organization_by_id(db, organization_id)
    if not db_org:
        return None
    db_org.documents = (db_org.documents or 0) + 1
    db_org.storage_used_gb = (db_org.storage_used_gb or 0.0) + size_bytes / (1024 ** 3)
    await db.commit()
    return db_org

async def initialize_default_organizations(db: AsyncSession):
    """
    Initialize the demo organizations if they don't exist.
    """
    for org_data in DEFAULT_ORGANIZATIONS:
        existing = await get_organization_by_name(db, org_data["name"])
        if not existing:
            usage = {key: org_data[key] for key in ("users", "documents", "storage_used_gb")}
            organization = OrganizationCreate(**{k: v for k, v in org_data.items() if k not in usage})
            await create_organization(db, organization, **usage)

    return await get_all_organizations(db)

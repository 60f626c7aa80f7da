"""
Per-request organization context.

The calling organization is identified by the ``X-Organization-Id`` header
and loaded from the database for every request; plan gating reads the plan
from this context instead of any process-wide state.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app import config
from app.config import get_db
from app.db import crud
from app.db.models import Organization
from app.services.plan_features import FeatureNotAvailableError, has_feature_access

logger = logging.getLogger(__name__)


@dataclass
class OrganizationContext:
    organization_id: Optional[int] = None
    name: Optional[str] = None
    plan: Optional[str] = None

    @classmethod
    def from_organization(cls, organization: Optional[Organization]) -> "OrganizationContext":
        if organization is None:
            return cls()
        return cls(organization_id=organization.id, name=organization.name, plan=organization.plan)

    def has_feature(self, feature: str) -> bool:
        return has_feature_access(self.plan, feature)

    def require_feature(self, feature: str) -> None:
        """Raise FeatureNotAvailableError unless the plan includes ``feature``."""
        if not self.has_feature(feature):
            logger.warning(f"🔒 Organization {self.organization_id} ({self.plan}) denied feature {feature}")
            raise FeatureNotAvailableError(feature, self.plan)


async def load_organization_context(db: AsyncSession, organization_header: Optional[str]) -> OrganizationContext:
    """
    Resolve the organization for a request.

    Without a header the first organization is used, matching the
    single-tenant default of the dashboard.
    """
    if organization_header is None or not organization_header.strip():
        result = await db.execute(select(Organization).order_by(Organization.id).limit(1))
        return OrganizationContext.from_organization(result.scalar_one_or_none())

    try:
        organization_id = int(organization_header)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid {config.ORGANIZATION_HEADER} header")

    organization = await crud.get_organization_by_id(db, organization_id)
    if not organization:
        raise HTTPException(status_code=404, detail="Organization not found")
    return OrganizationContext.from_organization(organization)


async def get_organization_context(request: Request, db: AsyncSession = Depends(get_db)) -> OrganizationContext:
    return await load_organization_context(db, request.headers.get(config.ORGANIZATION_HEADER))


def require_feature(feature: str):
    """Dependency factory: resolves the context and enforces ``feature``."""
    async def dependency(context: OrganizationContext = Depends(get_organization_context)) -> OrganizationContext:
        context.require_feature(feature)
        return context
    return dependency

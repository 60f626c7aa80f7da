from pydantic import BaseModel, Field, field_validator
from typing import Any, List, Optional, Dict
from uuid import UUID
from datetime import datetime

from app.services.plan_features import PLAN_FEATURES
from app.constants.statuses import VALID_PAYMENT_STATUSES, is_valid_document_role


def _validate_plan(value: Optional[str]) -> Optional[str]:
    if value is not None and value not in PLAN_FEATURES:
        raise ValueError(f"Unknown plan '{value}', expected one of {', '.join(PLAN_FEATURES)}")
    return value


def _validate_payment_status(value: Optional[str]) -> Optional[str]:
    if value is not None and value not in VALID_PAYMENT_STATUSES:
        raise ValueError(f"Unknown payment status '{value}'")
    return value

class OrganizationBase(BaseModel):
    name: str
    plan: str = "Starter"
    industry: Optional[str] = None
    company_size: Optional[str] = None
    contact_email: Optional[str] = None
    billing_address: Optional[str] = None
    payment_status: str = "pending"

    @field_validator('plan')
    @classmethod
    def check_plan(cls, v):
        return _validate_plan(v)

    @field_validator('payment_status')
    @classmethod
    def check_payment_status(cls, v):
        return _validate_payment_status(v)

class OrganizationCreate(OrganizationBase):
    pass

class OrganizationUpdate(BaseModel):
    name: Optional[str] = None
    plan: Optional[str] = None
    industry: Optional[str] = None
    company_size: Optional[str] = None
    contact_email: Optional[str] = None
    billing_address: Optional[str] = None
    payment_status: Optional[str] = None

    @field_validator('plan')
    @classmethod
    def check_plan(cls, v):
        return _validate_plan(v)

    @field_validator('payment_status')
    @classmethod
    def check_payment_status(cls, v):
        return _validate_payment_status(v)

class Organization(OrganizationBase):
    id: int
    users: int = 0
    documents: int = 0
    storage_used_gb: float = 0.0
    created_at: datetime

    class Config:
        from_attributes = True

class OrganizationUsage(BaseModel):
    organization_id: int
    plan: str
    users_percentage: float
    documents_percentage: float
    storage_percentage: float

class ComparisonDocumentCreate(BaseModel):
    role: str
    title: str
    doc_type: Optional[str] = None
    mime_type: Optional[str] = None
    extracted_json: Optional[Any] = None
    organization_id: Optional[int] = None

    @field_validator('role')
    @classmethod
    def check_role(cls, v):
        if not is_valid_document_role(v):
            raise ValueError("role must be 'source' or 'target'")
        return v

class ComparisonDocument(BaseModel):
    id: UUID
    role: str
    title: str
    doc_type: Optional[str] = None
    mime_type: Optional[str] = None
    extracted_json: Optional[Any] = None
    organization_id: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True

class ComparisonRequest(BaseModel):
    source_document_id: UUID
    target_document_ids: List[UUID] = Field(min_length=1)

class ComparisonResultSummary(BaseModel):
    id: UUID
    source_document_id: UUID
    source_doc_type: Optional[str] = None
    target_titles_key: str
    target_count: int
    match_percentage: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True

class TableConsolidationRequest(BaseModel):
    file_name: str
    tables: List[Any] = Field(default_factory=list)
    strict: bool = False  # include skipped_count in the response

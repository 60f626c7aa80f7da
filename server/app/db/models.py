from sqlalchemy import (
    Column, String, Integer, Float, DateTime, JSON, ForeignKey, Text, text, Index
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.ext.declarative import declarative_base
import uuid

Base = declarative_base()

class Organization(Base):
    __tablename__ = 'organizations'
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, unique=True, nullable=False)
    plan = Column(String, nullable=False, default='Starter')  # Starter, Professional, Enterprise
    industry = Column(String, nullable=True)
    company_size = Column(String, nullable=True)
    contact_email = Column(String, nullable=True)
    billing_address = Column(Text, nullable=True)
    payment_status = Column(String, nullable=False, default='pending')  # pending, active, failed, canceled

    # Usage stats
    users = Column(Integer, nullable=False, default=1)
    documents = Column(Integer, nullable=False, default=0)
    storage_used_gb = Column(Float, nullable=False, default=0.0)

    created_at = Column(DateTime, server_default=text('now()'), nullable=False)

class ComparisonDocument(Base):
    __tablename__ = 'comparison_documents'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    organization_id = Column(Integer, ForeignKey('organizations.id'), nullable=True)
    role = Column(String, nullable=False)  # source, target
    title = Column(String, nullable=False)  # uploaded file name
    doc_type = Column(String, nullable=True)  # category reported by the model
    mime_type = Column(String, nullable=True)
    extracted_json = Column(JSON, nullable=True)
    created_at = Column(DateTime, server_default=text('now()'), nullable=False)

    __table_args__ = (
        Index('ix_comparison_documents_role_title', 'role', 'title'),
    )

class ComparisonResult(Base):
    __tablename__ = 'comparison_results'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    source_document_id = Column(UUID(as_uuid=True), ForeignKey('comparison_documents.id'), nullable=False)
    source_doc_type = Column(String, nullable=True)
    target_titles_key = Column(Text, nullable=False)  # sorted target titles joined with ", "
    target_count = Column(Integer, nullable=False)
    results_json = Column(JSON, nullable=False)  # summary, targets, documents, raw_response_preview
    match_percentage = Column(Integer, nullable=True)
    created_at = Column(DateTime, server_default=text('now()'), nullable=False)

    __table_args__ = (
        Index('ix_comparison_results_lookup', 'source_document_id', 'target_titles_key'),
    )

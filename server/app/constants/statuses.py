"""
Document Role and Payment Status Constants

A comparison always has exactly one source document and one or more target
documents; only these roles may be persisted.
"""

DOCUMENT_ROLE_SOURCE = 'source'
DOCUMENT_ROLE_TARGET = 'target'

VALID_DOCUMENT_ROLES = [
    DOCUMENT_ROLE_SOURCE,
    DOCUMENT_ROLE_TARGET,
]

PAYMENT_STATUS_PENDING = 'pending'
PAYMENT_STATUS_ACTIVE = 'active'
PAYMENT_STATUS_FAILED = 'failed'
PAYMENT_STATUS_CANCELED = 'canceled'

VALID_PAYMENT_STATUSES = [
    PAYMENT_STATUS_PENDING,
    PAYMENT_STATUS_ACTIVE,
    PAYMENT_STATUS_FAILED,
    PAYMENT_STATUS_CANCELED,
]


def is_valid_document_role(role: str) -> bool:
    return role in VALID_DOCUMENT_ROLES

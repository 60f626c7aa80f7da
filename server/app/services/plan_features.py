"""
Plan feature matrix and feature gating helpers.
"""

from typing import Any, Dict, Optional

PLAN_STARTER = "Starter"
PLAN_PROFESSIONAL = "Professional"
PLAN_ENTERPRISE = "Enterprise"

PLAN_ORDER = (PLAN_STARTER, PLAN_PROFESSIONAL, PLAN_ENTERPRISE)

# Numeric limits: users, documents, storage (GB), price (USD per month)
PLAN_FEATURES: Dict[str, Dict[str, Any]] = {
    PLAN_STARTER: {
        "max_users": 5,
        "max_documents": 100,
        "max_storage": 5,
        "ai_assistant": False,
        "advanced_analytics": False,
        "priority_support": False,
        "custom_integrations": False,
        "price": 0,
    },
    PLAN_PROFESSIONAL: {
        "max_users": 20,
        "max_documents": 1000,
        "max_storage": 50,
        "ai_assistant": True,
        "advanced_analytics": True,
        "priority_support": False,
        "custom_integrations": False,
        "price": 49,
    },
    PLAN_ENTERPRISE: {
        "max_users": 100,
        "max_documents": 10000,
        "max_storage": 500,
        "ai_assistant": True,
        "advanced_analytics": True,
        "priority_support": True,
        "custom_integrations": True,
        "price": 199,
    }
}

USAGE_LIMIT_FEATURES = ("max_users", "max_documents", "max_storage")


class FeatureNotAvailableError(Exception):
    """Raised when the organization's plan does not include a feature."""

    def __init__(self, feature: str, plan: Optional[str] = None):
        self.feature = feature
        self.plan = plan
        self.required_plan = minimum_required_plan(feature)
        super().__init__(f"This feature requires a {self.required_plan} plan or higher.")


def has_feature_access(plan: Optional[str], feature: str) -> bool:
    features = PLAN_FEATURES.get(plan)
    if not features:
        return False

    value = features.get(feature)
    if isinstance(value, bool):
        return value
    # Numeric limits count as available when non-zero
    return isinstance(value, (int, float)) and value > 0


def get_usage_percentage(plan: Optional[str], feature: str, current_usage: float) -> float:
    features = PLAN_FEATURES.get(plan)
    if not features:
        return 100.0

    limit = features.get(feature)
    if isinstance(limit, bool) or not isinstance(limit, (int, float)) or limit <= 0:
        return 100.0
    return (current_usage / limit) * 100


def minimum_required_plan(feature: str) -> str:
    """Lowest plan that grants ``feature``; Starter for anything every plan has."""
    for plan in PLAN_ORDER:
        if has_feature_access(plan, feature):
            return plan
    return PLAN_STARTER

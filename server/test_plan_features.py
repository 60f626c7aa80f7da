#!/usr/bin/env python3
"""
Tests for the plan feature matrix and organization context gating
"""

import pytest

from app.services.organization_context import OrganizationContext
from app.services.plan_features import (
    FeatureNotAvailableError,
    PLAN_FEATURES,
    get_usage_percentage,
    has_feature_access,
    minimum_required_plan
)


def test_matrix_limits_and_prices():
    assert PLAN_FEATURES["Starter"]["max_users"] == 5
    assert PLAN_FEATURES["Professional"]["max_documents"] == 1000
    assert PLAN_FEATURES["Enterprise"]["max_storage"] == 500
    assert [PLAN_FEATURES[plan]["price"] for plan in ("Starter", "Professional", "Enterprise")] == [0, 49, 199]


@pytest.mark.parametrize("plan,feature,expected", [
    ("Starter", "ai_assistant", False),
    ("Professional", "ai_assistant", True),
    ("Professional", "priority_support", False),
    ("Enterprise", "custom_integrations", True),
    ("Starter", "max_documents", True),
    ("Starter", "price", False),
    ("Unknown", "max_users", False),
    (None, "ai_assistant", False),
    ("Enterprise", "no_such_feature", False),
])
def test_has_feature_access(plan, feature, expected):
    assert has_feature_access(plan, feature) is expected


def test_usage_percentage():
    assert get_usage_percentage("Starter", "max_users", 3) == pytest.approx(60.0)
    assert get_usage_percentage("Professional", "max_storage", 23) == pytest.approx(46.0)
    assert get_usage_percentage("Unknown", "max_users", 1) == 100
    assert get_usage_percentage("Starter", "ai_assistant", 1) == 100


def test_minimum_required_plan():
    assert minimum_required_plan("ai_assistant") == "Professional"
    assert minimum_required_plan("advanced_analytics") == "Professional"
    assert minimum_required_plan("priority_support") == "Enterprise"
    assert minimum_required_plan("max_users") == "Starter"


def test_context_require_feature():
    OrganizationContext(organization_id=1, name="Acme", plan="Enterprise").require_feature("ai_assistant")

    starter = OrganizationContext(organization_id=5, name="Umbrella Corp", plan="Starter")
    with pytest.raises(FeatureNotAvailableError) as exc_info:
        starter.require_feature("ai_assistant")
    assert exc_info.value.required_plan == "Professional"
    assert "Professional plan or higher" in str(exc_info.value)


def test_context_without_organization_has_no_features():
    assert OrganizationContext().has_feature("max_users") is False

from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from accounts.models import User
from forecasting.models import HealthScoreRule, Opportunity, QuotaPeriod
from organizations.models import Organization


@pytest.fixture
def organization(db):
    return Organization.objects.create(name="Acme Sales", code="ACME")


@pytest.fixture
def child_organization(organization):
    return Organization.objects.create(name="Acme EMEA", code="ACME-EMEA", parent=organization)


@pytest.fixture
def make_user(organization):
    counter = {"n": 0}

    def _make(role=User.Role.REP, **extra):
        counter["n"] += 1
        n = counter["n"]
        extra.setdefault("organization", organization)
        extra.setdefault("first_name", role.title())
        extra.setdefault("last_name", f"User{n}")
        return User.objects.create_user(
            email=extra.pop("email", f"{role.lower()}{n}@test.com"),
            password="testpass123",
            role=role,
            **extra,
        )

    return _make


@pytest.fixture
def admin_user(make_user):
    return make_user(User.Role.ADMIN, email="admin@test.com", admin_has_full_analytics_access=True)


@pytest.fixture
def manager_user(make_user):
    return make_user(User.Role.MANAGER, email="manager@test.com", hierarchy_level=1)


@pytest.fixture
def rep_user(make_user, manager_user):
    return make_user(
        User.Role.REP,
        email="rep@test.com",
        first_name="Rita",
        last_name="Rep",
        hierarchy_level=2,
        manager=manager_user,
    )


@pytest.fixture
def other_rep(make_user):
    return make_user(User.Role.REP, email="other@test.com", hierarchy_level=2)


@pytest.fixture
def today():
    return timezone.now().date()


@pytest.fixture
def quota_period(organization, today):
    return QuotaPeriod.objects.create(
        organization=organization,
        period_name="Current quarter",
        period_start=today - timedelta(days=30),
        period_end=today + timedelta(days=60),
        fiscal_year="FY",
        fiscal_quarter="Q",
    )


@pytest.fixture
def default_rules(organization):
    rows = [
        (27, 30, "Commit", False, "1.0"),
        (0, 26, "Commit", False, "0.85"),
        (21, 23, "Best Case", False, "1.0"),
        (18, 20, "Best Case", True, "0"),
    ]
    return [
        HealthScoreRule.objects.create(
            organization=organization,
            min_score=lo,
            max_score=hi,
            mapped_category=category,
            suppression=suppressed,
            probability_modifier=Decimal(modifier),
        )
        for lo, hi, category, suppressed, modifier in rows
    ]


@pytest.fixture
def make_opportunity(organization, today):
    def _make(rep, **extra):
        extra.setdefault("organization", organization)
        extra.setdefault("close_date", today + timedelta(days=10))
        extra.setdefault("amount", Decimal("10000.00"))
        extra.setdefault("forecast_stage", "Commit")
        extra.setdefault("account_name", "Globex")
        extra.setdefault("opportunity_name", "Renewal")
        return Opportunity.objects.create(rep=rep, **extra)

    return _make

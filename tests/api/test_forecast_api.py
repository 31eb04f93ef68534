from decimal import Decimal

import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from accounts.models import User
from forecasting.models import HealthScoreRule

URL = "/api/v1/forecast/gap-driving-deals/"
OVERLAPS_URL = "/api/v1/forecast/health-score-rules/overlaps/"


def _client(user):
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture
def opportunity(rep_user, make_opportunity):
    return make_opportunity(
        rep_user,
        health_score=Decimal("15"),
        budget_score=1,
        budget_tip="Confirm the budget owner.",
    )


@pytest.mark.django_db
def test_requires_authentication(db):
    response = APIClient().get(URL)
    assert response.status_code == 401


@pytest.mark.django_db
def test_jwt_authenticated_request(manager_user, quota_period):
    token = RefreshToken.for_user(manager_user).access_token
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
    response = client.get(URL)
    assert response.status_code == 200


@pytest.mark.django_db
def test_manager_gets_outlook(manager_user, quota_period, default_rules, opportunity):
    response = _client(manager_user).get(URL)

    assert response.status_code == 200
    payload = response.json()
    assert payload["quota_period"]["id"] == str(quota_period.pk)
    assert payload["totals"]["gap"] == pytest.approx(-1200)
    deal = payload["groups"]["commit"]["deals"][0]
    assert deal["id"] == str(opportunity.pk)
    assert deal["rep"]["rep_name"] == "Rita Rep"
    assert "budget" in [flag["key"] for flag in deal["risk_flags"]]
    assert "Confirm the budget owner." in deal["coaching_insights"]
    assert "no-store" in response["Cache-Control"]


@pytest.mark.django_db
def test_invalid_filter_returns_400(manager_user, quota_period):
    response = _client(manager_user).get(URL, {"mode": "everything"})

    assert response.status_code == 400
    payload = response.json()
    assert payload["code"] == "invalid_filter"
    assert payload["field"] == "mode"


@pytest.mark.django_db
def test_missing_quota_period_returns_400(manager_user):
    response = _client(manager_user).get(URL)

    assert response.status_code == 400
    assert response.json()["code"] == "missing_quota_period"


@pytest.mark.django_db
def test_rep_cannot_see_other_rep(rep_user, other_rep, quota_period, make_opportunity):
    make_opportunity(other_rep)
    response = _client(rep_user).get(URL, {"rep_id": str(other_rep.pk)})

    assert response.status_code == 200
    payload = response.json()
    assert all(group["deals"] == [] for group in payload["groups"].values())
    assert payload["totals"]["crm_outlook_weighted"] == 0
    assert payload["rep_context"] is None


@pytest.mark.django_db
def test_user_without_organization_is_forbidden(db):
    user = User.objects.create_user(email="orphan@test.com", password="testpass123", first_name="No", last_name="Org")
    response = _client(user).get(URL)
    assert response.status_code == 403


@pytest.mark.django_db
def test_csv_export(manager_user, quota_period, default_rules, opportunity):
    response = _client(manager_user).get(URL, {"export": "csv"})

    assert response.status_code == 200
    assert response["Content-Type"].startswith("text/csv")
    lines = response.content.decode("utf-8-sig").strip().splitlines()
    assert lines[0].startswith("Bucket,Rep,Account,Opportunity")
    assert len(lines) == 2
    assert lines[1].startswith("Commit,Rita Rep,Globex,Renewal")


@pytest.mark.django_db
def test_overlaps_endpoint_for_admin(admin_user, default_rules, organization):
    HealthScoreRule.objects.create(
        organization=organization,
        min_score=25,
        max_score=28,
        mapped_category=HealthScoreRule.Category.COMMIT,
    )
    response = _client(admin_user).get(OVERLAPS_URL)

    assert response.status_code == 200
    payload = response.json()
    assert payload["count"] == 2
    assert payload["results"][0]["mapped_category"] == "Commit"


@pytest.mark.django_db
def test_overlaps_endpoint_requires_admin(manager_user):
    response = _client(manager_user).get(OVERLAPS_URL)
    assert response.status_code == 403

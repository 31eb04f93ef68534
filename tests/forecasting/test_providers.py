from datetime import timedelta
from decimal import Decimal

import pytest
from django.db import ProgrammingError

from forecasting import providers
from forecasting.models import HealthScoreRule
from forecasting.quota_periods import PeriodWindow
from organizations.models import ForecastStageProbability, ScoreDefinition


@pytest.mark.django_db
def test_get_rules_reads_org_table(organization, default_rules):
    rules = providers.get_rules(organization.pk)
    assert len(rules) == 4
    suppressed = [r for r in rules if r.suppression]
    assert suppressed[0].mapped_category == "Best Case"
    assert suppressed[0].organization_id == str(organization.pk)


@pytest.mark.django_db
def test_get_rules_falls_back_when_table_missing(organization, monkeypatch):
    def _boom(*args, **kwargs):
        raise ProgrammingError("relation does not exist")

    monkeypatch.setattr(HealthScoreRule.objects, "filter", _boom)
    assert providers.get_rules(organization.pk) is None


@pytest.mark.django_db
def test_rule_cache_is_invalidated_on_save(organization, default_rules):
    assert len(providers.get_rules(organization.pk)) == 4
    HealthScoreRule.objects.create(
        organization=organization,
        min_score=0,
        max_score=17,
        mapped_category=HealthScoreRule.Category.PIPELINE,
        probability_modifier=Decimal("1.0"),
    )
    assert len(providers.get_rules(organization.pk)) == 5


@pytest.mark.django_db
def test_probabilities_override_defaults(organization):
    ForecastStageProbability.objects.create(organization=organization, stage_key="commit", probability=Decimal("0.9"))
    probabilities = providers.get_probabilities(organization.pk)
    assert probabilities == {"commit": 0.9, "best_case": 0.325, "pipeline": 0.1}


@pytest.mark.django_db
def test_score_labels_map_field_prefix_to_category(organization):
    ScoreDefinition.objects.create(organization=organization, category="eb", score=1, label="Identified")
    ScoreDefinition.objects.create(organization=organization, category="Budget", score=0, label="  ")
    assert providers.get_score_labels(organization.pk) == {"economic_buyer": {1: "Identified"}}


@pytest.mark.django_db
def test_overlapping_rules(organization, default_rules):
    assert providers.overlapping_rules(organization.pk) == []
    HealthScoreRule.objects.create(
        organization=organization,
        min_score=20,
        max_score=22,
        mapped_category=HealthScoreRule.Category.BEST_CASE,
    )
    pairs = providers.overlapping_rules(organization.pk)
    assert len(pairs) == 2


@pytest.mark.django_db
def test_load_directory_for_manager(organization, manager_user, rep_user, other_rep):
    users, edges, parent_map = providers.load_directory(providers.user_node(manager_user))
    assert {u.id for u in users} == {str(manager_user.pk), str(rep_user.pk), str(other_rep.pk)}
    assert edges == []
    assert parent_map == {}


@pytest.mark.django_db
def test_fetch_deals_scopes_window_and_reps(rep_user, other_rep, quota_period, make_opportunity, today):
    inside = make_opportunity(rep_user, amount=Decimal("500"))
    make_opportunity(rep_user, close_date=quota_period.period_end + timedelta(days=1))
    make_opportunity(rep_user, close_date=None)
    make_opportunity(other_rep)
    window = PeriodWindow(
        id=str(quota_period.pk),
        period_name=quota_period.period_name,
        period_start=quota_period.period_start,
        period_end=quota_period.period_end,
    )
    deals = providers.fetch_deals({str(rep_user.organization_id)}, window, {str(rep_user.pk)})
    assert [d.id for d in deals] == [str(inside.pk)]
    assert deals[0].rep_name == "Rita Rep"
    assert deals[0].scores["economic_buyer"] is None
    assert providers.fetch_deals({str(rep_user.organization_id)}, window, set()) == []


@pytest.mark.django_db
def test_fetch_deals_orders_by_close_date_then_amount(rep_user, quota_period, make_opportunity, today):
    late = make_opportunity(rep_user, close_date=today + timedelta(days=20))
    small = make_opportunity(rep_user, amount=Decimal("100"))
    big = make_opportunity(rep_user, amount=Decimal("900"))
    window = PeriodWindow(
        id=str(quota_period.pk),
        period_name=quota_period.period_name,
        period_start=quota_period.period_start,
        period_end=quota_period.period_end,
    )
    deals = providers.fetch_deals({str(rep_user.organization_id)}, window, {str(rep_user.pk)}, rep_name="rita")
    assert [d.id for d in deals] == [str(big.pk), str(small.pk), str(late.pk)]

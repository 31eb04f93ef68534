from io import StringIO

import pytest
from django.core.management import CommandError, call_command

from forecasting.health_rules import DEFAULT_RULES
from forecasting.models import HealthScoreRule


@pytest.mark.django_db
def test_seed_installs_default_rules(organization):
    out = StringIO()
    call_command("seed_health_score_rules", organization.code, stdout=out)
    assert HealthScoreRule.objects.filter(organization=organization).count() == len(DEFAULT_RULES)
    suppressed = HealthScoreRule.objects.get(organization=organization, suppression=True)
    assert suppressed.mapped_category == "Best Case"
    assert "seeded" in out.getvalue()


@pytest.mark.django_db
def test_seed_refuses_to_overwrite_without_reset(organization, default_rules):
    out = StringIO()
    call_command("seed_health_score_rules", organization.code, stdout=out)
    assert HealthScoreRule.objects.filter(organization=organization).count() == len(default_rules)
    assert "--reset" in out.getvalue()


@pytest.mark.django_db
def test_seed_reset_replaces_rules(organization, default_rules):
    call_command("seed_health_score_rules", organization.code, "--reset", stdout=StringIO())
    assert HealthScoreRule.objects.filter(organization=organization).count() == len(DEFAULT_RULES)


@pytest.mark.django_db
def test_seed_unknown_organization():
    with pytest.raises(CommandError):
        call_command("seed_health_score_rules", "NOPE", stdout=StringIO())

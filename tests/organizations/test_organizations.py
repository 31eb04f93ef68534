from decimal import Decimal

import pytest

from core.exceptions import HierarchyCycleError
from organizations.admin import OrganizationAdminForm
from organizations.models import ForecastStageProbability, Organization
from organizations.services import (
    descendant_organization_ids,
    get_stage_probabilities,
    set_parent_organization,
    upsert_stage_probabilities,
)


@pytest.mark.django_db
def test_descendants_include_grandchildren(organization, child_organization):
    grandchild = Organization.objects.create(name="Acme FR", code="ACME-FR", parent=child_organization)
    Organization.objects.create(name="Unrelated", code="OTHER")
    assert descendant_organization_ids(organization.pk) == {
        str(organization.pk),
        str(child_organization.pk),
        str(grandchild.pk),
    }


@pytest.mark.django_db
def test_set_parent_rejects_cycle(organization, child_organization):
    with pytest.raises(HierarchyCycleError) as exc:
        set_parent_organization(organization, child_organization)
    assert exc.value.code == "organization_cycle"
    organization.refresh_from_db()
    assert organization.parent is None


@pytest.mark.django_db
def test_set_parent_rejects_self(organization):
    with pytest.raises(HierarchyCycleError):
        set_parent_organization(organization, organization)


@pytest.mark.django_db
def test_set_parent(organization):
    other = Organization.objects.create(name="Other", code="OTHER")
    set_parent_organization(other, organization)
    other.refresh_from_db()
    assert other.parent == organization
    set_parent_organization(other, None)
    other.refresh_from_db()
    assert other.parent is None


@pytest.mark.django_db
def test_admin_form_reports_cycle(organization, child_organization):
    form = OrganizationAdminForm(
        data={"name": organization.name, "code": organization.code, "parent": child_organization.pk, "is_active": True},
        instance=organization,
    )
    assert not form.is_valid()
    assert form.non_field_errors()


@pytest.mark.django_db
def test_stage_probabilities_ignore_out_of_range_rows(organization):
    ForecastStageProbability.objects.create(organization=organization, stage_key="pipeline", probability=Decimal("0.25"))
    ForecastStageProbability.objects.filter(organization=organization).update(probability=Decimal("1.5"))
    assert get_stage_probabilities(organization.pk)["pipeline"] == 0.1


@pytest.mark.django_db
def test_upsert_stage_probabilities(organization):
    upsert_stage_probabilities(organization, {"commit": "0.7", "best_case": 0.4, "pipeline": 0.05})
    upsert_stage_probabilities(organization, {"commit": 0.75, "best_case": 0.4, "pipeline": 0.05})
    assert ForecastStageProbability.objects.filter(organization=organization).count() == 3
    assert get_stage_probabilities(organization.pk) == {"commit": 0.75, "best_case": 0.4, "pipeline": 0.05}


@pytest.mark.django_db
@pytest.mark.parametrize("values", [{"commit": 0.7}, {"commit": 2, "best_case": 0.4, "pipeline": 0.1}])
def test_upsert_stage_probabilities_rejects_bad_input(organization, values):
    with pytest.raises(ValueError):
        upsert_stage_probabilities(organization, values)

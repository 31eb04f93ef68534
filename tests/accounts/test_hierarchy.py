import pytest

from accounts.forms import VisibilityEdgeForm
from accounts.models import User, VisibilityEdge
from accounts.services import assign_manager, grant_visibility, revoke_visibility
from core.exceptions import HierarchyCycleError


@pytest.mark.django_db
def test_assign_manager(manager_user, other_rep):
    assign_manager(other_rep, manager_user)
    other_rep.refresh_from_db()
    assert other_rep.manager == manager_user


@pytest.mark.django_db
def test_assign_manager_rejects_self(manager_user):
    with pytest.raises(HierarchyCycleError):
        assign_manager(manager_user, manager_user)


@pytest.mark.django_db
def test_assign_manager_rejects_loop(manager_user, rep_user):
    with pytest.raises(HierarchyCycleError) as exc:
        assign_manager(manager_user, rep_user)
    assert exc.value.code == "manager_cycle"
    manager_user.refresh_from_db()
    assert manager_user.manager is None


@pytest.mark.django_db
def test_grant_visibility_is_idempotent(manager_user, other_rep):
    first = grant_visibility(manager_user, other_rep)
    second = grant_visibility(manager_user, other_rep)
    assert first.pk == second.pk
    assert VisibilityEdge.objects.count() == 1
    assert revoke_visibility(manager_user, other_rep) == 1


@pytest.mark.django_db
def test_grant_visibility_rejects_loop_through_manager_links(manager_user, rep_user):
    with pytest.raises(HierarchyCycleError) as exc:
        grant_visibility(rep_user, manager_user)
    assert exc.value.code == "visibility_cycle"


@pytest.mark.django_db
def test_grant_visibility_rejects_loop_through_grants(make_user):
    a = make_user(User.Role.MANAGER)
    b = make_user(User.Role.MANAGER)
    c = make_user(User.Role.MANAGER)
    grant_visibility(a, b)
    grant_visibility(b, c)
    with pytest.raises(HierarchyCycleError):
        grant_visibility(c, a)


@pytest.mark.django_db
def test_visibility_edge_form_reports_cycle(manager_user, rep_user):
    form = VisibilityEdgeForm(data={"manager": rep_user.pk, "visible_user": manager_user.pk})
    assert not form.is_valid()
    assert form.non_field_errors()


@pytest.mark.django_db
def test_full_name_prefers_display_name(make_user):
    user = make_user(first_name="Ada", last_name="Lovelace", display_name="Countess")
    assert user.get_full_name() == "Countess"
    assert str(make_user(first_name="Alan", last_name="Turing")) == "Alan Turing"


@pytest.mark.django_db
def test_create_superuser_defaults(organization):
    user = User.objects.create_superuser(
        email="root@test.com",
        password="testpass123",
        first_name="Root",
        last_name="User",
        organization=organization,
    )
    assert user.is_admin
    assert user.admin_has_full_analytics_access
    assert user.is_staff and user.is_superuser


def test_create_user_requires_email():
    with pytest.raises(ValueError):
        User.objects.create_user(email="", password="x")

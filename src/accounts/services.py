"""Account-related helper services."""

from __future__ import annotations

import logging
from collections import defaultdict

from django.db import transaction

from accounts.models import User, VisibilityEdge
from core.exceptions import HierarchyCycleError
from forecasting.visibility import reachable_from

logger = logging.getLogger("outlook")


def _downward_edges(organization_id) -> dict:
    """``{user_id: [user_ids seen from it]}`` over manager links and grants."""
    edges = defaultdict(list)
    users = User.objects.filter(organization_id=organization_id).values_list("id", "manager_id")
    for user_id, manager_id in users:
        if manager_id:
            edges[manager_id].append(user_id)
    grants = VisibilityEdge.objects.filter(
        manager__organization_id=organization_id,
    ).values_list("manager_id", "visible_user_id")
    for manager_id, visible_id in grants:
        edges[manager_id].append(visible_id)
    return edges


def check_no_cycle(above: User, below: User, code: str):
    """Raise ``HierarchyCycleError`` if putting *above* over *below* would loop."""
    if above.pk == below.pk:
        raise HierarchyCycleError(
            "%(user)s cannot be placed above themselves.",
            code=code,
            params={"user": below.email},
        )
    # A cycle appears iff `above` is already reachable from `below`.
    if above.pk in reachable_from(below.pk, _downward_edges(below.organization_id)):
        raise HierarchyCycleError(
            "%(above)s is already below %(below)s in the hierarchy.",
            code=code,
            params={"above": above.email, "below": below.email},
        )


@transaction.atomic
def assign_manager(user: User, manager: User | None) -> User:
    """Set ``user.manager``, rejecting links that would form a loop."""
    if manager is not None:
        check_no_cycle(manager, user, "manager_cycle")
    user.manager = manager
    user.save(update_fields=["manager"])
    logger.info("user %s manager set to %s", user.email, manager.email if manager else None)
    return user


@transaction.atomic
def grant_visibility(manager: User, visible_user: User) -> VisibilityEdge:
    """Create (or return) an explicit visibility grant."""
    existing = VisibilityEdge.objects.filter(manager=manager, visible_user=visible_user).first()
    if existing is not None:
        return existing
    check_no_cycle(manager, visible_user, "visibility_cycle")
    edge = VisibilityEdge.objects.create(manager=manager, visible_user=visible_user)
    logger.info("visibility granted: %s -> %s", manager.email, visible_user.email)
    return edge


def revoke_visibility(manager: User, visible_user: User) -> int:
    deleted, _ = VisibilityEdge.objects.filter(manager=manager, visible_user=visible_user).delete()
    return deleted

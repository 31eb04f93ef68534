"""Which reps' deals a user may see.

Everything here works on plain snapshots of the user directory so it can
be exercised without a database. An empty result means "nothing visible";
callers must never widen it.
"""
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass

ROLE_REP = "REP"
ROLE_MANAGER = "MANAGER"
ROLE_EXEC_MANAGER = "EXEC_MANAGER"
ROLE_ADMIN = "ADMIN"

KNOWN_ROLES = (ROLE_REP, ROLE_MANAGER, ROLE_EXEC_MANAGER, ROLE_ADMIN)
MANAGER_ROLES = (ROLE_MANAGER, ROLE_EXEC_MANAGER)


@dataclass(frozen=True)
class UserNode:
    id: str
    organization_id: str | None
    role: str
    hierarchy_level: int = 0
    manager_id: str | None = None
    is_active: bool = True
    admin_has_full_analytics_access: bool = False
    see_all_visibility: bool = False


def reachable_from(start, edges) -> set:
    """*start* plus every node reachable through ``edges`` (``{node: [next, ...]}``)."""
    seen = {start}
    stack = [start]
    while stack:
        current = stack.pop()
        for nxt in edges.get(current, ()):
            if nxt not in seen:
                seen.add(nxt)
                stack.append(nxt)
    return seen


def organization_closure(org_id, parent_map) -> set:
    """*org_id* plus every organization whose parent chain reaches it."""
    children = defaultdict(list)
    for child, parent in parent_map.items():
        if parent is not None:
            children[str(parent)].append(str(child))
    return reachable_from(str(org_id), children)


def resolve_visible_user_ids(caller, directory, edges=(), org_parent_map=None) -> set:
    """Return the ids of users whose deals *caller* may see.

    Parameters
    ----------
    caller : UserNode
    directory : iterable of UserNode
        Users of the caller's organization (and, for full-access admins,
        of its descendant organizations).
    edges : iterable of (manager_id, visible_user_id)
        Explicit visibility grants.
    org_parent_map : dict
        ``{org_id: parent_id}``; only needed for full-access admins.
    """
    if caller is None or not caller.is_active or caller.role not in KNOWN_ROLES:
        return set()

    caller_id = str(caller.id)
    if caller.role == ROLE_REP:
        return {caller_id}

    users = {str(u.id): u for u in directory}
    caller_org = str(caller.organization_id) if caller.organization_id is not None else None

    if caller.role == ROLE_ADMIN and caller.admin_has_full_analytics_access:
        if caller_org is None:
            return {caller_id}
        orgs = organization_closure(caller_org, org_parent_map or {})
        visible = {
            uid for uid, u in users.items()
            if u.is_active and u.organization_id is not None and str(u.organization_id) in orgs
        }
        visible.add(caller_id)
        return visible

    same_org = {
        uid: u for uid, u in users.items()
        if u.is_active and caller_org is not None and str(u.organization_id) == caller_org
    }

    if caller.role in MANAGER_ROLES and caller.see_all_visibility:
        visible = {
            uid for uid, u in same_org.items()
            if u.hierarchy_level >= caller.hierarchy_level
        }
        visible.add(caller_id)
        return visible

    downward = defaultdict(list)
    for uid, u in users.items():
        if u.manager_id is not None:
            downward[str(u.manager_id)].append(uid)
    for manager_id, visible_id in edges:
        downward[str(manager_id)].append(str(visible_id))

    reachable = reachable_from(caller_id, downward)
    visible = {uid for uid in reachable if uid in same_org}
    visible.add(caller_id)
    return visible

"""ORM-backed collaborators for the outlook engine.

Each loader turns database rows into the plain records the pure engine
modules consume.
"""
from __future__ import annotations

import logging

from django.db import OperationalError, ProgrammingError, transaction
from django.db.models import Q

from accounts.models import User, VisibilityEdge
from forecasting import cache
from forecasting.engine import DealRecord
from forecasting.health_rules import HealthRule, find_overlaps
from forecasting.models import MEDDPICC_FIELD_PREFIXES, HealthScoreRule, Opportunity, QuotaPeriod
from forecasting.quota_periods import PeriodWindow
from forecasting.risk_flags import CATEGORIES
from forecasting.visibility import ROLE_ADMIN, UserNode, organization_closure
from organizations.models import ScoreDefinition
from organizations.services import get_stage_probabilities, organization_parent_map

logger = logging.getLogger("outlook")

# model field prefix -> risk category key
_PREFIX_TO_KEY = {prefix: key for key, _, prefix in CATEGORIES}


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

def _load_rules(org_id):
    try:
        with transaction.atomic():
            rows = list(
                HealthScoreRule.objects.filter(organization_id=org_id).values_list(
                    "id",
                    "min_score",
                    "max_score",
                    "mapped_category",
                    "suppression",
                    "probability_modifier",
                )
            )
    except (ProgrammingError, OperationalError):
        logger.warning(
            "health score rule table unavailable for org %s; using CRM-only weighting",
            org_id,
            exc_info=True,
        )
        return None
    return [
        HealthRule(
            id=rule_id,
            min_score=lo,
            max_score=hi,
            mapped_category=category,
            suppression=suppression,
            probability_modifier=float(modifier) if modifier is not None else 1.0,
            organization_id=str(org_id),
        )
        for rule_id, lo, hi, category, suppression, modifier in rows
    ]


def get_rules(org_id):
    """Rule table for *org_id*, or ``None`` when the table cannot be read."""
    return cache.get_or_load("rules", org_id, _load_rules)


def get_probabilities(org_id) -> dict:
    return cache.get_or_load("stage-probabilities", org_id, get_stage_probabilities)


def _load_score_labels(org_id) -> dict:
    labels = {}
    rows = ScoreDefinition.objects.filter(organization_id=org_id).values_list("category", "score", "label")
    for category, score, label in rows:
        key = (category or "").strip().lower()
        key = _PREFIX_TO_KEY.get(key, key)
        text = (label or "").strip()
        if text:
            labels.setdefault(key, {})[int(score)] = text
    return labels


def get_score_labels(org_id) -> dict:
    return cache.get_or_load("score-labels", org_id, _load_score_labels)


def overlapping_rules(org_id):
    return find_overlaps(_load_rules(org_id) or [])


# ---------------------------------------------------------------------------
# Hierarchy
# ---------------------------------------------------------------------------

def user_node(user) -> UserNode:
    return UserNode(
        id=str(user.pk),
        organization_id=str(user.organization_id) if user.organization_id else None,
        role=user.role,
        hierarchy_level=user.hierarchy_level,
        manager_id=str(user.manager_id) if user.manager_id else None,
        is_active=user.is_active,
        admin_has_full_analytics_access=user.admin_has_full_analytics_access,
        see_all_visibility=user.see_all_visibility,
    )


def load_directory(caller):
    """``(users, edges, parent_map)`` needed to resolve *caller*'s visibility."""
    if caller.organization_id is None:
        return [], [], {}
    parent_map = {}
    org_ids = {str(caller.organization_id)}
    if caller.role == ROLE_ADMIN and caller.admin_has_full_analytics_access:
        parent_map = organization_parent_map()
        org_ids = organization_closure(caller.organization_id, parent_map)

    users = [
        user_node(u)
        for u in User.objects.filter(organization_id__in=org_ids).only(
            "id",
            "organization",
            "role",
            "hierarchy_level",
            "manager",
            "is_active",
            "admin_has_full_analytics_access",
            "see_all_visibility",
        )
    ]
    edges = list(
        VisibilityEdge.objects.filter(manager__organization_id__in=org_ids).values_list(
            "manager_id", "visible_user_id"
        )
    )
    return users, edges, parent_map


# ---------------------------------------------------------------------------
# Quota periods
# ---------------------------------------------------------------------------

def load_quota_periods(org_id) -> list:
    return [
        PeriodWindow(
            id=str(p.pk),
            period_name=p.period_name,
            period_start=p.period_start,
            period_end=p.period_end,
            fiscal_year=p.fiscal_year,
            fiscal_quarter=p.fiscal_quarter,
        )
        for p in QuotaPeriod.objects.filter(organization_id=org_id).order_by("-period_start", "-id")
    ]


# ---------------------------------------------------------------------------
# Deals
# ---------------------------------------------------------------------------

def _num(value):
    return None if value is None else float(value)


def deal_record(opp) -> DealRecord:
    scores, summaries, tips = {}, {}, {}
    for prefix in MEDDPICC_FIELD_PREFIXES:
        key = _PREFIX_TO_KEY[prefix]
        scores[key] = getattr(opp, f"{prefix}_score")
        summaries[key] = getattr(opp, f"{prefix}_summary") or None
        tips[key] = getattr(opp, f"{prefix}_tip") or None
    rep = opp.rep
    rep_name = (opp.rep_name or "").strip() or (rep.get_full_name() if rep else None)
    return DealRecord(
        id=str(opp.pk),
        amount=float(opp.amount or 0),
        forecast_stage=opp.forecast_stage,
        health_score=_num(opp.health_score),
        rep_id=str(opp.rep_id) if opp.rep_id else None,
        rep_name=rep_name or None,
        account_name=opp.account_name or None,
        opportunity_name=opp.opportunity_name or None,
        close_date=opp.close_date,
        scores=scores,
        summaries=summaries,
        tips=tips,
        risk_summary=opp.risk_summary or None,
        next_steps=opp.next_steps or None,
    )


def fetch_deals(org_ids, window, visible_user_ids, rep_id=None, rep_name=None) -> list:
    """Deals closing inside *window* and owned by a visible rep.

    Rows come back in repository order: close date, amount descending, id.
    """
    if not visible_user_ids:
        return []
    qs = Opportunity.objects.filter(
        organization_id__in=org_ids,
        close_date__isnull=False,
        close_date__gte=window.period_start,
        close_date__lte=window.period_end,
        rep_id__in=visible_user_ids,
    )
    if rep_id:
        qs = qs.filter(rep_id=rep_id)
    if rep_name:
        name = rep_name.strip()
        qs = qs.filter(
            Q(rep_name__icontains=name)
            | Q(rep__display_name__icontains=name)
            | Q(rep__first_name__icontains=name)
            | Q(rep__last_name__icontains=name)
        )
    qs = qs.select_related("rep").order_by("close_date", "-amount", "id")
    return [deal_record(opp) for opp in qs.iterator()]

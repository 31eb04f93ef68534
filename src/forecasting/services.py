"""Request-level service for the gap-driving deals report."""
from __future__ import annotations

import logging

from django.db import DatabaseError, transaction

from accounts.models import User
from forecasting import providers
from forecasting.engine import OutlookFilters, OutlookInputs, compute_outlook
from forecasting.exceptions import ForecastEngineError
from forecasting.quota_periods import select_quota_period
from forecasting.visibility import resolve_visible_user_ids

logger = logging.getLogger("outlook")


def _empty_outlook(window, filters) -> dict:
    result = compute_outlook(
        OutlookInputs(deals=[], stage_probabilities={}, filters=filters, quota_period=window)
    )
    result["rep_context"] = None
    return result


def build_gap_driving_deals(user, filters: OutlookFilters, today=None) -> dict:
    """Compute the outlook report for *user* under *filters*.

    Raises
    ------
    MissingQuotaPeriod
        The organization has no quota period to run against.
    ForecastEngineError
        Loading inputs from the database failed.
    """
    caller = providers.user_node(user)
    org_id = caller.organization_id
    try:
        with transaction.atomic():
            window = select_quota_period(providers.load_quota_periods(org_id), filters.quota_period_id, today)
            filters.quota_period_id = window.id

            users, edges, parent_map = providers.load_directory(caller)
            visible = resolve_visible_user_ids(caller, users, edges, parent_map)
            if not visible:
                logger.info("forecast scope empty for user %s", caller.id)
                return _empty_outlook(window, filters)
            if filters.rep_id and str(filters.rep_id) not in visible:
                return _empty_outlook(window, filters)

            org_ids = {u.organization_id for u in users if u.id in visible and u.organization_id}
            deals = providers.fetch_deals(
                org_ids,
                window,
                visible,
                rep_id=filters.rep_id,
                rep_name=filters.rep_name,
            )
            # caller organization configuration applies to every deal in scope
            rules = providers.get_rules(org_id)
            probabilities = providers.get_probabilities(org_id)
            labels = providers.get_score_labels(org_id)

            rep_display_name = None
            if filters.rep_id:
                rep = User.objects.filter(pk=filters.rep_id).first()
                rep_display_name = rep.get_full_name() if rep else None
    except DatabaseError as exc:
        logger.exception("failed to load forecast inputs for org %s", org_id)
        raise ForecastEngineError("Failed to load forecast data.") from exc

    return compute_outlook(
        OutlookInputs(
            deals=deals,
            stage_probabilities=probabilities,
            rules=rules,
            score_labels=labels,
            filters=filters,
            quota_period=window,
            rep_display_name=rep_display_name,
        )
    )


def export_rows(result) -> list:
    """Flatten the shown deals of *result* for CSV export."""
    rows = []
    for group in result["groups"].values():
        for deal in group["deals"]:
            rows.append({
                "bucket": deal["crm_stage"]["label"],
                "rep": deal["rep"]["rep_name"] or "",
                "account": deal["deal_name"]["account_name"] or "",
                "opportunity": deal["deal_name"]["opportunity_name"] or "",
                "close_date": deal["close_date"] or "",
                "amount": deal["amount"],
                "health_pct": "" if deal["health"]["health_pct"] is None else deal["health"]["health_pct"],
                "crm_weighted": round(deal["weighted"]["crm_weighted"], 2),
                "ai_weighted": round(deal["weighted"]["ai_weighted"], 2),
                "gap": round(deal["weighted"]["gap"], 2),
                "risk_flags": "; ".join(flag["label"] for flag in deal["risk_flags"]),
            })
    return rows

"""Outlook engine: turn a window of raw deals into weighted groups.

``compute_outlook`` is pure. Everything it needs (deals, rule table,
stage probabilities, score labels, filters) is handed in by the caller,
so it can be exercised without a database and is safe to call
concurrently.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from forecasting import drivers, health_rules, risk_flags, weighting
from forecasting.stages import BUCKET_KEYS, BUCKET_LABELS, StageClass, classify_stage

DEFAULT_LIMIT = 2000
DEFAULT_DRIVER_TAKE = 50
DEFAULT_RISK_TAKE = 2000

GROUP_LABELS = {
    drivers.MODE_DRIVERS: "{} deals driving the gap",
    drivers.MODE_RISK: "{} deals at risk",
}


@dataclass
class DealRecord:
    """One opportunity as read from the deal repository."""

    id: str
    amount: float = 0.0
    forecast_stage: str | None = None
    health_score: float | None = None
    rep_id: str | None = None
    rep_name: str | None = None
    account_name: str | None = None
    opportunity_name: str | None = None
    close_date: date | None = None
    scores: dict = field(default_factory=dict)
    summaries: dict = field(default_factory=dict)
    tips: dict = field(default_factory=dict)
    risk_summary: str | None = None
    next_steps: str | None = None


@dataclass
class OutlookFilters:
    buckets: tuple | None = None
    health_min_pct: float | None = None
    health_max_pct: float | None = None
    risk_category: str | None = None
    suppressed_only: bool = False
    mode: str = drivers.MODE_DRIVERS
    driver_min_abs_gap: float = 0.0
    driver_require_score_effect: bool = True
    driver_take_per_bucket: int = DEFAULT_DRIVER_TAKE
    risk_min_downside: float = 0.0
    risk_require_score_effect: bool = True
    risk_take_per_bucket: int = DEFAULT_RISK_TAKE
    limit: int = DEFAULT_LIMIT
    rep_id: str | None = None
    rep_name: str | None = None
    quota_period_id: str | None = None

    def as_echo(self) -> dict:
        return {
            "quota_period_id": self.quota_period_id,
            "rep_id": self.rep_id,
            "rep_name": self.rep_name or None,
            "buckets": list(self.buckets) if self.buckets else None,
            "risk_category": self.risk_category,
            "suppressed_only": self.suppressed_only,
            "health_min_pct": self.health_min_pct,
            "health_max_pct": self.health_max_pct,
            "mode": self.mode,
            "driver_min_abs_gap": self.driver_min_abs_gap,
            "driver_require_score_effect": self.driver_require_score_effect,
            "driver_take_per_bucket": self.driver_take_per_bucket,
            "risk_min_downside": self.risk_min_downside,
            "risk_require_score_effect": self.risk_require_score_effect,
            "risk_take_per_bucket": self.risk_take_per_bucket,
            "limit": self.limit,
        }


@dataclass
class OutlookInputs:
    deals: list
    stage_probabilities: dict
    rules: list | None = None
    score_labels: dict = field(default_factory=dict)
    filters: OutlookFilters = field(default_factory=OutlookFilters)
    quota_period: object = None
    rep_display_name: str | None = None


def _in_health_range(score, lo, hi) -> bool:
    if lo is None and hi is None:
        return True
    if score is None:
        return False
    if lo is not None and score < lo:
        return False
    if hi is not None and score > hi:
        return False
    return True


def _meddpicc(record, labels) -> list:
    rows = []
    for key, name, _ in risk_flags.CATEGORIES:
        score = record.scores.get(key)
        rows.append({
            "key": key,
            "name": name,
            "score": risk_flags.score_as_int(score),
            "score_label": risk_flags.label_for_score(labels, key, score) or None,
            "summary": record.summaries.get(key),
            "tip": record.tips.get(key),
        })
    return rows


def enrich_deal(record, bucket_key, effect, probability, labels) -> dict:
    """Deal payload with weighting, risk flags and coaching tips attached."""
    weighted = weighting.weigh(record.amount, probability, effect.health_modifier)
    flags = risk_flags.extract_risk_flags(record.scores, record.tips, effect.suppression, labels)
    return {
        "id": str(record.id),
        "rep": {"rep_id": record.rep_id, "rep_name": record.rep_name},
        "deal_name": {
            "account_name": record.account_name,
            "opportunity_name": record.opportunity_name,
        },
        "close_date": record.close_date.isoformat() if record.close_date else None,
        "crm_stage": {
            "raw": record.forecast_stage,
            "bucket": bucket_key,
            "label": BUCKET_LABELS[bucket_key],
        },
        "ai_verdict_stage": weighting.ai_verdict_stage(record.health_score),
        "amount": float(record.amount or 0),
        "health": {
            "health_score": record.health_score,
            "health_pct": weighting.health_pct(record.health_score),
            "suppression": effect.suppression,
            "probability_modifier": effect.probability_modifier,
            "health_modifier": effect.health_modifier,
        },
        "weighted": weighted.as_dict(),
        "meddpicc": _meddpicc(record, labels),
        "signals": {"risk_summary": record.risk_summary, "next_steps": record.next_steps},
        "risk_flags": [flag.as_dict() for flag in flags],
        "coaching_insights": risk_flags.coaching_insights(flags),
    }


def _select(deals, filters) -> list:
    if filters.mode == drivers.MODE_RISK:
        return drivers.select_risk(
            deals,
            min_downside=filters.risk_min_downside,
            require_score_effect=filters.risk_require_score_effect,
            take=filters.risk_take_per_bucket,
        )
    return drivers.select_drivers(
        deals,
        min_abs_gap=filters.driver_min_abs_gap,
        require_score_effect=filters.driver_require_score_effect,
        take=filters.driver_take_per_bucket,
    )


def rep_context(deals, rep_id, rep_name) -> dict | None:
    """Per-bucket deal count and average health for one selected rep."""
    if not rep_id:
        return None
    counts = {key: 0 for key in BUCKET_KEYS}
    scores = {key: [] for key in BUCKET_KEYS}
    for record in deals:
        if str(record.rep_id) != str(rep_id):
            continue
        stage = classify_stage(record.forecast_stage)
        if stage is StageClass.EXCLUDED:
            continue
        counts[stage.value] += 1
        if record.health_score:
            scores[stage.value].append(float(record.health_score))
    context = {"rep_id": str(rep_id), "rep_name": rep_name}
    for key in BUCKET_KEYS:
        values = scores[key]
        avg = sum(values) / len(values) if values else None
        context[key] = {"deals": counts[key], "avg_health_pct": weighting.health_pct(avg)}
    return context


def compute_outlook(inputs: OutlookInputs) -> dict:
    filters = inputs.filters
    lo = weighting.pct_to_score(filters.health_min_pct)
    hi = weighting.pct_to_score(filters.health_max_pct)
    wanted = set(filters.buckets) if filters.buckets else None

    scored = []
    for record in inputs.deals:
        stage = classify_stage(record.forecast_stage)
        if stage is StageClass.EXCLUDED:
            continue
        if wanted is not None and stage.value not in wanted:
            continue
        if not _in_health_range(record.health_score, lo, hi):
            continue
        rule = health_rules.resolve_rule(inputs.rules, stage, record.health_score)
        effect = health_rules.effective_modifier(rule)
        if filters.suppressed_only and not effect.suppression:
            continue
        scored.append((record, stage.value, effect))
        if len(scored) >= filters.limit:
            break

    enriched = [
        enrich_deal(
            record,
            bucket_key,
            effect,
            weighting.stage_probability(inputs.stage_probabilities, bucket_key),
            inputs.score_labels,
        )
        for record, bucket_key, effect in scored
    ]

    if filters.risk_category:
        enriched = [
            d for d in enriched
            if any(flag["key"] == filters.risk_category for flag in d["risk_flags"])
        ]

    label_format = GROUP_LABELS.get(filters.mode, GROUP_LABELS[drivers.MODE_DRIVERS])
    groups = {}
    for key in BUCKET_KEYS:
        universe = [d for d in enriched if d["crm_stage"]["bucket"] == key]
        shown = _select(universe, filters)
        groups[key] = {
            "label": label_format.format(BUCKET_LABELS[key]),
            "deals": shown,
            "totals": weighting.sum_weighted(universe),
            "shown_totals": weighting.sum_weighted(shown),
        }

    quota_period = inputs.quota_period
    return {
        "quota_period": quota_period.as_dict() if quota_period is not None else None,
        "filters": filters.as_echo(),
        "mode": filters.mode,
        "totals": weighting.outlook_totals(g["totals"] for g in groups.values()),
        "shown_totals": weighting.outlook_totals(g["shown_totals"] for g in groups.values()),
        "rep_context": rep_context(inputs.deals, filters.rep_id, inputs.rep_display_name),
        "groups": groups,
    }

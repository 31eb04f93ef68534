"""CRM vs. health-adjusted weighted figures."""
from __future__ import annotations

import math
from dataclasses import dataclass

from forecasting.stages import DEFAULT_STAGE_PROBABILITIES

HEALTH_SCORE_MAX = 30


@dataclass(frozen=True)
class Weighted:
    stage_probability: float
    crm_weighted: float
    ai_weighted: float
    gap: float

    def as_dict(self):
        return {
            "stage_probability": self.stage_probability,
            "crm_weighted": self.crm_weighted,
            "ai_weighted": self.ai_weighted,
            "gap": self.gap,
        }


def stage_probability(probabilities, bucket_key) -> float:
    if probabilities and bucket_key in probabilities:
        return float(probabilities[bucket_key])
    return DEFAULT_STAGE_PROBABILITIES.get(bucket_key, DEFAULT_STAGE_PROBABILITIES["pipeline"])


def weigh(amount, probability, health_modifier) -> Weighted:
    amount = float(amount or 0)
    crm = amount * probability
    ai = amount * probability * health_modifier
    return Weighted(stage_probability=probability, crm_weighted=crm, ai_weighted=ai, gap=ai - crm)


def health_pct(score):
    """0-30 score as a 0-100 percentage; ``None`` when unscored or zero."""
    if score is None:
        return None
    score = float(score)
    if score <= 0:
        return None
    # halves round up
    pct = math.floor(score / HEALTH_SCORE_MAX * 100 + 0.5)
    return max(0, min(100, pct))


def pct_to_score(pct):
    return None if pct is None else float(pct) / 100 * HEALTH_SCORE_MAX


def ai_verdict_stage(score):
    if score is None:
        return None
    if score >= 24:
        return "Commit"
    if score >= 18:
        return "Best Case"
    return "Pipeline"


def empty_totals():
    return {"crm_weighted": 0.0, "ai_weighted": 0.0, "gap": 0.0}


def sum_weighted(deals) -> dict:
    """Group totals over deal dicts carrying a ``weighted`` entry."""
    totals = empty_totals()
    for deal in deals:
        weighted = deal["weighted"]
        totals["crm_weighted"] += weighted["crm_weighted"]
        totals["ai_weighted"] += weighted["ai_weighted"]
        totals["gap"] += weighted["gap"]
    return totals


def outlook_totals(group_totals) -> dict:
    """Roll group totals up into ``crm_outlook_weighted`` / ``ai_outlook_weighted`` / ``gap``."""
    crm = ai = gap = 0.0
    for totals in group_totals:
        crm += totals["crm_weighted"]
        ai += totals["ai_weighted"]
        gap += totals["gap"]
    return {"crm_outlook_weighted": crm, "ai_outlook_weighted": ai, "gap": gap}

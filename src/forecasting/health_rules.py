"""Health-score rule resolution.

An organization maps (CRM bucket, health score) ranges onto a probability
modifier, or suppresses the deal entirely. Ranges may overlap; resolution
is still deterministic: the most specific lower bound wins, then the
narrowest upper bound, then the oldest rule.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from itertools import combinations

from forecasting.stages import BUCKET_LABELS, StageClass

MODIFIER_MIN = 0.0
MODIFIER_MAX = 9.9999


@dataclass(frozen=True)
class HealthRule:
    id: int
    min_score: int
    max_score: int
    mapped_category: str
    suppression: bool = False
    probability_modifier: float = 1.0
    organization_id: str | None = None


@dataclass(frozen=True)
class HealthEffect:
    suppression: bool
    probability_modifier: float
    health_modifier: float


NO_EFFECT = HealthEffect(suppression=False, probability_modifier=1.0, health_modifier=1.0)


def category_key(value) -> str:
    """``"Best Case"``, ``"BestCase"`` and ``"best_case"`` all give ``"bestcase"``."""
    return "".join(ch for ch in str(value or "").lower() if ch.isalpha())


def _bucket_category(bucket) -> str:
    key = bucket.value if isinstance(bucket, StageClass) else bucket
    return category_key(BUCKET_LABELS.get(key, key))


def resolve_rule(rules, bucket, score):
    """Pick the rule governing *score* in *bucket*, or ``None``."""
    if not rules or score is None:
        return None
    wanted = _bucket_category(bucket)
    best = None
    for rule in rules:
        if category_key(rule.mapped_category) != wanted:
            continue
        if not rule.min_score <= score <= rule.max_score:
            continue
        if best is None or (
            (-rule.min_score, rule.max_score, rule.id) < (-best.min_score, best.max_score, best.id)
        ):
            best = rule
    return best


def effective_modifier(rule) -> HealthEffect:
    if rule is None:
        return NO_EFFECT
    modifier = 1.0 if rule.probability_modifier is None else float(rule.probability_modifier)
    if rule.suppression:
        return HealthEffect(suppression=True, probability_modifier=modifier, health_modifier=0.0)
    return HealthEffect(suppression=False, probability_modifier=modifier, health_modifier=modifier)


def clamp_modifier(value) -> Decimal:
    """Clamp a stored modifier into ``[0, 9.9999]``."""
    if value is None:
        return Decimal("1.0000")
    number = float(value)
    number = max(MODIFIER_MIN, min(MODIFIER_MAX, number))
    return Decimal(f"{number:.4f}")


def ranges_overlap(a, b) -> bool:
    return a.min_score <= b.max_score and b.min_score <= a.max_score


def find_overlaps(rules):
    """Pairs of rules in the same organization and category whose ranges intersect.

    Overlaps across categories are expected and not reported.
    """
    ordered = sorted(rules, key=lambda r: (r.min_score, r.max_score, r.id))
    pairs = []
    for a, b in combinations(ordered, 2):
        if getattr(a, "organization_id", None) != getattr(b, "organization_id", None):
            continue
        if category_key(a.mapped_category) != category_key(b.mapped_category):
            continue
        if ranges_overlap(a, b):
            pairs.append((a, b))
    return pairs


# (min, max, category, suppression, modifier)
DEFAULT_RULES = (
    (27, 30, "Commit", False, 1.0),
    (24, 26, "Commit", False, 0.9),
    (21, 23, "Commit", False, 0.87),
    (0, 20, "Commit", False, 0.85),
    (21, 23, "Best Case", False, 1.0),
    (18, 20, "Best Case", True, 0.0),
    (0, 17, "Pipeline", False, 1.0),
)


def default_rule_table():
    return [
        HealthRule(
            id=index,
            min_score=lo,
            max_score=hi,
            mapped_category=category,
            suppression=suppressed,
            probability_modifier=modifier,
        )
        for index, (lo, hi, category, suppressed, modifier) in enumerate(DEFAULT_RULES, start=1)
    ]

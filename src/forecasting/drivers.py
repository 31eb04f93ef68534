"""Pick the deals that explain a bucket's gap, or that carry downside risk."""
from __future__ import annotations

MODE_DRIVERS = "drivers"
MODE_RISK = "risk"
MODES = (MODE_DRIVERS, MODE_RISK)

DRIVER_COVERAGE = 0.9
SCORE_EFFECT_EPSILON = 0.01
RISK_MODIFIER_CEILING = 0.999


def _gap(deal) -> float:
    return deal["weighted"]["gap"]


def _modifier(deal) -> float:
    return deal["health"]["health_modifier"]


def _sign(value) -> int:
    if value > 0:
        return 1
    if value < 0:
        return -1
    return 0


def select_drivers(deals, min_abs_gap=0.0, require_score_effect=True, take=50) -> list:
    """Smallest prefix of the ranked deals covering 90% of the bucket gap.

    Deals pulling in the same direction as the bucket total come first;
    the result holds at least one deal whenever any deal passes the filters.
    """
    deals = list(deals)
    if not deals or take <= 0:
        return []
    total = sum(_gap(d) for d in deals)
    direction = -1 if total <= 0 else 1

    filtered = [
        d for d in deals
        if (not require_score_effect or abs(_modifier(d) - 1.0) >= SCORE_EFFECT_EPSILON)
        and abs(_gap(d)) >= min_abs_gap
    ]
    ranked = sorted(filtered, key=_gap, reverse=direction > 0)

    candidates = [d for d in ranked if _sign(_gap(d)) == direction] or ranked

    target = DRIVER_COVERAGE * abs(total)
    picked = []
    covered = 0.0
    for deal in candidates:
        picked.append(deal)
        covered += abs(_gap(deal))
        if len(picked) >= take or covered >= target:
            break
    return picked


def select_risk(deals, min_downside=0.0, require_score_effect=True, take=2000) -> list:
    """Deals the health score pulls down by at least *min_downside*, worst first."""
    if take <= 0:
        return []
    qualifying = []
    for deal in deals:
        weighted = deal["weighted"]
        if weighted["gap"] >= 0:
            continue
        if weighted["crm_weighted"] - weighted["ai_weighted"] < min_downside:
            continue
        if require_score_effect and not _modifier(deal) < RISK_MODIFIER_CEILING:
            continue
        qualifying.append(deal)
    qualifying.sort(key=_gap)
    return qualifying[:take]

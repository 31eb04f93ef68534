"""MEDDPICC+TB risk flags and coaching tips for a single deal."""
from __future__ import annotations

from dataclasses import asdict, dataclass

# (key, display name, model field prefix), in emission order.
CATEGORIES = (
    ("economic_buyer", "Economic Buyer", "eb"),
    ("paper", "Paper Process", "paper"),
    ("champion", "Internal Sponsor", "champion"),
    ("process", "Decision Process", "process"),
    ("timing", "Timing", "timing"),
    ("criteria", "Criteria", "criteria"),
    ("competition", "Competition", "competition"),
    ("budget", "Budget", "budget"),
    ("pain", "Pain", "pain"),
    ("metrics", "Metrics", "metrics"),
)

CATEGORY_KEYS = tuple(key for key, _, _ in CATEGORIES)
CATEGORY_NAMES = {key: name for key, name, _ in CATEGORIES}
SUPPRESSED_KEY = "suppressed"
RISK_CATEGORIES = CATEGORY_KEYS + (SUPPRESSED_KEY,)

SUPPRESSED_LABEL = "Suppressed: excluded by health score rules"
SUPPRESSED_TIP = "Deal is suppressed by health score rules for this CRM bucket."


@dataclass(frozen=True)
class RiskFlag:
    key: str
    label: str
    tip: str | None = None

    def as_dict(self):
        return asdict(self)


def score_as_int(score):
    if score is None:
        return None
    try:
        return int(float(score))
    except (TypeError, ValueError):
        return None


def is_risk_score(score) -> bool:
    """Unscored, 0 and 1 are risks; 2 and 3 are acceptable."""
    if score is None:
        return True
    return score <= 1


def label_for_score(labels, key, score) -> str:
    value = score_as_int(score)
    if value is None or not labels:
        return ""
    return str(labels.get(key, {}).get(value) or "").strip()


def _clean_tip(tip):
    text = str(tip).strip() if tip is not None else ""
    return text or None


def extract_risk_flags(scores, tips, suppression=False, labels=None) -> list:
    """Flags for *scores* (``{key: score}``) in category order.

    ``labels`` maps ``{key: {score: label}}``; scores without a label read
    as ``"score N"`` or ``"unscored"``.
    """
    flags = []
    if suppression:
        flags.append(RiskFlag(SUPPRESSED_KEY, SUPPRESSED_LABEL, SUPPRESSED_TIP))
    for key, name, _ in CATEGORIES:
        score = scores.get(key)
        if not is_risk_score(score):
            continue
        label = label_for_score(labels, key, score)
        if not label:
            label = "unscored" if score is None else f"score {score_as_int(score)}"
        flags.append(RiskFlag(key, f"{name}: {label}", _clean_tip(tips.get(key))))
    return flags


def unique_non_empty(lines) -> list:
    seen = set()
    out = []
    for raw in lines or ():
        text = str(raw or "").strip()
        if not text or text in seen:
            continue
        seen.add(text)
        out.append(text)
    return out


def coaching_insights(flags) -> list:
    return unique_non_empty(flag.tip for flag in flags)

"""Map free-text CRM forecast stages onto outlook buckets."""
import enum
import re

_NON_LETTERS = re.compile(r"[^a-z]+")
_CLOSED_WORDS = ("won", "lost", "loss", "closed")


class StageClass(enum.Enum):
    EXCLUDED = "excluded"
    COMMIT = "commit"
    BEST_CASE = "best_case"
    PIPELINE = "pipeline"

    @property
    def label(self):
        return BUCKET_LABELS.get(self.value, "")


BUCKET_KEYS = ("commit", "best_case", "pipeline")

BUCKET_LABELS = {
    "commit": "Commit",
    "best_case": "Best Case",
    "pipeline": "Pipeline",
}

LABEL_TO_BUCKET = {label: key for key, label in BUCKET_LABELS.items()}

DEFAULT_STAGE_PROBABILITIES = {
    "commit": 0.8,
    "best_case": 0.325,
    "pipeline": 0.1,
}


def normalize_stage(raw) -> str:
    """Lowercase, collapse non-letter runs to one space, pad both ends."""
    text = (raw or "").strip().lower()
    return " " + _NON_LETTERS.sub(" ", text) + " "


def classify_stage(raw) -> StageClass:
    """Bucket for a raw stage string.

    Closed deals (any whole word won/lost/loss/closed) are EXCLUDED. Open
    deals go to COMMIT if the text mentions "commit", BEST_CASE if it
    mentions "best", and PIPELINE otherwise, blank stages included.
    """
    fs = normalize_stage(raw)
    for word in _CLOSED_WORDS:
        if f" {word} " in fs:
            return StageClass.EXCLUDED
    if "commit" in fs:
        return StageClass.COMMIT
    if "best" in fs:
        return StageClass.BEST_CASE
    return StageClass.PIPELINE


def is_open_stage(raw) -> bool:
    return classify_stage(raw) is not StageClass.EXCLUDED


def bucket_label(bucket_key) -> str:
    return BUCKET_LABELS.get(bucket_key, "Pipeline")


def bucket_for_label(label):
    """``"Best Case"`` -> ``"best_case"``; ``None`` for anything else."""
    return LABEL_TO_BUCKET.get((label or "").strip())

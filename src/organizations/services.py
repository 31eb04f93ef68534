"""Service / helper functions for the organizations app."""
from __future__ import annotations

import logging

from django.db import transaction

from core.exceptions import HierarchyCycleError
from forecasting.stages import DEFAULT_STAGE_PROBABILITIES
from forecasting.visibility import organization_closure
from organizations.models import ForecastStageProbability, Organization

logger = logging.getLogger("outlook")


def organization_parent_map() -> dict[str, str | None]:
    """Return ``{org_id: parent_id}`` for every organization."""
    return {
        str(org_id): (str(parent_id) if parent_id else None)
        for org_id, parent_id in Organization.objects.values_list("id", "parent_id")
    }


def descendant_organization_ids(org_id, parent_map: dict[str, str | None] | None = None) -> set[str]:
    """Return *org_id* plus every organization below it in the tree."""
    if parent_map is None:
        parent_map = organization_parent_map()
    return organization_closure(org_id, parent_map)


@transaction.atomic
def set_parent_organization(organization: Organization, parent: Organization | None) -> Organization:
    """Attach *organization* under *parent*, rejecting assignments that loop.

    Raises
    ------
    HierarchyCycleError
        If *parent* is *organization* itself or one of its descendants.
    """
    if parent is not None:
        if str(parent.pk) in descendant_organization_ids(organization.pk):
            raise HierarchyCycleError(
                "Cannot attach %(org)s under %(parent)s: it would create a cycle.",
                code="organization_cycle",
                params={"org": organization.code, "parent": parent.code},
            )
    organization.parent = parent
    organization.save(update_fields=["parent", "updated_at"])
    logger.info(
        "organization %s parent set to %s",
        organization.code,
        parent.code if parent else None,
    )
    return organization


def get_stage_probabilities(organization_id) -> dict[str, float]:
    """Effective bucket weights for an organization.

    Stored rows override the defaults; values outside ``[0, 1]`` are ignored.
    """
    probabilities = dict(DEFAULT_STAGE_PROBABILITIES)
    rows = ForecastStageProbability.objects.filter(
        organization_id=organization_id,
    ).values_list("stage_key", "probability")
    for stage_key, probability in rows:
        if stage_key not in probabilities or probability is None:
            continue
        value = float(probability)
        if 0.0 <= value <= 1.0:
            probabilities[stage_key] = value
    return probabilities


@transaction.atomic
def upsert_stage_probabilities(organization: Organization, values: dict) -> dict[str, float]:
    """Write all three bucket weights for *organization*.

    Raises ``ValueError`` when a key is missing or a value is outside ``[0, 1]``.
    """
    cleaned = {}
    for stage_key in DEFAULT_STAGE_PROBABILITIES:
        try:
            value = float(values[stage_key])
        except (KeyError, TypeError, ValueError):
            raise ValueError(f"Invalid probability for {stage_key}") from None
        if not 0.0 <= value <= 1.0:
            raise ValueError(f"Invalid probability for {stage_key}")
        cleaned[stage_key] = value

    for stage_key, value in cleaned.items():
        ForecastStageProbability.objects.update_or_create(
            organization=organization,
            stage_key=stage_key,
            defaults={"probability": f"{value:.4f}"},
        )
    return cleaned

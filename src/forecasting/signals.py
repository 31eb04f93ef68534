"""Signals: drop cached forecast configuration when it changes."""
from __future__ import annotations

from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from forecasting.cache import invalidate_organization


@receiver(post_save, sender="forecasting.HealthScoreRule")
@receiver(post_delete, sender="forecasting.HealthScoreRule")
@receiver(post_save, sender="organizations.ForecastStageProbability")
@receiver(post_delete, sender="organizations.ForecastStageProbability")
@receiver(post_save, sender="organizations.ScoreDefinition")
@receiver(post_delete, sender="organizations.ScoreDefinition")
def on_forecast_config_changed(sender, instance, **kwargs):
    invalidate_organization(instance.organization_id)

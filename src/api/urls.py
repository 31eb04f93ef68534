"""Main API URL router for /api/v1/."""
from django.urls import path

from api.v1 import forecast_views

urlpatterns = [
    path(
        'forecast/gap-driving-deals/',
        forecast_views.GapDrivingDealsAPIView.as_view(),
        name='api-forecast-gap-driving-deals',
    ),
    path(
        'forecast/health-score-rules/overlaps/',
        forecast_views.HealthScoreRuleOverlapsAPIView.as_view(),
        name='api-forecast-rule-overlaps',
    ),
]

"""Query-string validation for forecast endpoints."""
from django.conf import settings
from rest_framework import serializers

from forecasting.drivers import MODES, MODE_DRIVERS
from forecasting.engine import OutlookFilters
from forecasting.exceptions import InvalidFilter
from forecasting.risk_flags import RISK_CATEGORIES
from forecasting.stages import BUCKET_KEYS, BUCKET_LABELS, bucket_for_label

MAX_ROWS = 2000

_BUCKET_PARAMS = {f"bucket_{key}": key for key in BUCKET_KEYS}


def _setting(name, default):
    return getattr(settings, name, default)


class ForecastQuerySerializer(serializers.Serializer):
    quota_period_id = serializers.UUIDField(required=False, allow_null=True, default=None)
    rep_id = serializers.UUIDField(required=False, allow_null=True, default=None)
    rep_name = serializers.CharField(required=False, allow_blank=True, default="", max_length=255)
    stage = serializers.ChoiceField(
        choices=[BUCKET_LABELS[key] for key in BUCKET_KEYS],
        required=False,
        allow_null=True,
        default=None,
    )
    bucket_commit = serializers.BooleanField(required=False, allow_null=True, default=None)
    bucket_best_case = serializers.BooleanField(required=False, allow_null=True, default=None)
    bucket_pipeline = serializers.BooleanField(required=False, allow_null=True, default=None)
    health_min_pct = serializers.FloatField(required=False, allow_null=True, default=None, min_value=0, max_value=100)
    health_max_pct = serializers.FloatField(required=False, allow_null=True, default=None, min_value=0, max_value=100)
    risk_category = serializers.ChoiceField(choices=RISK_CATEGORIES, required=False, allow_null=True, default=None)
    suppressed_only = serializers.BooleanField(required=False, default=False)
    mode = serializers.ChoiceField(choices=MODES, required=False, default=MODE_DRIVERS)
    driver_min_abs_gap = serializers.FloatField(required=False, default=0.0, min_value=0)
    driver_require_score_effect = serializers.BooleanField(required=False, default=True)
    driver_take_per_bucket = serializers.IntegerField(required=False, min_value=1, max_value=MAX_ROWS)
    risk_min_downside = serializers.FloatField(required=False, default=0.0, min_value=0)
    risk_require_score_effect = serializers.BooleanField(required=False, default=True)
    risk_take_per_bucket = serializers.IntegerField(required=False, min_value=1, max_value=MAX_ROWS)
    limit = serializers.IntegerField(required=False, min_value=1, max_value=MAX_ROWS)

    def validate(self, attrs):
        lo = attrs.get("health_min_pct")
        hi = attrs.get("health_max_pct")
        if lo is not None and hi is not None and lo > hi:
            raise serializers.ValidationError(
                {"health_min_pct": "health_min_pct must be less than or equal to health_max_pct."}
            )
        flags = {param: attrs.get(param) for param in _BUCKET_PARAMS}
        if any(value is not None for value in flags.values()) and not any(flags.values()):
            raise serializers.ValidationError({"bucket_commit": "Select at least one bucket."})
        return attrs

    def to_filters(self) -> OutlookFilters:
        data = self.validated_data
        if data.get("stage"):
            buckets = (bucket_for_label(data["stage"]),)
        elif any(data.get(param) is not None for param in _BUCKET_PARAMS):
            buckets = tuple(key for param, key in _BUCKET_PARAMS.items() if data.get(param))
        else:
            buckets = None
        return OutlookFilters(
            quota_period_id=str(data["quota_period_id"]) if data.get("quota_period_id") else None,
            rep_id=str(data["rep_id"]) if data.get("rep_id") else None,
            rep_name=(data.get("rep_name") or "").strip() or None,
            buckets=buckets,
            health_min_pct=data.get("health_min_pct"),
            health_max_pct=data.get("health_max_pct"),
            risk_category=data.get("risk_category"),
            suppressed_only=data["suppressed_only"],
            mode=data["mode"],
            driver_min_abs_gap=data["driver_min_abs_gap"],
            driver_require_score_effect=data["driver_require_score_effect"],
            driver_take_per_bucket=data.get("driver_take_per_bucket")
            or _setting("FORECAST_DRIVER_TAKE_PER_BUCKET", 50),
            risk_min_downside=data["risk_min_downside"],
            risk_require_score_effect=data["risk_require_score_effect"],
            risk_take_per_bucket=data.get("risk_take_per_bucket")
            or _setting("FORECAST_RISK_TAKE_PER_BUCKET", MAX_ROWS),
            limit=data.get("limit") or _setting("FORECAST_DEAL_QUERY_LIMIT", MAX_ROWS),
        )


def parse_forecast_filters(query_params) -> OutlookFilters:
    """Validate *query_params* into ``OutlookFilters``.

    Raises ``InvalidFilter`` naming the first offending field.
    """
    # A plain dict keeps missing booleans at their declared defaults.
    params = query_params.dict() if hasattr(query_params, "dict") else dict(query_params)
    params = {key: value for key, value in params.items() if value != ""}
    serializer = ForecastQuerySerializer(data=params)
    if not serializer.is_valid():
        field, messages = next(iter(serializer.errors.items()))
        if field == "non_field_errors":
            field = None
        message = messages[0] if isinstance(messages, list) and messages else str(messages)
        raise InvalidFilter(field, str(message))
    return serializer.to_filters()

"""Forecast outlook API views."""
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from api.v1.permissions import CanViewForecast, IsOrgAdmin
from core.export import rows_to_csv_response
from forecasting.exceptions import ForecastEngineError, InvalidFilter, MissingQuotaPeriod
from forecasting.providers import overlapping_rules
from forecasting.serializers import parse_forecast_filters
from forecasting.services import build_gap_driving_deals, export_rows

EXPORT_COLUMNS = [
    ("bucket", "Bucket"),
    ("rep", "Rep"),
    ("account", "Account"),
    ("opportunity", "Opportunity"),
    ("close_date", "Close date"),
    ("amount", "Amount"),
    ("health_pct", "Health %"),
    ("crm_weighted", "CRM weighted"),
    ("ai_weighted", "AI weighted"),
    ("gap", "Gap"),
    ("risk_flags", "Risk flags"),
]


def _error(detail, code, http_status=status.HTTP_400_BAD_REQUEST, **extra):
    return Response({"detail": detail, "code": code, **extra}, status=http_status)


class GapDrivingDealsAPIView(APIView):
    """GET /api/v1/forecast/gap-driving-deals/

    CRM vs. health-adjusted outlook for the caller's visible reps, with the
    deals that drive the gap (``mode=drivers``) or carry downside
    (``mode=risk``) in each bucket. ``?export=csv`` downloads the shown deals.
    """

    permission_classes = [IsAuthenticated, CanViewForecast]

    def get(self, request):
        try:
            filters = parse_forecast_filters(request.query_params)
            result = build_gap_driving_deals(request.user, filters)
        except InvalidFilter as exc:
            return _error(exc.message, exc.code, field=exc.field)
        except MissingQuotaPeriod as exc:
            return _error(str(exc), exc.code)
        except ForecastEngineError as exc:
            return _error(str(exc), exc.code, http_status=status.HTTP_500_INTERNAL_SERVER_ERROR)

        if request.query_params.get("export") == "csv":
            return rows_to_csv_response(export_rows(result), EXPORT_COLUMNS, "gap-driving-deals")
        return Response(result)


class HealthScoreRuleOverlapsAPIView(APIView):
    """GET /api/v1/forecast/health-score-rules/overlaps/"""

    permission_classes = [IsAuthenticated, IsOrgAdmin]

    def get(self, request):
        pairs = overlapping_rules(request.user.organization_id)
        return Response({
            "count": len(pairs),
            "results": [
                {
                    "mapped_category": a.mapped_category,
                    "rule_a": {"id": a.id, "min_score": a.min_score, "max_score": a.max_score},
                    "rule_b": {"id": b.id, "min_score": b.min_score, "max_score": b.max_score},
                }
                for a, b in pairs
            ],
        })

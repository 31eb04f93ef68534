"""Choose the quota period a forecast request runs against."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone

from forecasting.exceptions import MissingQuotaPeriod


@dataclass(frozen=True)
class PeriodWindow:
    id: str
    period_name: str
    period_start: date
    period_end: date
    fiscal_year: str = ""
    fiscal_quarter: str = ""

    def contains(self, day: date) -> bool:
        return self.period_start <= day <= self.period_end

    def as_dict(self):
        return {
            "id": self.id,
            "period_name": self.period_name,
            "period_start": self.period_start.isoformat(),
            "period_end": self.period_end.isoformat(),
            "fiscal_year": self.fiscal_year,
            "fiscal_quarter": self.fiscal_quarter,
        }


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def select_quota_period(periods, explicit_id=None, today: date | None = None) -> PeriodWindow:
    """Explicit id, else the period containing today, else the latest one.

    Raises ``MissingQuotaPeriod`` when the organization has no periods or the
    explicit id is unknown and nothing else qualifies.
    """
    ordered = sorted(periods, key=lambda p: (p.period_start, str(p.id)), reverse=True)
    if explicit_id not in (None, ""):
        for period in ordered:
            if str(period.id) == str(explicit_id):
                return period
    if today is None:
        today = utc_today()
    for period in ordered:
        if period.contains(today):
            return period
    if ordered:
        return ordered[0]
    raise MissingQuotaPeriod()

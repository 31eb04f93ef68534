"""Errors raised by the outlook engine and its collaborators."""


class ForecastEngineError(Exception):
    """Base class; also raised for persistence failures while loading inputs."""

    code = "forecast_error"


class MissingQuotaPeriod(ForecastEngineError):
    code = "missing_quota_period"

    def __init__(self, message="Missing quota_period_id"):
        super().__init__(message)


class InvalidFilter(ForecastEngineError):
    code = "invalid_filter"

    def __init__(self, field, message):
        super().__init__(message)
        self.field = field
        self.message = message

"""Core middleware."""
import logging
import time

from django.utils.cache import patch_cache_control

logger = logging.getLogger("outlook")


class NoStoreAPIMiddleware:
    """Mark API responses private/no-store and log how long they took.

    Forecast payloads are scoped to the caller, so no shared cache may keep them.
    """

    API_PREFIX = "/api/"

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        if not request.path.startswith(self.API_PREFIX):
            return self.get_response(request)

        started = time.monotonic()
        response = self.get_response(request)
        patch_cache_control(
            response,
            private=True,
            no_cache=True,
            no_store=True,
            must_revalidate=True,
            max_age=0,
        )
        response["Pragma"] = "no-cache"
        response["Expires"] = "0"

        logger.debug(
            "%s %s -> %s in %.1fms",
            request.method,
            request.path,
            response.status_code,
            (time.monotonic() - started) * 1000,
        )
        return response

"""Per-organization cache for rule tables and stage probabilities.

Keys carry a per-organization version number; bumping the version is how
entries are invalidated, so stale keys simply age out.
"""
import logging

from django.conf import settings
from django.core.cache import cache

logger = logging.getLogger(__name__)

_VERSION_KEY = "forecast:config-version:{org_id}"
_ENTRY_KEY = "forecast:{kind}:{org_id}:v{version}"


def _timeout():
    return getattr(settings, "FORECAST_CONFIG_CACHE_TIMEOUT", 300)


def config_version(org_id) -> int:
    key = _VERSION_KEY.format(org_id=org_id)
    version = cache.get(key)
    if version is None:
        cache.add(key, 1, None)
        version = cache.get(key) or 1
    return int(version)


def entry_key(kind, org_id) -> str:
    return _ENTRY_KEY.format(kind=kind, org_id=org_id, version=config_version(org_id))


def get_or_load(kind, org_id, loader):
    """Return the cached *kind* entry for *org_id*, loading it on a miss.

    ``None`` results are returned but never stored.
    """
    key = entry_key(kind, org_id)
    hit = cache.get(key)
    if hit is not None:
        return hit
    value = loader(org_id)
    if value is not None:
        cache.set(key, value, _timeout())
    return value


def invalidate_organization(org_id):
    key = _VERSION_KEY.format(org_id=org_id)
    try:
        cache.incr(key)
    except ValueError:
        cache.set(key, 2, None)
    logger.debug("forecast config cache invalidated for org %s", org_id)

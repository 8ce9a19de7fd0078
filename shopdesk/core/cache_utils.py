"""
Caching utilities for expensive report queries.
Uses Redis (django-redis) in production, any Django cache backend otherwise.
"""
from django.core.cache import cache
from functools import wraps
import hashlib
import logging

logger = logging.getLogger(__name__)

# Cache TTLs (in seconds)
DASHBOARD_CACHE_TTL = 300  # 5 minutes
STOCK_REPORT_CACHE_TTL = 180  # 3 minutes

DASHBOARD_PREFIX = "dashboard_summary"
STOCK_REPORT_PREFIX = "stock_report"

# Keys written per prefix, for backends without pattern scans
_KEY_REGISTRY_PREFIX = "cache_keys"


def make_cache_key(prefix, *args, **kwargs):
    """Generate a unique cache key from arguments"""
    key_data = f"{prefix}:{args}:{sorted(kwargs.items())}"
    key_hash = hashlib.md5(key_data.encode()).hexdigest()
    return f"{prefix}:{key_hash}"


def _remember_key(prefix, cache_key, ttl):
    registry_key = f"{_KEY_REGISTRY_PREFIX}:{prefix}"
    keys = cache.get(registry_key) or []
    if cache_key not in keys:
        keys.append(cache_key)
        cache.set(registry_key, keys, ttl)


def cached_query(cache_ttl=60, key_prefix="query"):
    """
    Decorator to cache expensive queries

    Usage:
        @cached_query(cache_ttl=120, key_prefix="dashboard_summary")
        def dashboard_summary(date_from, date_to, store_id=None):
            ...
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            cache_key = make_cache_key(key_prefix, *args, **kwargs)

            cached_data = cache.get(cache_key)
            if cached_data is not None:
                logger.debug(f"Cache HIT for {key_prefix}: {cache_key}")
                return cached_data

            logger.debug(f"Cache MISS for {key_prefix}: {cache_key}")
            result = func(*args, **kwargs)

            cache.set(cache_key, result, cache_ttl)
            _remember_key(key_prefix, cache_key, cache_ttl)
            return result
        return wrapper
    return decorator


def invalidate_cache_pattern(pattern):
    """
    Invalidate all cache keys matching a pattern.
    Uses Redis SCAN when the default cache is django-redis, otherwise deletes
    the keys recorded by ``cached_query``.
    """
    registry_key = f"{_KEY_REGISTRY_PREFIX}:{pattern}"
    known_keys = cache.get(registry_key) or []
    if known_keys:
        cache.delete_many(known_keys)
        cache.delete(registry_key)

    if not hasattr(cache, 'delete_pattern'):
        return
    try:
        from django_redis import get_redis_connection
        redis_conn = get_redis_connection("default")

        keys = []
        cursor = 0
        while True:
            cursor, partial_keys = redis_conn.scan(cursor, match=f"*{pattern}*", count=100)
            keys.extend(partial_keys)
            if cursor == 0:
                break

        if keys:
            redis_conn.delete(*keys)
            logger.info(f"Invalidated {len(keys)} cache keys matching pattern: {pattern}")
    except Exception as e:
        logger.warning(f"Could not invalidate cache pattern {pattern}: {str(e)}")


def invalidate_dashboard_cache():
    """Invalidate dashboard summary cache"""
    invalidate_cache_pattern(DASHBOARD_PREFIX)
    logger.info("Invalidated dashboard cache")


def invalidate_stock_cache():
    """Invalidate stock report cache"""
    invalidate_cache_pattern(STOCK_REPORT_PREFIX)
    logger.info("Invalidated stock cache")

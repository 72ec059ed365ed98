"""Result cache package."""

from fincalc.cache.result_cache import CacheEntry, ResultCache, make_cache_key

__all__ = ["CacheEntry", "ResultCache", "make_cache_key"]

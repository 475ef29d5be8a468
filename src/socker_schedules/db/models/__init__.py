from socker_schedules.db.models.cache_entry import CacheEntry

__all__ = [
    "CacheEntry",
]

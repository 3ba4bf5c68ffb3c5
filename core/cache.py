# core/cache.py
"""
Caching utilities
"""
from typing import Any, Optional, Dict
from cachetools import TTLCache

class CacheManager:
    """In-memory TTL cache for agent results"""

    def __init__(self, max_size: int = 256, ttl: int = 900):
        self._cache: Dict[str, Any] = TTLCache(maxsize=max_size, ttl=ttl)

    async def get(self, key: str) -> Optional[Any]:
        """Get value from cache"""
        return self._cache.get(key)

    async def set(self, key: str, value: Any) -> None:
        """Set value in cache; entries expire after the cache-wide TTL"""
        self._cache[key] = value

    def __len__(self) -> int:
        return len(self._cache)

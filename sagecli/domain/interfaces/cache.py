"""Interface for caching mechanisms.

Defines the narrow get/set contract the call sites consult before entering
the request gateway. Entries are time-boxed: an entry is never returned once
its expiry has passed.
"""

import abc
from typing import Any, Optional

# Import relevant domain models
from ..models.common import CacheKey

class CacheService(abc.ABC):
    """Abstract Base Class for caching operations."""

    @abc.abstractmethod
    def get(self, key: CacheKey) -> Optional[Any]:
        """Retrieves an item from the cache.

        Args:
            key: The cache key to retrieve.

        Returns:
            The cached item if found and not expired, otherwise None.
            Implementations may evict the expired entry on read.
        """
        pass

    @abc.abstractmethod
    def set(self, key: CacheKey, value: Any, ttl: Optional[float] = None) -> None:
        """Stores an item, overwriting any prior entry for the key.

        Args:
            key: The cache key to store the item under.
            value: The item to store.
            ttl: Time-to-live in seconds (uses the implementation default if None).
        """
        pass

    @abc.abstractmethod
    def delete(self, key: CacheKey) -> None:
        """Deletes an item from the cache."""
        pass

    @abc.abstractmethod
    def clear(self, level: str = 'all') -> None:
        """Clears all items from the specified cache level(s) ('l1', 'l2', 'all')."""
        pass

"""Concrete implementation of the time-boxed response cache.

L1 is an in-memory dict; the optional L2 is a directory of pickled entries
so cached responses survive between CLI invocations. Both levels expire
lazily: an expired entry is dropped when it is read, never by a sweeper.
"""

import hashlib
import logging
import os
import pickle
import shutil
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

from sagecli.domain.interfaces.cache import CacheService
from sagecli.domain.models.common import CacheKey, CachePrefix

logger = logging.getLogger(__name__)

DEFAULT_L1_MAX_ITEMS = 100
DEFAULT_TTL_SECONDS = 10 * 60  # 10 minutes
CACHE_LEVELS = ('l1', 'l2', 'all')

@dataclass
class CacheEntry:
    """Internal representation of a cache entry with expiry."""
    value: Any
    expiry_time: float # Unix timestamp when the entry expires

def build_cache_key(prefix: Union[CachePrefix, str], *parts: Any) -> CacheKey:
    """Builds a deterministic key from request parameters.

    List and tuple parts are sorted so that the same set of values (e.g.
    skills) maps to the same key whatever order the caller passed them in.
    """
    rendered = [str(prefix)]
    for part in parts:
        if isinstance(part, (list, tuple, set, frozenset)):
            rendered.append("_".join(sorted(str(p) for p in part)))
        else:
            rendered.append(str(part))
    return CacheKey("_".join(rendered))

class CachingServiceImpl(CacheService):
    """Two-level cache implementation (L1 Memory, optional L2 File)."""

    def __init__(
        self,
        l1_max_items: int = DEFAULT_L1_MAX_ITEMS,
        default_ttl: float = DEFAULT_TTL_SECONDS,
        l2_dir: Optional[Path] = None,
        clock: Callable[[], float] = time.time,
    ):
        """Initializes the caching service.

        Args:
            l1_max_items: Maximum number of in-memory entries.
            default_ttl: TTL in seconds used when `set` is called without one.
            l2_dir: Directory for the file level. None disables L2.
            clock: Returns the current Unix time.
        """
        self.l1_cache: Dict[CacheKey, CacheEntry] = {}
        self.l1_max_items = l1_max_items
        self.default_ttl = default_ttl
        self._clock = clock

        self.l2_dir = Path(l2_dir) if l2_dir is not None else None
        if self.l2_dir is not None:
            self._setup_l2_dir()

        logger.info(f"CachingService initialized. L1(max={l1_max_items}), L2(dir={self.l2_dir}), default_ttl={default_ttl}s")

    def _setup_l2_dir(self) -> None:
        """Creates the L2 cache directory if it doesn't exist."""
        try:
            self.l2_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Failed to create L2 cache directory {self.l2_dir}: {e}")
            raise

    def _get_l2_filepath(self, key: CacheKey) -> Path:
        """Generates a safe file path for an L2 cache key."""
        hashed_key = hashlib.sha256(str(key).encode()).hexdigest()
        return self.l2_dir / hashed_key[:2] / hashed_key

    def _evict_overflow(self) -> None:
        # Oldest by insertion order
        while len(self.l1_cache) > self.l1_max_items:
            oldest_key = next(iter(self.l1_cache))
            del self.l1_cache[oldest_key]

    def _read_l2(self, key: CacheKey) -> Optional[CacheEntry]:
        l2_filepath = self._get_l2_filepath(key)
        if not l2_filepath.exists():
            return None
        try:
            with open(l2_filepath, 'rb') as f:
                return pickle.load(f)
        except (pickle.UnpicklingError, EOFError, OSError, AttributeError) as e:
            logger.warning(f"Failed to read or parse L2 cache file {l2_filepath}: {e}. Removing.")
            l2_filepath.unlink(missing_ok=True)
            return None

    # --- CacheService Interface Implementation ---

    def get(self, key: CacheKey) -> Optional[Any]:
        """Returns the cached value, or None when missing or expired."""
        now = self._clock()

        l1_entry = self.l1_cache.get(key)
        if l1_entry is not None:
            if now <= l1_entry.expiry_time:
                logger.debug(f"L1 cache hit for key: {key}")
                return l1_entry.value
            logger.debug(f"L1 cache entry expired for key: {key}. Evicting.")
            del self.l1_cache[key]

        if self.l2_dir is not None:
            l2_entry = self._read_l2(key)
            if l2_entry is not None:
                if now <= l2_entry.expiry_time:
                    logger.debug(f"L2 cache hit for key: {key}")
                    # Promote to L1 with the remaining lifetime
                    self.l1_cache[key] = CacheEntry(value=l2_entry.value, expiry_time=l2_entry.expiry_time)
                    self._evict_overflow()
                    return l2_entry.value
                logger.debug(f"L2 cache expired for key: {key}. Removing file.")
                self._get_l2_filepath(key).unlink(missing_ok=True)

        logger.debug(f"Cache miss for key: {key}")
        return None

    def set(self, key: CacheKey, value: Any, ttl: Optional[float] = None) -> None:
        """Stores a value with expiry = now + ttl, overwriting any prior entry."""
        expiry = self._clock() + (ttl if ttl is not None else self.default_ttl)
        entry = CacheEntry(value=value, expiry_time=expiry)

        self.l1_cache.pop(key, None)
        self.l1_cache[key] = entry
        self._evict_overflow()
        logger.debug(f"Stored item in L1 cache: key={key}")

        if self.l2_dir is not None:
            l2_filepath = self._get_l2_filepath(key)
            temp_filepath = l2_filepath.with_suffix('.tmp')
            try:
                l2_filepath.parent.mkdir(parents=True, exist_ok=True)
                with open(temp_filepath, 'wb') as f:
                    pickle.dump(entry, f)
                os.replace(temp_filepath, l2_filepath)
                logger.debug(f"Stored item in L2 cache: key={key}, file={l2_filepath}")
            except (pickle.PicklingError, TypeError, OSError) as e:
                # L2 is best-effort; L1 already holds the value
                logger.error(f"Failed to write to L2 cache file {l2_filepath}: {e}")
                temp_filepath.unlink(missing_ok=True)

    def delete(self, key: CacheKey) -> None:
        """Deletes an item from both levels."""
        if self.l1_cache.pop(key, None) is not None:
            logger.debug(f"Deleted item from L1 cache: key={key}")
        if self.l2_dir is not None:
            self._get_l2_filepath(key).unlink(missing_ok=True)

    def clear(self, level: str = 'all') -> None:
        """Clears all items from the specified cache level(s)."""
        if level not in CACHE_LEVELS:
            raise ValueError(f"Invalid cache level '{level}'. Choose one of {', '.join(CACHE_LEVELS)}.")

        if level in ('l1', 'all'):
            self.l1_cache.clear()
            logger.info("Cleared L1 (in-memory) cache.")

        if level in ('l2', 'all') and self.l2_dir is not None:
            if self.l2_dir.exists():
                shutil.rmtree(self.l2_dir, ignore_errors=True)
                self._setup_l2_dir()
                logger.info(f"Cleared L2 (file) cache at: {self.l2_dir}")
            else:
                logger.info("L2 cache directory does not exist, nothing to clear.")

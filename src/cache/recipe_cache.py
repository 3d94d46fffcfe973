"""In-memory cache of generated recipes keyed by normalized ingredient signature.

One RecipeCache is constructed per process and passed to RecipeGenerator.
Entries expire after `ttl` seconds; `get` checks age itself, so the background
sweep started by `init()` is housekeeping only.
"""

import asyncio
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from src.models.models import Recipe
from src.utils.config import config
from src.utils.logger import log_context, logger


def normalize_ingredients(ingredients_raw: str) -> str:
    """Order-, case- and whitespace-independent cache key for an ingredient list.

    >>> normalize_ingredients("Salmon, Avocado") == normalize_ingredients(" avocado , salmon ")
    True
    """
    tokens = [token.strip() for token in (ingredients_raw or "").lower().split(",")]
    return ",".join(sorted(tokens))


@dataclass
class CacheEntry:
    recipes: list[Recipe]
    timestamp: float = field(default_factory=time.time)


class RecipeCache:
    """Process-wide recipe cache with a bounded entry lifetime."""

    def __init__(self, ttl: Optional[float] = None, clock: Callable[[], float] = time.time) -> None:
        """Create an empty cache.

        Args:
            ttl: Entry lifetime in seconds. Defaults to CACHE_TTL_SECONDS (300).
            clock: Wall-clock source returning seconds; injectable for tests.
        """
        self.ttl = float(ttl if ttl is not None else config.CACHE_TTL_SECONDS)
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._sweep_task: Optional[asyncio.Task] = None

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, ingredients_raw: str) -> bool:
        return self.get(ingredients_raw) is not None

    def _is_fresh(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.timestamp < self.ttl

    def get(self, ingredients_raw: str) -> Optional[list[Recipe]]:
        """Return cached recipes for the signature, or None if absent or expired."""
        key = normalize_ingredients(ingredients_raw)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or not self._is_fresh(entry, self._clock()):
                return None
            recipes = list(entry.recipes)

        logger.info(f"Using cached recipes for: {ingredients_raw}", extra=log_context(cache_key=key))
        return recipes

    def put(self, ingredients_raw: str, recipes: list[Recipe]) -> None:
        """Store recipes for the signature, replacing any previous entry."""
        key = normalize_ingredients(ingredients_raw)
        with self._lock:
            self._entries[key] = CacheEntry(recipes=list(recipes), timestamp=self._clock())
        logger.info(f"Cached {len(recipes)} recipes for: {ingredients_raw}", extra=log_context(cache_key=key))

    def sweep(self) -> int:
        """Delete every expired entry. Returns the number removed."""
        now = self._clock()
        with self._lock:
            stale = [key for key, entry in self._entries.items() if now - entry.timestamp > self.ttl]
            for key in stale:
                del self._entries[key]

        if stale:
            logger.debug(f"Cache sweep removed {len(stale)} expired entries")
        return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    async def _sweep_forever(self) -> None:
        while True:
            await asyncio.sleep(self.ttl)
            self.sweep()

    def init(self) -> "RecipeCache":
        """Start the periodic background sweep. Must be called from a running event loop."""
        if self._sweep_task is None or self._sweep_task.done():
            self._sweep_task = asyncio.get_running_loop().create_task(self._sweep_forever())
            logger.debug(f"Recipe cache sweep started (every {self.ttl:.0f}s)")
        return self

    async def dispose(self) -> None:
        """Stop the background sweep. Safe to call more than once."""
        task, self._sweep_task = self._sweep_task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.debug("Recipe cache sweep stopped")

    async def __aenter__(self) -> "RecipeCache":
        return self.init()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.dispose()

"""Category name → id resolution with per-run caching.

A run creates one CategoryCache and hands it to one CategoryResolver. The
known-category list is fetched once (prime) and only appended to afterwards,
so every distinct name costs at most one lookup-or-create round trip.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

from catalog_import.services.catalog_client import CatalogClient
from catalog_import.services.errors import CategoryResolutionError

logger = logging.getLogger(__name__)


@dataclass
class CategoryCache:
    """Per-run category state. Grows monotonically; entries are never overwritten."""
    known: list[dict[str, Any]] = field(default_factory=list)
    ids: dict[str, Any] = field(default_factory=dict)
    failed: set[str] = field(default_factory=set)
    created: int = 0

    @staticmethod
    def key(name: str) -> str:
        return name.strip().lower()

    def remember(self, name: str, category_id: Any) -> None:
        self.ids.setdefault(self.key(name), category_id)

    def find_known(self, name: str) -> Any | None:
        wanted = self.key(name)
        for category in self.known:
            if self.key(str(category.get("name", ""))) == wanted:
                return category["id"]
        return None


class CategoryResolver:
    def __init__(self, client: CatalogClient, cache: CategoryCache):
        self.client = client
        self.cache = cache
        self._locks: dict[str, asyncio.Lock] = {}
        self._primed = False

    async def prime(self) -> None:
        """Load the remote category list once per run.

        A failed fetch is logged and the run continues with an empty list;
        unseen names then go straight to creation.
        """
        if self._primed:
            return
        self._primed = True
        try:
            self.cache.known.extend(await self.client.list_categories())
        except CategoryResolutionError as exc:
            logger.warning("Could not load catalog categories, continuing with none: %s", exc)
        logger.info("Category list loaded: %d known", len(self.cache.known))

    async def resolve(self, category_name: str | None, parent_category_name: str | None = None) -> Any | None:
        """Return the category id for a name, creating the category if needed.

        None means the product goes in uncategorized: the name was empty, or
        creating it failed earlier in this run.
        """
        if not category_name or not category_name.strip():
            return None
        key = CategoryCache.key(category_name)
        if key in self.cache.ids:
            return self.cache.ids[key]
        if key in self.cache.failed:
            return None

        lock = self._locks.setdefault(key, asyncio.Lock())
        async with lock:
            # Another coroutine may have resolved it while we waited
            if key in self.cache.ids:
                return self.cache.ids[key]
            if key in self.cache.failed:
                return None
            await self.prime()

            category_id = self.cache.find_known(category_name)
            if category_id is not None:
                self.cache.remember(category_name, category_id)
                return category_id

            name = category_name.strip()
            try:
                created = await self.client.create_category(name, parent_category_name)
            except CategoryResolutionError as exc:
                logger.error("Category '%s' could not be created: %s", name, exc)
                self.cache.failed.add(key)
                return None

            self.cache.known.append(created)
            self.cache.created += 1
            self.cache.remember(name, created["id"])
            logger.info("Created category '%s' (id=%s)", name, created["id"])
            return created["id"]

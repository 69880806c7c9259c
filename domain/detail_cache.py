import asyncio
from enum import Enum
import logging
from typing import Protocol

from domain.models import MealDetail, MealId


logger = logging.getLogger(__name__)


class DetailLookup(Protocol):
    async def lookup_by_id(self, id: MealId) -> MealDetail | None:
        ...


class DetailState(Enum):
    not_requested = "not_requested"
    loading = "loading"
    loaded = "loaded"
    failed = "failed"


class MealDetailCache:
    """Loads each meal's full record at most once for the life of the process.

    Concurrent `ensure` calls for one id share a single in-flight fetch.
    A failed fetch, or one the catalog answered with nothing, leaves the id
    `failed` and the next `ensure` tries again.
    """

    def __init__(self, catalog: DetailLookup) -> None:
        self.catalog = catalog
        self._loaded: dict[MealId, MealDetail] = {}
        self._inflight: dict[MealId, asyncio.Task[MealDetail | None]] = {}
        self._failed: set[MealId] = set()

    def state(self, id: MealId) -> DetailState:
        if id in self._loaded:
            return DetailState.loaded
        if id in self._inflight:
            return DetailState.loading
        if id in self._failed:
            return DetailState.failed
        return DetailState.not_requested

    def get(self, id: MealId) -> MealDetail | None:
        return self._loaded.get(id)

    async def ensure(self, id: MealId) -> MealDetail | None:
        """Detail for `id`, or `None` if the catalog has no such meal.

        Raises `FetchFailed` to every waiter when the shared fetch fails.
        """
        if id in self._loaded:
            logger.debug("Detail cache hit %s", id)
            return self._loaded[id]

        task = self._inflight.get(id)
        if task is None:
            logger.debug("Detail cache miss %s", id)
            self._failed.discard(id)
            task = asyncio.create_task(self._fetch(id))
            self._inflight[id] = task

        # A cancelled waiter must not cancel the fetch the others share.
        return await asyncio.shield(task)

    async def _fetch(self, id: MealId) -> MealDetail | None:
        try:
            detail = await self.catalog.lookup_by_id(id)
        except BaseException:
            self._failed.add(id)
            raise
        finally:
            del self._inflight[id]

        if detail is None:
            logger.info("Meal %s not in catalog", id)
            self._failed.add(id)
        else:
            self._loaded[id] = detail
        return detail

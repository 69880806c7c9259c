import asyncio
import logging
from typing import Callable, Iterable, Protocol

from domain.models import MealDetail, MealId


logger = logging.getLogger(__name__)


type Listener = Callable[[tuple[MealId, ...]], object]


class DetailLookup(Protocol):
    async def lookup_by_id(self, id: MealId) -> MealDetail | None:
        ...


class FavoritesSource(Protocol):
    @property
    def ids(self) -> tuple[MealId, ...]:
        ...

    def subscribe(self, listener: Listener) -> object:
        ...


class FavoritesAggregator:
    """Turns favorite ids into meals, fetching every id in parallel.

    Each `resolve` takes a version number when it starts. Its result becomes
    `meals` only if no newer `resolve` has started since.
    """

    def __init__(self, catalog: DetailLookup) -> None:
        self.catalog = catalog
        self.meals: tuple[MealDetail, ...] = ()
        self.loading = False
        self._version = 0
        self._task: asyncio.Task[tuple[MealDetail, ...]] | None = None
        self._pending: set[asyncio.Task[tuple[MealDetail, ...]]] = set()

    async def resolve(self, ids: Iterable[MealId]) -> tuple[MealDetail, ...]:
        self._version += 1
        version = self._version
        wanted = tuple(ids)

        if not wanted:
            meals: tuple[MealDetail, ...] = ()
        else:
            self.loading = True
            coros = [self.catalog.lookup_by_id(id) for id in wanted]
            results = await asyncio.gather(*coros, return_exceptions=True)
            meals = tuple(_settled(wanted, results))

        if version != self._version:
            logger.debug("Discarding stale favorites resolution v%d", version)
            return meals

        self.meals = meals
        self.loading = False
        return meals

    def refresh(self, ids: Iterable[MealId]) -> asyncio.Task[tuple[MealDetail, ...]]:
        """Resolve `ids` in a background task."""
        task = asyncio.create_task(self.resolve(tuple(ids)))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        self._task = task
        return task

    def watch(self, store: FavoritesSource) -> None:
        """Resolve the store's ids now and again after every change."""
        store.subscribe(self.refresh)
        self.refresh(store.ids)

    async def wait(self) -> tuple[MealDetail, ...]:
        """Meals once the most recent background resolution has settled."""
        task = self._task
        while task is not None:
            await task
            if task is self._task:
                break
            task = self._task
        return self.meals


def _settled(
    ids: tuple[MealId, ...],
    results: list[MealDetail | None | BaseException],
) -> Iterable[MealDetail]:
    for id, result in zip(ids, results):
        if isinstance(result, BaseException):
            logger.warning("Dropping favorite %s: %r", id, result)
        elif result is None:
            logger.info("Dropping favorite %s, not in catalog", id)
        else:
            yield result

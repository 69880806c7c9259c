from enum import Enum
import logging
from typing import Callable, Protocol, Sequence

from domain.errors import FetchFailed
from domain.models import MealSummary


logger = logging.getLogger(__name__)


class Searcher(Protocol):
    async def search_by_area(self, term: str) -> Sequence[MealSummary]:
        ...

    async def search_by_name(self, term: str) -> Sequence[MealSummary]:
        ...


class SearchMode(Enum):
    by_cuisine = "cuisine"
    by_name = "name"


class SearchStatus(Enum):
    idle = "idle"
    searching = "searching"
    succeeded = "succeeded"
    empty = "empty"
    failed = "failed"


class SearchState:
    def __init__(
        self,
        status: SearchStatus = SearchStatus.idle,
        *,
        term: str = "",
        mode: SearchMode | None = None,
        results: tuple[MealSummary, ...] = (),
        error: FetchFailed | None = None,
    ) -> None:
        self.status = status
        self.term = term
        self.mode = mode
        self.results = results
        self.error = error

    def __repr__(self) -> str:
        return (
            f"<SearchState(status={self.status.value}, term={self.term!r}, "
            f"results={len(self.results)})>"
        )

    @property
    def searched(self) -> bool:
        return self.status != SearchStatus.idle


type StateListener = Callable[[SearchState], object]


class SearchOrchestrator:
    """Drives the one current search.

    `idle -> searching -> succeeded | empty | failed`, and back to
    `searching` on the next search. Each search takes a version number when
    it starts; a response for anything but the latest version is dropped.
    """

    def __init__(self, catalog: Searcher) -> None:
        self.catalog = catalog
        self.state = SearchState()
        self._version = 0
        self._listeners: list[StateListener] = []

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def _set_state(self, state: SearchState) -> None:
        self.state = state
        for listener in list(self._listeners):
            listener(state)

    async def search(self, term: str, mode: SearchMode) -> SearchState:
        term = term.strip()
        if not term:
            return self.state

        match mode:
            case SearchMode.by_cuisine:
                lookup = self.catalog.search_by_area
            case SearchMode.by_name:
                lookup = self.catalog.search_by_name
            case _:
                raise ValueError(f"Unsupported search mode: {mode}")

        self._version += 1
        version = self._version
        # Keep showing the previous results while the new ones load.
        self._set_state(
            SearchState(
                SearchStatus.searching,
                term=term,
                mode=mode,
                results=self.state.results,
            )
        )

        try:
            results = tuple(await lookup(term))
        except FetchFailed as e:
            state = SearchState(SearchStatus.failed, term=term, mode=mode, error=e)
        else:
            status = SearchStatus.succeeded if results else SearchStatus.empty
            state = SearchState(status, term=term, mode=mode, results=results)

        if version != self._version:
            logger.debug("Discarding stale search %r (%s)", term, mode.value)
            return self.state

        logger.info("Search %r (%s): %s", term, mode.value, state.status.value)
        self._set_state(state)
        return state

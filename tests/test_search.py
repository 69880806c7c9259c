import asyncio

import pytest

from conftest import FakeCatalog
from domain.search import SearchMode, SearchOrchestrator, SearchStatus


def ids(state) -> list[str]:
    return [m.id for m in state.results]


@pytest.mark.asyncio
async def test_starts_idle(catalog: FakeCatalog) -> None:
    orchestrator = SearchOrchestrator(catalog)
    assert orchestrator.state.status == SearchStatus.idle
    assert not orchestrator.state.searched


@pytest.mark.asyncio
async def test_search_by_cuisine(catalog: FakeCatalog) -> None:
    orchestrator = SearchOrchestrator(catalog)
    state = await orchestrator.search("Italian", SearchMode.by_cuisine)

    assert state.status == SearchStatus.succeeded
    assert ids(state) == ["52771", "52982", "52835"]
    assert orchestrator.state is state
    assert catalog.calls == [("search_by_area", "Italian")]


@pytest.mark.asyncio
async def test_search_by_name_trims_term(catalog: FakeCatalog) -> None:
    state = await SearchOrchestrator(catalog).search("  spaghetti ", SearchMode.by_name)
    assert state.status == SearchStatus.succeeded
    assert state.term == "spaghetti"
    assert catalog.calls == [("search_by_name", "spaghetti")]


@pytest.mark.asyncio
async def test_no_results_is_empty_not_failed(catalog: FakeCatalog) -> None:
    state = await SearchOrchestrator(catalog).search("zzzznotarealterm", SearchMode.by_name)
    assert state.status == SearchStatus.empty
    assert state.searched
    assert state.results == ()
    assert state.error is None


@pytest.mark.parametrize("term", ("", "   ", "\t\n"))
@pytest.mark.asyncio
async def test_blank_term_is_a_no_op(catalog: FakeCatalog, term: str) -> None:
    orchestrator = SearchOrchestrator(catalog)
    await orchestrator.search("Mexican", SearchMode.by_cuisine)
    before = orchestrator.state

    assert await orchestrator.search(term, SearchMode.by_cuisine) is before
    assert orchestrator.state is before
    assert catalog.calls == [("search_by_area", "Mexican")]


@pytest.mark.asyncio
async def test_failure_clears_results(catalog: FakeCatalog) -> None:
    orchestrator = SearchOrchestrator(catalog)
    await orchestrator.search("Italian", SearchMode.by_cuisine)
    catalog.failing.add("Mexican")

    state = await orchestrator.search("Mexican", SearchMode.by_cuisine)

    assert state.status == SearchStatus.failed
    assert state.results == ()
    assert state.error is not None
    assert state.error.operation == "search_by_area"


@pytest.mark.asyncio
async def test_searching_then_recovers_after_failure(catalog: FakeCatalog) -> None:
    orchestrator = SearchOrchestrator(catalog)
    seen: list[SearchStatus] = []
    orchestrator.subscribe(lambda state: seen.append(state.status))

    catalog.failing.add("Italian")
    await orchestrator.search("Italian", SearchMode.by_cuisine)
    catalog.failing.clear()
    await orchestrator.search("Italian", SearchMode.by_cuisine)

    assert seen == [
        SearchStatus.searching,
        SearchStatus.failed,
        SearchStatus.searching,
        SearchStatus.succeeded,
    ]


@pytest.mark.asyncio
async def test_previous_results_shown_while_searching(catalog: FakeCatalog) -> None:
    orchestrator = SearchOrchestrator(catalog)
    await orchestrator.search("Italian", SearchMode.by_cuisine)
    catalog.gates["Mexican"] = asyncio.Event()

    task = asyncio.create_task(orchestrator.search("Mexican", SearchMode.by_cuisine))
    await asyncio.sleep(0)
    assert orchestrator.state.status == SearchStatus.searching
    assert ids(orchestrator.state) == ["52771", "52982", "52835"]

    catalog.gates["Mexican"].set()
    await task
    assert ids(orchestrator.state) == ["53082"]


@pytest.mark.asyncio
async def test_late_response_for_superseded_search_is_discarded(catalog: FakeCatalog) -> None:
    catalog.gates["Italian"] = asyncio.Event()
    orchestrator = SearchOrchestrator(catalog)

    italian = asyncio.create_task(orchestrator.search("Italian", SearchMode.by_cuisine))
    await asyncio.sleep(0)
    await orchestrator.search("Mexican", SearchMode.by_cuisine)

    catalog.gates["Italian"].set()
    await italian

    assert orchestrator.state.status == SearchStatus.succeeded
    assert orchestrator.state.term == "Mexican"
    assert ids(orchestrator.state) == ["53082"]


@pytest.mark.asyncio
async def test_late_failure_for_superseded_search_is_discarded(catalog: FakeCatalog) -> None:
    catalog.gates["Italian"] = asyncio.Event()
    catalog.failing.add("Italian")
    orchestrator = SearchOrchestrator(catalog)

    italian = asyncio.create_task(orchestrator.search("Italian", SearchMode.by_cuisine))
    await asyncio.sleep(0)
    await orchestrator.search("japanese", SearchMode.by_name)

    catalog.gates["Italian"].set()
    await italian

    assert orchestrator.state.status == SearchStatus.empty
    assert orchestrator.state.mode == SearchMode.by_name

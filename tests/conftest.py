import asyncio
from typing import Any, Callable

import pytest

from domain.errors import FetchFailed
from domain.models import MealDetail, MealSummary


type Record = dict[str, Any]


def record(id: str, name: str, **extra: Any) -> Record:
    return {
        "idMeal": id,
        "strMeal": name,
        "strMealThumb": f"https://www.themealdb.com/images/media/meals/{id}.jpg",
        **extra,
    }


class FakeCatalog:
    """Catalog double. Calls wait on `gates[key]` when one is set."""

    def __init__(self) -> None:
        self.areas: dict[str, list[MealSummary]] = {}
        self.names: dict[str, list[MealSummary]] = {}
        self.details: dict[str, MealDetail] = {}
        self.failing: set[str] = set()
        self.gates: dict[str, asyncio.Event] = {}
        self.calls: list[tuple[str, str]] = []

    async def _call(self, operation: str, key: str) -> None:
        self.calls.append((operation, key))
        if key in self.gates:
            await self.gates[key].wait()
        if key in self.failing:
            raise FetchFailed(operation, f"{key} exploded")

    async def search_by_area(self, term: str) -> list[MealSummary]:
        await self._call("search_by_area", term)
        return self.areas.get(term, [])

    async def search_by_name(self, term: str) -> list[MealSummary]:
        await self._call("search_by_name", term)
        return self.names.get(term, [])

    async def lookup_by_id(self, id: str) -> MealDetail | None:
        await self._call("lookup_by_id", id)
        return self.details.get(id)


@pytest.fixture
def make_record() -> Callable[..., Record]:
    return record


@pytest.fixture
def catalog() -> FakeCatalog:
    fake = FakeCatalog()
    for id, name, area in (
        ("52772", "Teriyaki Chicken Casserole", "Japanese"),
        ("52771", "Spicy Arrabiata Penne", "Italian"),
        ("52982", "Spaghetti alla Carbonara", "Italian"),
        ("52835", "Fettucine alfredo", "Italian"),
        ("53082", "Chilaquiles", "Mexican"),
    ):
        detail = MealDetail.from_dict(record(id, name, strArea=area))
        fake.details[id] = detail
        fake.areas.setdefault(area, []).append(MealSummary.from_dict(record(id, name)))
        fake.names.setdefault(name.split()[0].lower(), []).append(detail)
    return fake

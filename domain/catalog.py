import logging
from typing import Any

import httpx

from domain.errors import FetchFailed
from domain.models import MealDetail, MealId, MealSummary


logger = logging.getLogger(__name__)


BASE_URL = "https://www.themealdb.com/api/json/v1/1/"
TIMEOUT = 20


def catalog_client_factory(
    base_url: str | None = None,
    timeout: float | None = None,
) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        base_url=BASE_URL if base_url is None else base_url,
        headers={"Accept": "application/json"},
        timeout=TIMEOUT if timeout is None else timeout,
    )


class CatalogClient:
    """Stateless adapter over the three catalog lookups.

    A `{"meals": null}` answer means "no results" and comes back as an empty
    tuple (searches) or `None` (lookup). Anything else that goes wrong,
    from DNS to a body of the wrong shape, raises `FetchFailed`. No retries,
    no caching.
    """

    def __init__(self, *, client: httpx.AsyncClient | None = None) -> None:
        self._client = catalog_client_factory() if client is None else client

    async def _meals(
        self,
        operation: str,
        path: str,
        params: dict[str, str],
    ) -> list[dict[str, Any]]:
        logger.debug("%s %s %s", operation, path, params)
        try:
            resp = await self._client.get(path, params=params)
            resp.raise_for_status()
            data = resp.json()
        # RecursionError: json nested deeper than the interpreter allows
        except (httpx.HTTPError, ValueError, RecursionError) as e:
            logger.warning("%s failed: %r", operation, e)
            raise FetchFailed(operation, repr(e)) from e

        if not isinstance(data, dict) or "meals" not in data:
            raise FetchFailed(operation, f"Expecting a 'meals' key. {data!r:.200}")

        meals = data["meals"]
        if meals is None:
            return []
        if not isinstance(meals, list) or not all(isinstance(m, dict) for m in meals):
            raise FetchFailed(operation, f"Expecting a list of meals. {meals!r:.200}")
        return meals

    async def search_by_area(self, term: str) -> tuple[MealSummary, ...]:
        meals = await self._meals("search_by_area", "filter.php", {"a": term})
        return _parse(MealSummary, meals, "search_by_area")

    async def search_by_name(self, term: str) -> tuple[MealDetail, ...]:
        meals = await self._meals("search_by_name", "search.php", {"s": term})
        return _parse(MealDetail, meals, "search_by_name")

    async def lookup_by_id(self, id: MealId) -> MealDetail | None:
        meals = await self._meals("lookup_by_id", "lookup.php", {"i": id})
        if not meals:
            return None
        return _parse(MealDetail, meals[:1], "lookup_by_id")[0]

    async def close(self) -> None:
        await self._client.aclose()


def _parse[T: MealSummary](
    cls: type[T],
    meals: list[dict[str, Any]],
    operation: str,
) -> tuple[T, ...]:
    try:
        return tuple(cls.from_dict(m) for m in meals)
    except KeyError as e:
        raise FetchFailed(operation, f"Meal record missing {e}.") from e

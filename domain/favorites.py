import json
import logging
import os
from pathlib import Path
from typing import Callable, Protocol

from domain.errors import MalformedPersistedState
from domain.models import MealId


logger = logging.getLogger(__name__)


DEFAULT_KEY = "foodfinder-favorites"


type Listener = Callable[[tuple[MealId, ...]], object]


class Storage(Protocol):
    def get_item(self, key: str) -> str | None:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...


class InMemoryStorage:
    def __init__(self, items: dict[str, str] | None = None) -> None:
        self.items = {} if items is None else items

    def get_item(self, key: str) -> str | None:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value


class JsonFileStorage:
    """Named string records kept together in one JSON file."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def _read(self) -> dict[str, str]:
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable storage file %s: %r", self.path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring storage file %s, not an object.", self.path)
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def get_item(self, key: str) -> str | None:
        return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        items = self._read()
        items[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_name(f"{self.path.name}.tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(items, f)
        os.replace(tmp, self.path)


def parse_favorites(raw: str) -> list[MealId]:
    """Ids from a persisted record, first occurrence wins.

    Raises `MalformedPersistedState` for anything but a JSON array of strings.
    """
    try:
        data = json.loads(raw)
    except ValueError as e:
        raise MalformedPersistedState(f"Not JSON: {raw[:100]!r}") from e
    if not isinstance(data, list) or not all(isinstance(i, str) for i in data):
        raise MalformedPersistedState(f"Expecting a list of ids: {raw[:100]!r}")
    return list(dict.fromkeys(data))


class FavoritesStore:
    """The durable set of favorite meal ids.

    In-memory state is authoritative for the running process. Every mutation
    is written straight back to storage; a failed write is logged and the
    mutation stands.
    """

    def __init__(self, storage: Storage, *, key: str = DEFAULT_KEY) -> None:
        self.storage = storage
        self.key = key
        # dict as an insertion ordered set
        self._ids: dict[MealId, None] = {}
        self._listeners: list[Listener] = []

    def load(self) -> None:
        try:
            raw = self.storage.get_item(self.key)
        except Exception:
            # Any backend failure reads as no record.
            logger.exception("Could not read favorites")
            raw = None

        ids: list[MealId] = []
        if raw is not None:
            try:
                ids = parse_favorites(raw)
            except MalformedPersistedState as e:
                logger.warning("Discarding favorites record. %s", e)

        self._ids = dict.fromkeys(ids)
        logger.debug("Loaded %d favorites", len(self._ids))

    def save(self) -> None:
        try:
            self.storage.set_item(self.key, json.dumps(list(self._ids)))
        except Exception:
            logger.exception("Could not save favorites")

    @property
    def ids(self) -> tuple[MealId, ...]:
        return tuple(self._ids)

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, id: object) -> bool:
        return id in self._ids

    def contains(self, id: MealId) -> bool:
        return id in self._ids

    def toggle(self, id: MealId) -> bool:
        """Add or remove `id`. Returns whether it is a favorite afterwards."""
        if id in self._ids:
            del self._ids[id]
            added = False
        else:
            self._ids[id] = None
            added = True

        self.save()
        self._notify()
        return added

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call `listener` with the ids after every mutation."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def _notify(self) -> None:
        ids = self.ids
        for listener in list(self._listeners):
            listener(ids)

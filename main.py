"""Terminal front end. Reads commands, calls the domain, prints what comes back."""

import asyncio
import logging

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

import config
from domain.aggregator import FavoritesAggregator
from domain.catalog import CatalogClient, catalog_client_factory
from domain.detail_cache import MealDetailCache
from domain.errors import FetchFailed
from domain.favorites import FavoritesStore, JsonFileStorage
from domain.models import MealDetail, MealSummary
from domain.search import SearchMode, SearchOrchestrator, SearchState, SearchStatus


CONFIG = config.Config()


POPULAR_CUISINES = [
    "Italian",
    "Chinese",
    "Indian",
    "Mexican",
    "Japanese",
    "American",
    "French",
    "Thai",
    "British",
    "Greek",
    "Turkish",
    "Vietnamese",
]

NAME_SUGGESTIONS = ["Chicken", "Beef", "Pasta", "Rice", "Soup", "Cake"]

HELP = f"""
[bold]cuisine[/bold] <term>   search by cuisine, e.g. {", ".join(POPULAR_CUISINES[:4])}
[bold]name[/bold] <term>      search by meal name, e.g. {", ".join(NAME_SUGGESTIONS[:4])}
[bold]detail[/bold] <id>      show a meal's ingredients and instructions
[bold]fav[/bold] <id>         add or remove a favorite
[bold]favs[/bold]             list favorites
[bold]quit[/bold]
""".strip()

QUIT = ("q", "quit", "exit")

NEEDS_ARG = {
    "cuisine": "term",
    "c": "term",
    "name": "term",
    "n": "term",
    "detail": "id",
    "d": "id",
    "fav": "id",
    "f": "id",
}


console = Console()


class FoodFinder:
    def __init__(
        self,
        *,
        catalog: CatalogClient,
        favorites: FavoritesStore,
    ) -> None:
        self.catalog = catalog
        self.favorites = favorites
        self.details = MealDetailCache(catalog)
        self.search = SearchOrchestrator(catalog)
        self.aggregator = FavoritesAggregator(catalog)

    @classmethod
    def from_config(cls, cfg: config.Config) -> "FoodFinder":
        client = catalog_client_factory(cfg.catalog_url, cfg.catalog_timeout)
        favorites = FavoritesStore(JsonFileStorage(cfg.favorites_path), key=cfg.favorites_key)
        return cls(catalog=CatalogClient(client=client), favorites=favorites)

    def start(self) -> None:
        self.favorites.load()
        self.aggregator.watch(self.favorites)

    async def close(self) -> None:
        await self.catalog.close()


def parse_command(line: str) -> tuple[str, str]:
    cmd, _, arg = line.strip().partition(" ")
    return cmd.lower(), arg.strip()


def meals_table(meals: tuple[MealSummary, ...], favorites: FavoritesStore) -> Table:
    table = Table("", "Id", "Meal", "Cuisine", "Category")
    for meal in meals:
        table.add_row(
            "♥" if meal.id in favorites else "",
            meal.id,
            meal.name,
            meal.area,
            meal.category,
        )
    return table


def detail_panel(meal: MealDetail) -> Panel:
    parts = [f"[dim]{meal.area} • {meal.category}[/dim]"]
    if meal.tag_list:
        parts.append("[bold]Tags[/bold]\n" + ", ".join(meal.tag_list))
    if meal.instructions:
        parts.append(f"[bold]Instructions[/bold]\n{meal.instructions}")
    parts.append("[bold]Ingredients[/bold]\n" + "\n".join(f"• {i}" for i in meal.ingredients))
    return Panel("\n\n".join(parts), title=meal.name)


def show_search(state: SearchState, favorites: FavoritesStore) -> None:
    match state.status:
        case SearchStatus.succeeded:
            console.print(f"[green]Found {len(state.results)} meals![/green]")
            console.print(meals_table(state.results, favorites))
        case SearchStatus.empty:
            console.print("[yellow]No meals found. Try a different search![/yellow]")
        case SearchStatus.failed:
            console.print("[red]Failed to fetch meals. Please try again.[/red]")
        case _:
            pass


async def handle(app: FoodFinder, cmd: str, arg: str) -> None:
    if cmd in NEEDS_ARG and not arg:
        console.print(f"Usage: {cmd} <{NEEDS_ARG[cmd]}>")
        return

    match cmd:
        case "cuisine" | "c" | "name" | "n":
            mode = SearchMode.by_cuisine if cmd in ("cuisine", "c") else SearchMode.by_name
            with console.status(f"Searching for {arg} ..."):
                state = await app.search.search(arg, mode)
            show_search(state, app.favorites)
        case "detail" | "d":
            try:
                with console.status("Loading details ..."):
                    meal = await app.details.ensure(arg)
            except FetchFailed:
                console.print("[red]Failed to fetch meal details. Please try again.[/red]")
                return
            if meal is None:
                console.print(f"No meal with id {arg}.")
            else:
                console.print(detail_panel(meal))
        case "fav" | "f":
            if app.favorites.toggle(arg):
                console.print("[green]Added to favorites![/green]")
            else:
                console.print("[green]Removed from favorites[/green]")
        case "favs":
            with console.status("Loading favorites ..."):
                meals = await app.aggregator.wait()
            if not meals:
                console.print("No favorites yet. Add some with [bold]fav[/bold] <id>.")
            else:
                console.print(f"Your Favorite Meals ({len(meals)})")
                console.print(meals_table(meals, app.favorites))
        case "help" | "?":
            console.print(HELP)
        case _:
            console.print(f"Unknown command {cmd!r}. Try [bold]help[/bold].")


async def main() -> None:
    logging.basicConfig(
        level=logging.DEBUG if CONFIG.env == config.Env.local else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=console)],
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    app = FoodFinder.from_config(CONFIG)
    app.start()
    console.print(f"[bold orange3]FoodFinder[/bold orange3] ({len(app.favorites)} favorites)")
    console.print(HELP)

    try:
        while True:
            # Read in a thread so favorites keep resolving in the background.
            try:
                line = await asyncio.to_thread(console.input, "> ")
            except EOFError:
                break
            cmd, arg = parse_command(line)
            if cmd in QUIT:
                break
            if cmd:
                await handle(app, cmd, arg)
    finally:
        await app.close()


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()

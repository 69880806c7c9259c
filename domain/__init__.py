"""Describes the FoodFinder domain. Centres around a remote meal catalog.

Why is this hard?

- Everything interesting lives behind a third party api we do not control.
- Searches, detail lookups and favorites resolution all overlap on one event
  loop, so a slow answer can land after a newer one.
- Favorites are the only durable state and must survive a corrupt record.

Components, leaf first:

- `CatalogClient` talks to the catalog.
- `MealDetailCache` loads a meal's full record at most once.
- `FavoritesStore` holds the durable set of favorite ids.
- `FavoritesAggregator` turns favorite ids into meals, in parallel.
- `SearchOrchestrator` runs the one current search.
"""

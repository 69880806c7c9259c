from typing import Any, Self


MAX_INGREDIENTS = 20


type MealId = str


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


class MealSummary:
    def __init__(
        self,
        *,
        id: MealId,
        name: str,
        thumbnail: str = "",
        area: str = "",
        category: str = "",
    ) -> None:
        self.id = id
        self.name = name
        self.thumbnail = thumbnail
        self.area = area
        self.category = category

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Build from a catalog record. Raises `KeyError` without an id or name."""
        return cls(**cls._summary_fields(data))

    @staticmethod
    def _summary_fields(data: dict[str, Any]) -> dict[str, str]:
        id, name = data["idMeal"], data["strMeal"]
        if not isinstance(id, str | int) or not isinstance(name, str):
            raise KeyError("idMeal")
        return {
            "id": str(id),
            "name": name,
            "thumbnail": _text(data.get("strMealThumb")),
            "area": _text(data.get("strArea")),
            "category": _text(data.get("strCategory")),
        }

    def __repr__(self) -> str:
        return f"<{type(self).__name__}(id={self.id}, name={self.name})>"

    def to_dict(self) -> dict[str, str]:
        return {
            "id": self.id,
            "name": self.name,
            "thumbnail": self.thumbnail,
            "area": self.area,
            "category": self.category,
        }


class Ingredient:
    def __init__(self, name: str, measure: str = "") -> None:
        self.name = name
        self.measure = measure

    def __str__(self) -> str:
        return f"{self.measure} {self.name}".strip()

    def __repr__(self) -> str:
        return f"<Ingredient({self})>"


class MealDetail(MealSummary):
    def __init__(
        self,
        *,
        instructions: str = "",
        tags: str = "",
        ingredients: list[Ingredient] | None = None,
        **summary: str,
    ) -> None:
        super().__init__(**summary)
        self.instructions = instructions
        self.tags = tags
        self.ingredients = [] if ingredients is None else ingredients

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        ingredients: list[Ingredient] = []
        for i in range(1, MAX_INGREDIENTS + 1):
            name = _text(data.get(f"strIngredient{i}"))
            # An absent ingredient drops its measure with it.
            if name:
                ingredients.append(Ingredient(name, _text(data.get(f"strMeasure{i}"))))

        return cls(
            instructions=_text(data.get("strInstructions")),
            tags=_text(data.get("strTags")),
            ingredients=ingredients,
            **cls._summary_fields(data),
        )

    @property
    def tag_list(self) -> list[str]:
        return [t.strip() for t in self.tags.split(",") if t.strip()]

    def to_dict(self) -> dict[str, Any]:
        return {
            **super().to_dict(),
            "instructions": self.instructions,
            "tags": self.tag_list,
            "ingredients": [str(i) for i in self.ingredients],
        }

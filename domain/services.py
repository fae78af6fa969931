"""Functionality between the generator, the store and the pages."""

from datetime import datetime, timezone
import re
from typing import Any, Iterable

import pydantic

from domain.errors import RecipeValidationError
from domain.llm_service import GeneratedRecipe, LLMService
from domain.models import Recipe, RecipeInput, new_id
from domain.prompts import with_equipment
from domain.repository import EquipmentRepository, RecipeRepository


DEFAULT_VOLUME = 20.0
DEFAULT_STYLE = "AI style"

FLOAT_PREFIX = re.compile(r"\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+))")
INT_PREFIX = re.compile(r"\s*([+-]?\d+)")


def parse_float_stat(text: str | None) -> float | None:
    """Leading decimal of `text`, so "5.5%" gives 5.5. None when unusable."""
    match = FLOAT_PREFIX.match(text or "")
    if match is None:
        return None
    value = float(match.group(1))
    return value if value >= 0 else None


def parse_int_stat(text: str | None) -> int | None:
    match = INT_PREFIX.match(text or "")
    if match is None:
        return None
    value = int(match.group(1))
    return value if value >= 0 else None


def field_errors(error: pydantic.ValidationError) -> dict[str, str]:
    errors: dict[str, str] = {}
    for e in error.errors():
        loc = ".".join(str(part) for part in e["loc"]) or "__root__"
        errors.setdefault(loc, e["msg"])
    return errors


def draft_data(
    draft: GeneratedRecipe,
    *,
    query: str = "",
    volume: float = DEFAULT_VOLUME,
) -> dict[str, Any]:
    """Plain recipe fields from model output, not yet validated.

    Statistics are parsed from their display strings and every ingredient is
    given its own id, the model does not mint any.
    """
    notes = f"AI generated recipe. Detected style: {draft.detected_style}."
    if query:
        notes = f'{notes}\nRequest: "{query}"'

    additional = draft.additional_ingredients
    return {
        "name": draft.recipe_name,
        "style": draft.detected_style.strip() or DEFAULT_STYLE,
        "volume": volume,
        "initial_gravity": parse_float_stat(draft.original_gravity),
        "final_gravity": parse_float_stat(draft.final_gravity),
        "color_ebc": parse_int_stat(draft.color),
        "bitterness_ibu": parse_int_stat(draft.bitterness),
        "alcohol_abv": parse_float_stat(draft.alcohol_content),
        "grains": [{"id": new_id(), "name": g.name, "weight": g.weight} for g in draft.grains],
        "hops": [
            {
                "id": new_id(),
                "name": h.name,
                "weight": h.weight,
                "format": h.format.value,
                "alpha_acid": h.alpha_acid,
            }
            for h in draft.hops
        ],
        "yeast": {
            "id": new_id(),
            "name": draft.yeast.name,
            "type": draft.yeast.type.value,
            "weight": draft.yeast.weight,
        },
        "additional_ingredients": (
            None
            if additional is None
            else [
                {
                    "id": new_id(),
                    "name": a.name,
                    "weight": a.weight,
                    "description": a.description,
                }
                for a in additional
            ]
        ),
        "notes": notes,
        "instructions": draft.instructions,
    }


def recipe_from_draft(
    draft: GeneratedRecipe,
    *,
    query: str = "",
    volume: float = DEFAULT_VOLUME,
) -> RecipeInput:
    """Turn model output into a storable recipe."""
    try:
        return RecipeInput.model_validate(draft_data(draft, query=query, volume=volume))
    except pydantic.ValidationError as e:
        raise RecipeValidationError(field_errors(e)) from e


async def generate_draft(
    query: str,
    *,
    llm: LLMService,
    equipment: EquipmentRepository | None = None,
) -> GeneratedRecipe:
    if equipment is not None:
        query = with_equipment(query, (await equipment.get()).description)
    return await llm.generate_beer_recipe(query)


async def save_draft(
    draft: GeneratedRecipe,
    *,
    repository: RecipeRepository,
    query: str = "",
    volume: float = DEFAULT_VOLUME,
) -> Recipe:
    recipe = recipe_from_draft(draft, query=query, volume=volume)
    return await repository.add(recipe)


def _created_key(recipe: Recipe) -> tuple[bool, datetime]:
    created = recipe.created_at
    if created is None:
        return (False, datetime.min.replace(tzinfo=timezone.utc))
    if created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)
    return (True, created)


def newest_first(recipes: Iterable[Recipe]) -> list[Recipe]:
    """Most recent first. Recipes without a creation time go last."""
    return sorted(recipes, key=_created_key, reverse=True)

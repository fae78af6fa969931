from datetime import datetime, timedelta, timezone

import pytest

from domain.errors import RecipeValidationError
from domain.llm_service import GeneratedRecipe
from domain.models import EquipmentDescription, Recipe
from domain.repository import EquipmentRepository, RecipeRepository
from domain.services import (
    DEFAULT_STYLE,
    draft_data,
    generate_draft,
    newest_first,
    parse_float_stat,
    parse_int_stat,
    recipe_from_draft,
    save_draft,
)
from domain.storage import MemoryStorage

from tests import samples


class FakeLLM:
    def __init__(self, draft: GeneratedRecipe) -> None:
        self.draft = draft
        self.queries: list[str] = []

    async def generate_beer_recipe(self, query: str) -> GeneratedRecipe:
        self.queries.append(query)
        return self.draft


@pytest.mark.parametrize(
    "text, expected",
    [
        ("1.050", 1.05),
        ("5.5%", 5.5),
        (" 6.2 % ABV", 6.2),
        (".5", 0.5),
        ("0", 0.0),
        ("-1.2", None),
        ("about 5", None),
        ("", None),
        (None, None),
    ],
)
def test_parse_float_stat(text: str | None, expected: float | None) -> None:
    assert parse_float_stat(text) == expected


@pytest.mark.parametrize(
    "text, expected",
    [
        ("12", 12),
        ("35 IBU", 35),
        ("12.7", 12),
        ("0", 0),
        ("-3", None),
        ("dark", None),
        (None, None),
    ],
)
def test_parse_int_stat(text: str | None, expected: int | None) -> None:
    assert parse_int_stat(text) == expected


def test_recipe_from_draft(draft: GeneratedRecipe) -> None:
    recipe = recipe_from_draft(draft, query="A citrusy pale ale", volume=23)

    assert recipe.name == "Citra Sunrise"
    assert recipe.style == "American Pale Ale"
    assert recipe.volume == 23
    assert recipe.initial_gravity == 1.05
    assert recipe.final_gravity == 1.01
    assert recipe.color_ebc == 12
    assert recipe.bitterness_ibu == 35
    assert recipe.alcohol_abv == 5.5
    assert [g.name for g in recipe.grains] == ["Pale Malt", "Crystal 40"]
    assert [h.alpha_acid for h in recipe.hops] == [13, 12.5]
    assert recipe.yeast is not None and recipe.yeast.weight == 11.5
    assert recipe.additional_ingredients is not None
    assert recipe.additional_ingredients[0].description == "for clarity"
    assert recipe.instructions == draft.instructions
    assert recipe.notes == (
        "AI generated recipe. Detected style: American Pale Ale.\n"
        'Request: "A citrusy pale ale"'
    )


def test_recipe_from_draft_mints_fresh_ids(draft: GeneratedRecipe) -> None:
    first = recipe_from_draft(draft)
    second = recipe_from_draft(draft)

    ids = [i.id for i in (*first.grains, *first.hops, first.yeast) if i is not None]
    assert len(set(ids)) == len(ids)
    assert first.grains[0].id != second.grains[0].id


def test_recipe_from_draft_drops_unusable_stats() -> None:
    draft = GeneratedRecipe.model_validate(
        samples.draft_data(color="dark", bitterness="-5", alcoholContent="n/a")
    )

    recipe = recipe_from_draft(draft)

    assert recipe.color_ebc is None
    assert recipe.bitterness_ibu is None
    assert recipe.alcohol_abv is None
    assert recipe.initial_gravity == 1.05


def test_recipe_from_draft_without_style() -> None:
    draft = GeneratedRecipe.model_validate(samples.draft_data(detectedStyle="  "))

    assert recipe_from_draft(draft).style == DEFAULT_STYLE


def test_recipe_from_draft_without_additional_ingredients() -> None:
    data = samples.draft_data()
    del data["additionalIngredients"]

    recipe = recipe_from_draft(GeneratedRecipe.model_validate(data))

    assert recipe.additional_ingredients is None


def test_recipe_from_draft_collects_errors() -> None:
    draft = GeneratedRecipe.model_validate(
        samples.draft_data(
            recipeName="",
            grains=[{"name": "Pale Malt", "weight": -1}],
        )
    )

    with pytest.raises(RecipeValidationError) as e:
        recipe_from_draft(draft)

    assert set(e.value.errors) == {"name", "grains.0.weight"}


def test_draft_data_is_plain(draft: GeneratedRecipe) -> None:
    data = draft_data(draft)

    assert data["hops"][0]["format"] == "Pellets"
    assert data["yeast"]["type"] == "Ale"
    assert data["notes"] == "AI generated recipe. Detected style: American Pale Ale."


@pytest.mark.asyncio
async def test_generate_draft_passes_query(draft: GeneratedRecipe) -> None:
    llm = FakeLLM(draft)

    assert await generate_draft("A citrusy pale ale", llm=llm) is draft  # type: ignore[arg-type]
    assert llm.queries == ["A citrusy pale ale"]


@pytest.mark.asyncio
async def test_generate_draft_with_equipment(draft: GeneratedRecipe) -> None:
    llm = FakeLLM(draft)
    equipment = EquipmentRepository(MemoryStorage())
    await equipment.set(EquipmentDescription(description="Grainfather G30"))

    await generate_draft("A citrusy pale ale", llm=llm, equipment=equipment)  # type: ignore[arg-type]

    [query] = llm.queries
    assert query.startswith("A citrusy pale ale")
    assert query.endswith("My brewing equipment: Grainfather G30")


@pytest.mark.asyncio
async def test_save_draft(draft: GeneratedRecipe) -> None:
    repo = RecipeRepository(MemoryStorage())

    stored = await save_draft(draft, repository=repo, query="A citrusy pale ale")

    assert stored.id
    assert stored.created_at is not None
    assert stored.volume == 20
    assert await repo.list() == (stored,)


@pytest.mark.asyncio
async def test_save_invalid_draft_stores_nothing() -> None:
    repo = RecipeRepository(MemoryStorage())
    draft = GeneratedRecipe.model_validate(samples.draft_data(recipeName=""))

    with pytest.raises(RecipeValidationError):
        await save_draft(draft, repository=repo)

    assert await repo.list() == ()


def make_recipe(id: str, created_at: datetime | None) -> Recipe:
    return Recipe(id=id, name=id, style="Stout", volume=10, created_at=created_at)


def test_newest_first() -> None:
    now = datetime.now(timezone.utc)
    old = make_recipe("old", now - timedelta(days=2))
    new = make_recipe("new", now)
    naive = make_recipe("naive", (now - timedelta(days=1)).replace(tzinfo=None))
    unknown = make_recipe("unknown", None)

    ordered = newest_first([unknown, old, new, naive])

    assert [r.id for r in ordered] == ["new", "naive", "old", "unknown"]

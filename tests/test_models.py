from datetime import datetime

import pydantic
import pytest

from domain.models import EquipmentDescription, Grain, Hop, Recipe, RecipeInput, Yeast


def test_ingredients_get_an_id() -> None:
    a = Grain(name="Pale Malt", weight=5000)
    b = Grain(name="Pale Malt", weight=5000)

    assert a.id and b.id
    assert a.id != b.id


@pytest.mark.parametrize(
    "build",
    [
        lambda: Grain(name="Pale Malt", weight=-1),
        lambda: Hop(name="Citra", weight=50, alpha_acid=101),
        lambda: Hop(name="Citra", weight=50, alpha_acid=12, format="Leaf"),
        lambda: Yeast(name="US-05", type="Bottom", weight=11),
        lambda: RecipeInput(name="", style="IPA", volume=20),
        lambda: RecipeInput(name="IPA", style="IPA", volume=0),
        lambda: RecipeInput(name="IPA", style="IPA", volume=20, color_ebc=-1),
    ],
)
def test_invalid_values_are_rejected(build) -> None:
    with pytest.raises(pydantic.ValidationError):
        build()


def test_accepts_camel_case(recipe_input: RecipeInput) -> None:
    data = recipe_input.to_dict()

    assert data["colorEBC"] == 12
    assert data["hops"][0]["alphaAcid"] == 12.5
    assert "alcoholABV" not in data
    assert RecipeInput.model_validate(data).model_dump() == recipe_input.model_dump()


def test_milestones_skip_missing_dates() -> None:
    recipe = Recipe(
        id="r1",
        name="Saison",
        style="Saison",
        volume=20,
        fermentation_start_date=datetime(2024, 5, 1),
        tasting_date=datetime(2024, 7, 1),
    )

    assert recipe.milestones == [
        ("Fermentation start", datetime(2024, 5, 1)),
        ("Tasting", datetime(2024, 7, 1)),
    ]


def test_to_input_drops_identity(recipe_input: RecipeInput) -> None:
    recipe = Recipe(**recipe_input.model_dump(), id="r1", created_at=datetime(2024, 1, 1))

    result = recipe.to_input()

    assert type(result) is RecipeInput
    assert result.model_dump() == recipe_input.model_dump()


def test_repr() -> None:
    recipe = Recipe(id="r1", name="Saison", style="Saison", volume=20)

    assert repr(recipe) == "<Recipe(id=r1, name=Saison)>"


def test_equipment_defaults_to_blank() -> None:
    assert EquipmentDescription().description == ""
    assert EquipmentDescription.model_validate({}).to_dict() == {"description": ""}

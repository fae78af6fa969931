import pytest

from domain.llm_service import GeneratedRecipe
from domain.models import Grain, Hop, RecipeInput, Yeast

from tests.samples import draft_data


@pytest.fixture
def draft() -> GeneratedRecipe:
    return GeneratedRecipe.model_validate(draft_data())


@pytest.fixture
def recipe_input() -> RecipeInput:
    return RecipeInput(
        name="Citra Pale",
        style="American Pale Ale",
        volume=20,
        initial_gravity=1.050,
        color_ebc=12,
        grains=[Grain(name="Pale Malt", weight=5000)],
        hops=[Hop(name="Citra", weight=50, format="Pellets", alpha_acid=12.5)],
        yeast=Yeast(name="US-05", type="Ale", weight=11.5),
    )

from jinja2 import Environment
from markdown2 import (  # pyright: ignore[reportMissingTypeStubs]
    markdown,  # pyright: ignore[reportUnknownVariableType]
)
from markupsafe import Markup

from domain.colour import ColourBand, ebc_band
from domain.models import Recipe


def _fmt(value: float | None, spec: str, suffix: str = "") -> str | None:
    return None if value is None else f"{value:{spec}}{suffix}"


class RecipeDetail:
    def __init__(
        self,
        recipe: Recipe,
        *,
        environment: Environment,
        template_name: str = "recipe-detail.html",
    ) -> None:
        self.recipe = recipe
        self.env = environment
        self.name = template_name

    @property
    def title(self) -> str:
        return self.recipe.name

    @property
    def colour(self) -> ColourBand:
        return ebc_band(self.recipe.color_ebc)

    @property
    def stats(self) -> list[tuple[str, str]]:
        r = self.recipe
        stats = [
            ("Initial gravity", _fmt(r.initial_gravity, ".3f")),
            ("Final gravity", _fmt(r.final_gravity, ".3f")),
            ("Colour", _fmt(r.color_ebc, "g", " EBC")),
            ("Bitterness", _fmt(r.bitterness_ibu, "g", " IBU")),
            ("Alcohol", _fmt(r.alcohol_abv, ".1f", "% ABV")),
        ]
        return [(label, value) for label, value in stats if value is not None]

    @property
    def notes(self) -> str:
        return Markup(markdown(self.recipe.notes or "", safe_mode="escape"))

    @property
    def instructions(self) -> str:
        return Markup(markdown(self.recipe.instructions or "", safe_mode="escape"))

    def render(self, **context: object) -> str:
        return self.env.get_template(self.name).render(detail=self, **context)

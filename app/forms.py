"""Binding and validation for the recipe form.

The page posts flat fields (`name`, `grains-0-weight`, `yeast-type`, ...).
They are bound into nested values that the templates can render back, then
validated against `RecipeForm`, which tightens the stored model with the
limits a person typing a recipe should respect.
"""

from dataclasses import dataclass
import re
from typing import Any, Callable, Mapping, TypeAlias

from pydantic import Field
import pydantic

from domain.errors import RecipeValidationError
from domain.models import (
    AdditionalIngredient,
    Grain,
    Hop,
    HopFormat,
    RecipeInput,
    Yeast,
    YeastType,
    new_id,
)
from domain.services import field_errors


Values: TypeAlias = dict[str, Any]
Row: TypeAlias = dict[str, Any]


OPTIONAL_NUMBERS = (
    "initial_gravity",
    "final_gravity",
    "color_ebc",
    "bitterness_ibu",
    "alcohol_abv",
)
DATES = (
    "fermentation_start_date",
    "bottling_date",
    "conditioning_start_date",
    "tasting_date",
)
TEXTS = ("name", "style", "notes", "instructions")

ROW_FIELD = re.compile(r"^(?P<list>[a-z_]+)-(?P<index>\d+)-(?P<field>[a-z_]+)$")


class GrainRow(Grain):
    name: str = Field(min_length=1)
    weight: float = Field(ge=1)


class HopRow(Hop):
    name: str = Field(min_length=1)
    weight: float = Field(ge=1)


class YeastRow(Yeast):
    name: str = Field(min_length=1)


class AdditionalIngredientRow(AdditionalIngredient):
    name: str = Field(min_length=1)


class RecipeForm(RecipeInput):
    volume: float = Field(ge=0.1, le=1000)
    initial_gravity: float | None = Field(default=None, ge=0.9, le=1.2)
    final_gravity: float | None = Field(default=None, ge=0.9, le=1.2)
    color_ebc: int | None = Field(default=None, ge=0, le=200, alias="colorEBC")
    bitterness_ibu: int | None = Field(default=None, ge=0, le=200, alias="bitternessIBU")
    alcohol_abv: float | None = Field(default=None, ge=0, le=25, alias="alcoholABV")
    grains: list[GrainRow] = Field(min_length=1)  # pyright: ignore[reportIncompatibleVariableOverride]
    hops: list[HopRow] = Field(min_length=1)  # pyright: ignore[reportIncompatibleVariableOverride]
    yeast: YeastRow | None = None  # pyright: ignore[reportIncompatibleVariableOverride]
    additional_ingredients: list[AdditionalIngredientRow] | None = None  # pyright: ignore[reportIncompatibleVariableOverride]


@dataclass(frozen=True)
class IngredientList:
    """One editable list of ingredient rows.

    `row_macro` names the template macro that renders a row and
    `default_row` builds the row appended by the "add" button.
    """

    name: str
    title: str
    add_text: str
    fields: tuple[str, ...]
    row_macro: str
    default_row: Callable[[], Row]

    def append(self, rows: list[Row]) -> list[Row]:
        return [*rows, self.default_row()]

    def remove(self, rows: list[Row], row_id: str) -> list[Row]:
        return [r for r in rows if r.get("id") != row_id]


INGREDIENT_LISTS: dict[str, IngredientList] = {
    lst.name: lst
    for lst in (
        IngredientList(
            name="grains",
            title="Grains and sugars",
            add_text="Add grain or sugar",
            fields=("id", "name", "weight"),
            row_macro="grain_row",
            default_row=lambda: {"id": new_id(), "name": "", "weight": 0},
        ),
        IngredientList(
            name="hops",
            title="Hops",
            add_text="Add hop",
            fields=("id", "name", "weight", "format", "alpha_acid"),
            row_macro="hop_row",
            default_row=lambda: {
                "id": new_id(),
                "name": "",
                "weight": 0,
                "format": HopFormat.pellets.value,
                "alpha_acid": 0,
            },
        ),
        IngredientList(
            name="additional_ingredients",
            title="Additional ingredients",
            add_text="Add ingredient",
            fields=("id", "name", "weight", "description"),
            row_macro="additional_row",
            default_row=lambda: {
                "id": new_id(),
                "name": "",
                "weight": 0,
                "description": "",
            },
        ),
    )
}


def default_values(volume: float = 20.0) -> Values:
    return {
        "name": "",
        "style": "",
        "volume": volume,
        "grains": [INGREDIENT_LISTS["grains"].default_row()],
        "hops": [INGREDIENT_LISTS["hops"].default_row()],
        "yeast": {"id": new_id(), "name": "", "type": YeastType.ale.value, "weight": 0},
        "additional_ingredients": [],
        "notes": "",
    }


def values_from_recipe(recipe: RecipeInput) -> Values:
    return values_from_data(recipe.model_dump(mode="json"))


def values_from_data(data: Values) -> Values:
    values = dict(data)
    values["additional_ingredients"] = values.get("additional_ingredients") or []
    if values.get("yeast") is None:
        values["yeast"] = default_values()["yeast"]
    return values


def _text(form: Mapping[str, Any], key: str) -> str:
    value = form.get(key)
    return "" if value is None else str(value).strip()


def _none_if_blank(value: str) -> str | None:
    return value if value else None


def _date(value: str) -> str | None:
    if not value:
        return None
    # <input type="date"> posts a bare date.
    return f"{value}T00:00:00" if len(value) == 10 else value


def bind(form: Mapping[str, Any]) -> Values:
    """Nest the flat posted fields. Values stay as posted strings."""
    values: Values = {key: _text(form, key) for key in TEXTS}
    values["volume"] = _none_if_blank(_text(form, "volume"))
    for key in OPTIONAL_NUMBERS:
        values[key] = _none_if_blank(_text(form, key))
    for key in DATES:
        values[key] = _date(_text(form, key))

    rows: dict[str, dict[int, Row]] = {name: {} for name in INGREDIENT_LISTS}
    for key in form.keys():
        match = ROW_FIELD.match(key)
        if match is None or match["list"] not in rows:
            continue
        lst = INGREDIENT_LISTS[match["list"]]
        if match["field"] not in lst.fields:
            continue
        row = rows[lst.name].setdefault(int(match["index"]), {})
        row[match["field"]] = _text(form, key)

    for name, indexed in rows.items():
        values[name] = [
            {**indexed[i], "id": new_id()} if not indexed[i].get("id") else indexed[i]
            for i in sorted(indexed)
        ]

    values["yeast"] = {
        "id": _text(form, "yeast-id") or new_id(),
        "name": _text(form, "yeast-name"),
        "type": _text(form, "yeast-type") or YeastType.ale.value,
        "weight": _text(form, "yeast-weight") or "0",
    }
    return values


def apply_action(values: Values, action: str) -> bool:
    """Apply an add/remove row button. False when the action is a save."""
    match action.split(":"):
        case ["add", name] if name in INGREDIENT_LISTS:
            values[name] = INGREDIENT_LISTS[name].append(values[name])
            return True
        case ["remove", name, row_id] if name in INGREDIENT_LISTS:
            values[name] = INGREDIENT_LISTS[name].remove(values[name], row_id)
            return True
        case _:
            return False


def validate(values: Values) -> RecipeInput:
    """Validate bound values into a `RecipeInput`.

    Raises `RecipeValidationError` whose `errors` map dotted field paths,
    e.g. `hops.0.alpha_acid`, to messages.
    """
    data = dict(values)
    if not data["yeast"]["name"]:
        data["yeast"] = None
    if not data["additional_ingredients"]:
        data["additional_ingredients"] = None
    for key in ("notes", "instructions"):
        data[key] = data.get(key) or None

    try:
        form = RecipeForm.model_validate(data)
    except pydantic.ValidationError as e:
        raise RecipeValidationError(field_errors(e)) from e
    return RecipeInput.model_validate(form.model_dump())

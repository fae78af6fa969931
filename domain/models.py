from datetime import datetime
from enum import Enum
import uuid

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def new_id() -> str:
    return uuid.uuid4().hex


class HopFormat(str, Enum):
    pellets = "Pellets"
    cones = "Cones"
    extract = "Extract"
    other = "Other"


class YeastType(str, Enum):
    ale = "Ale"
    lager = "Lager"
    wild = "Wild"
    other = "Other"


class CamelModel(BaseModel):
    """Stored as camelCase JSON, built from snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, loc_by_alias=False
    )

    def to_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Grain(CamelModel):
    id: str = Field(default_factory=new_id)
    name: str
    weight: float = Field(ge=0)


class Hop(CamelModel):
    id: str = Field(default_factory=new_id)
    name: str
    weight: float = Field(ge=0)
    format: HopFormat = HopFormat.pellets
    alpha_acid: float = Field(ge=0, le=100)


class Yeast(CamelModel):
    id: str = Field(default_factory=new_id)
    name: str
    type: YeastType = YeastType.ale
    weight: float = Field(ge=0)


class AdditionalIngredient(CamelModel):
    id: str = Field(default_factory=new_id)
    name: str
    weight: float = Field(ge=0)
    description: str | None = None


class RecipeInput(CamelModel):
    """A recipe before the store gives it an id and a creation time."""

    name: str = Field(min_length=1)
    style: str = Field(min_length=1)
    volume: float = Field(gt=0)

    initial_gravity: float | None = Field(default=None, ge=0)
    final_gravity: float | None = Field(default=None, ge=0)
    color_ebc: int | None = Field(default=None, ge=0, alias="colorEBC")
    bitterness_ibu: int | None = Field(default=None, ge=0, alias="bitternessIBU")
    alcohol_abv: float | None = Field(default=None, ge=0, alias="alcoholABV")

    grains: list[Grain] = Field(default_factory=list)
    hops: list[Hop] = Field(default_factory=list)
    yeast: Yeast | None = None
    additional_ingredients: list[AdditionalIngredient] | None = None

    fermentation_start_date: datetime | None = None
    bottling_date: datetime | None = None
    conditioning_start_date: datetime | None = None
    tasting_date: datetime | None = None

    notes: str | None = None
    instructions: str | None = None


class Recipe(RecipeInput):
    id: str
    # Older snapshots may lack it. The store always sets it on insert.
    created_at: datetime | None = None

    def __repr__(self) -> str:
        return f"<Recipe(id={self.id}, name={self.name})>"

    @property
    def milestones(self) -> list[tuple[str, datetime]]:
        dates = [
            ("Fermentation start", self.fermentation_start_date),
            ("Bottling", self.bottling_date),
            ("Conditioning start", self.conditioning_start_date),
            ("Tasting", self.tasting_date),
        ]
        return [(label, date) for label, date in dates if date is not None]

    def to_input(self) -> RecipeInput:
        return RecipeInput.model_validate(
            self.model_dump(exclude={"id", "created_at"}, by_alias=True)
        )


class EquipmentDescription(CamelModel):
    description: str = ""

import logging

import openai
import pydantic

from domain.aopenai import DEFAULT_MODEL, MAX_TOKENS, openai_client_factory
from domain.errors import GenerationError
from domain.models import CamelModel, HopFormat, YeastType
from domain.prompts import GenerateBeerRecipePrompt


logger = logging.getLogger(__name__)


MIN_QUERY_LENGTH = 10


class AiGrain(CamelModel):
    name: str = pydantic.Field(description="Name of the grain or fermentable sugar.")
    weight: float = pydantic.Field(description="Weight in grams.")


class AiHop(CamelModel):
    name: str = pydantic.Field(description="Name of the hop.")
    weight: float = pydantic.Field(description="Weight in grams.")
    format: HopFormat = pydantic.Field(description="Form of the hop.")
    alpha_acid: float = pydantic.Field(
        description="Alpha acid percentage, e.g. 12.5 for 12.5%."
    )


class AiYeast(CamelModel):
    name: str = pydantic.Field(description="Name of the yeast strain.")
    type: YeastType = pydantic.Field(description="Type of yeast.")
    weight: float = pydantic.Field(
        description="Grams for dry yeast or a count, e.g. 1 for one pack."
    )


class AiAdditionalIngredient(CamelModel):
    name: str = pydantic.Field(description="e.g. Irish Moss, Orange Peel.")
    weight: float = pydantic.Field(
        description="Grams, or a representative number clarified in description."
    )
    description: str | None = pydantic.Field(
        default=None, description="Type or unit, e.g. 'zest', '1 tablet'."
    )


class GeneratedRecipe(CamelModel):
    """What the model must answer with. Statistics stay as display strings."""

    recipe_name: str
    detected_style: str
    grains: list[AiGrain]
    hops: list[AiHop]
    yeast: AiYeast
    additional_ingredients: list[AiAdditionalIngredient] | None = None
    instructions: str = pydantic.Field(
        description="Step-by-step brewing instructions without the ingredient lists."
    )
    original_gravity: str = pydantic.Field(description='e.g. "1.050"')
    final_gravity: str = pydantic.Field(description='e.g. "1.010"')
    color: str = pydantic.Field(description='EBC, e.g. "12"')
    bitterness: str = pydantic.Field(description='IBU, e.g. "35"')
    alcohol_content: str = pydantic.Field(description='% alc./vol., e.g. "5.5%"')


class LLMService:
    def __init__(
        self,
        openai_client: openai.AsyncClient | None = None,
        *,
        model: str = DEFAULT_MODEL,
        max_tokens: int = MAX_TOKENS,
        prompt: GenerateBeerRecipePrompt | None = None,
    ) -> None:
        self._openai_client = openai_client
        self.model = model
        self.max_tokens = max_tokens
        self.prompt = GenerateBeerRecipePrompt() if prompt is None else prompt

    @property
    def openai_client(self) -> openai.AsyncClient:
        # Built on first use so the app starts without an API key.
        if self._openai_client is None:
            self._openai_client = openai_client_factory()
        return self._openai_client

    async def close(self) -> None:
        if self._openai_client is not None:
            await self._openai_client.close()

    async def generate_beer_recipe(self, query: str) -> GeneratedRecipe:
        """Ask the model for a recipe matching `GeneratedRecipe` exactly.

        Anything short of a schema-conforming answer raises `GenerationError`.
        There is a single attempt.
        """
        query = query.strip()
        if len(query) < MIN_QUERY_LENGTH:
            raise ValueError(
                f"Describe the beer in at least {MIN_QUERY_LENGTH} characters."
            )

        logger.info("Generating recipe with %s", self.model)
        try:
            resp = await self.openai_client.chat.completions.parse(
                model=self.model,
                messages=[{"role": "user", "content": self.prompt.format(query)}],
                response_format=GeneratedRecipe,
                max_completion_tokens=self.max_tokens,
            )
        except (openai.OpenAIError, pydantic.ValidationError) as e:
            raise GenerationError(f"Problem generating recipe. {e!r}") from e

        if not resp.choices:
            raise GenerationError("Problem generating recipe. No choices returned.")

        message = resp.choices[0].message
        if message.refusal:
            raise GenerationError(f"Model refused the request. {message.refusal}")
        if message.parsed is None:
            raise GenerationError("Problem generating recipe. Empty output.")

        logger.info("Generated %r", message.parsed.recipe_name)
        return message.parsed

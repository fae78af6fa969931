GENERATE_BEER_RECIPE_PROMPT = """
You are an expert beer recipe generator. Analyze the user's request below and
generate a detailed beer recipe.
If the user specifies a style, use that. If not, infer a suitable style.
If specific ingredients or equipment are mentioned, try to incorporate them.
If equipment is not mentioned, assume standard homebrewing equipment.

User Query: {query}

Provide the output in the structured format defined by the output schema.
Ensure the recipe includes a recipe name, the detected beer style, structured
lists for grains, hops, yeast, and additional ingredients (if any),
step-by-step brewing instructions, original gravity (e.g., "1.050"),
final gravity (e.g., "1.010"), color (EBC, e.g., "12"), bitterness (IBU, e.g., "35"),
and alcohol content (% alc./vol., e.g., "5.5%").

- For grains, provide 'name' and 'weight' (number, in grams).
- For hops, provide 'name', 'weight' (number, in grams),
  'format' (one of 'Pellets', 'Cones', 'Extract', 'Other'),
  and 'alphaAcid' (number, e.g., 12.5 for 12.5% AA).
- For yeast, provide 'name', 'type' (one of 'Ale', 'Lager', 'Wild', 'Other'),
  and 'weight' (number, in grams for dry yeast or a count like 1 for one pack).
- For additionalIngredients, provide 'name', 'weight' (number, in grams or units),
  and optionally 'description' (e.g. "for clarity at 15 min boil", "1 tablet").

The recipe name should be creative and reflect the style and key characteristics.
The instructions should be clear, concise, and easy to follow for a homebrewer.
DO NOT repeat the full ingredient list within the instructions, the ingredients
are already provided in the structured fields. You can refer to them generally
(e.g., "Add bittering hops").
Provide OG, FG, EBC, IBU, and ABV as strings in the formats above.
""".strip()


EQUIPMENT_CONTEXT = "My brewing equipment: {equipment}"


class GenerateBeerRecipePrompt:
    def __init__(
        self,
        content: str | None = None,
    ) -> None:
        self.content = GENERATE_BEER_RECIPE_PROMPT if content is None else content

    def format(self, query: str) -> str:
        return self.content.format(query=query)

    def __str__(self) -> str:
        return self.content


def with_equipment(query: str, equipment: str) -> str:
    """Fold the saved equipment description into a free-text request."""
    equipment = equipment.strip()
    if not equipment:
        return query
    return f"{query.strip()}\n\n{EQUIPMENT_CONTEXT.format(equipment=equipment)}"

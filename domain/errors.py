class BrewMateError(Exception):
    pass


class RecipeNotFound(BrewMateError):
    def __init__(self, recipe_id: str) -> None:
        super().__init__(f"Recipe not found: {recipe_id}")
        self.recipe_id = recipe_id


class GenerationError(BrewMateError):
    """The language model failed to produce a usable recipe."""


class RecipeValidationError(BrewMateError):
    def __init__(self, errors: dict[str, str]) -> None:
        super().__init__(f"Invalid recipe: {', '.join(errors)}")
        self.errors = errors

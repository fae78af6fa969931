import contextlib
import functools
import logging
from pathlib import Path
from typing import Any, Awaitable, Callable

from jinja2 import Environment, FileSystemLoader, select_autoescape
import pydantic
from rich.logging import RichHandler
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import HTMLResponse, RedirectResponse, Response
from starlette.routing import Mount, Route
from starlette.staticfiles import StaticFiles

from app import config, forms
from app.html.recipe_detail import RecipeDetail
from domain.errors import GenerationError, RecipeNotFound, RecipeValidationError
from domain.llm_service import MIN_QUERY_LENGTH, GeneratedRecipe, LLMService
from domain.models import EquipmentDescription, HopFormat, Recipe, YeastType
from domain.repository import EquipmentRepository, RecipeRepository
from domain.services import draft_data, generate_draft, newest_first, save_draft
from domain.storage import EQUIPMENT_KEY, RECIPES_KEY, JsonFileStorage


MIN_EQUIPMENT_LENGTH = 10

logger = logging.getLogger(__name__)


# Messages shown once after a redirect, keyed by the `notice` query parameter.
NOTICES: dict[str, tuple[str, str]] = {
    "saved": ("success", "Recipe saved."),
    "updated": ("success", "Recipe updated."),
    "deleted": ("success", "Recipe deleted."),
    "ai-saved": ("success", "AI recipe added to your recipes."),
    "not-found": ("danger", "That recipe does not exist."),
}


def templates_factory(html_dir: Path) -> Environment:
    env = Environment(
        loader=FileSystemLoader(html_dir),
        autoescape=select_autoescape(),
    )
    env.globals["hop_formats"] = [f.value for f in HopFormat]
    env.globals["yeast_types"] = [t.value for t in YeastType]
    env.globals["ingredient_lists"] = forms.INGREDIENT_LISTS
    return env


def aHTMLResponse(route: Callable[..., Awaitable[str | tuple[str, int] | Response]]):
    @functools.wraps(route)
    async def wrapper(*args: Any, **kwargs: Any) -> Response:
        resp = await route(*args, **kwargs)
        if isinstance(resp, Response):
            return resp
        if not isinstance(resp, tuple):
            html, code = resp, 200
        else:
            html, code = resp
        return HTMLResponse(html, status_code=code)

    return wrapper


def render(request: Request, template: str, **context: Any) -> str:
    env: Environment = request.app.state.templates
    notice = context.pop("notice", None)
    if notice is None:
        notice = NOTICES.get(request.query_params.get("notice", ""))
    return env.get_template(template).render(notice=notice, **context)


def redirect(url: str, notice: str | None = None) -> RedirectResponse:
    if notice is not None:
        url = f"{url}?notice={notice}"
    return RedirectResponse(url, status_code=303)


def recipes_repo(request: Request) -> RecipeRepository:
    return request.app.state.recipes


def equipment_repo(request: Request) -> EquipmentRepository:
    return request.app.state.equipment


async def homepage(request: Request) -> RedirectResponse:
    return redirect("/recipes")


@aHTMLResponse
async def recipe_list(request: Request) -> str:
    recipes = newest_first(await recipes_repo(request).list())
    return render(request, "recipe-list.html", recipes=recipes)


@aHTMLResponse
async def recipe_detail(request: Request) -> str | Response:
    recipe = await recipes_repo(request).get(request.path_params["id"])
    if recipe is None:
        return redirect("/recipes", "not-found")
    env: Environment = request.app.state.templates
    detail = RecipeDetail(recipe, environment=env)
    return detail.render(notice=NOTICES.get(request.query_params.get("notice", "")))


def render_form(
    request: Request,
    values: forms.Values,
    *,
    recipe: Recipe | None = None,
    errors: dict[str, str] | None = None,
) -> str:
    return render(
        request,
        "recipe-form.html",
        values=values,
        errors=errors or {},
        recipe=recipe,
    )


async def submit_form(request: Request, recipe: Recipe | None) -> str | tuple[str, int] | Response:
    async with request.form() as form:
        values = forms.bind(form)
        action = str(form.get("action") or "save")

    if forms.apply_action(values, action):
        return render_form(request, values, recipe=recipe)

    try:
        recipe_input = forms.validate(values)
    except RecipeValidationError as e:
        return render_form(request, values, recipe=recipe, errors=e.errors), 422

    repo = recipes_repo(request)
    if recipe is None:
        stored = await repo.add(recipe_input)
        return redirect(f"/recipes/{stored.id}", "saved")

    try:
        stored = await repo.update(
            Recipe(**recipe_input.model_dump(), id=recipe.id, created_at=recipe.created_at)
        )
    except RecipeNotFound:
        return redirect("/recipes", "not-found")
    return redirect(f"/recipes/{stored.id}", "updated")


@aHTMLResponse
async def recipe_new(request: Request) -> str | tuple[str, int] | Response:
    match request.method.lower():
        case "get":
            return render_form(request, forms.default_values(request.app.state.config.default_volume))
        case "post":
            return await submit_form(request, None)
        case _:
            raise ValueError("Unsupported method.")


@aHTMLResponse
async def recipe_edit(request: Request) -> str | tuple[str, int] | Response:
    recipe = await recipes_repo(request).get(request.path_params["id"])
    if recipe is None:
        return redirect("/recipes", "not-found")
    match request.method.lower():
        case "get":
            return render_form(request, forms.values_from_recipe(recipe), recipe=recipe)
        case "post":
            return await submit_form(request, recipe)
        case _:
            raise ValueError("Unsupported method.")


async def recipe_delete(request: Request) -> RedirectResponse:
    deleted = await recipes_repo(request).delete(request.path_params["id"])
    return redirect("/recipes", "deleted" if deleted else "not-found")


def render_ai(
    request: Request,
    *,
    query: str = "",
    include_equipment: bool = False,
    draft: GeneratedRecipe | None = None,
    error: str | None = None,
    notice: tuple[str, str] | None = None,
) -> str:
    return render(
        request,
        "ai-recipes.html",
        query=query,
        include_equipment=include_equipment,
        draft=draft,
        draft_json=None if draft is None else draft.model_dump_json(by_alias=True),
        error=error,
        notice=notice,
        min_query_length=MIN_QUERY_LENGTH,
    )


@aHTMLResponse
async def ai_recipes(request: Request) -> str | tuple[str, int]:
    if request.method.lower() == "get":
        return render_ai(request)

    async with request.form() as form:
        query = str(form.get("query") or "").strip()
        include_equipment = bool(form.get("include_equipment"))

    if len(query) < MIN_QUERY_LENGTH:
        error = f"Describe your beer in at least {MIN_QUERY_LENGTH} characters."
        return render_ai(request, query=query, include_equipment=include_equipment, error=error), 422

    try:
        draft = await generate_draft(
            query,
            llm=request.app.state.llm,
            equipment=equipment_repo(request) if include_equipment else None,
        )
    except GenerationError:
        logger.exception("Error generating AI recipe")
        notice = (
            "danger",
            "Could not generate the recipe. Try again or rephrase your request.",
        )
        return render_ai(request, query=query, include_equipment=include_equipment, notice=notice), 502

    return render_ai(
        request,
        query=query,
        include_equipment=include_equipment,
        draft=draft,
        notice=("success", f'"{draft.recipe_name}" is ready. You can save it.'),
    )


@aHTMLResponse
async def ai_save(request: Request) -> str | tuple[str, int] | Response:
    async with request.form() as form:
        query = str(form.get("query") or "")
        draft_json = str(form.get("draft") or "")
        action = str(form.get("action") or "save")

    try:
        draft = GeneratedRecipe.model_validate_json(draft_json)
    except pydantic.ValidationError:
        logger.warning("Rejected a malformed draft")
        notice = ("danger", "The recipe draft was malformed. Generate it again.")
        return render_ai(request, query=query, notice=notice), 400

    if action == "edit":
        data = draft_data(
            draft, query=query, volume=request.app.state.config.default_volume
        )
        return render_form(request, forms.values_from_data(data))

    try:
        stored = await save_draft(
            draft,
            repository=recipes_repo(request),
            query=query,
            volume=request.app.state.config.default_volume,
        )
    except RecipeValidationError as e:
        logger.warning("AI draft failed validation: %s", e.errors)
        notice = ("danger", "The generated recipe is not valid. Edit it before saving.")
        return render_ai(request, query=query, draft=draft, notice=notice), 422
    return redirect(f"/recipes/{stored.id}", "ai-saved")


@aHTMLResponse
async def equipment(request: Request) -> str | tuple[str, int]:
    repo = equipment_repo(request)
    if request.method.lower() == "get":
        current = await repo.get()
        return render(request, "equipment.html", description=current.description)

    async with request.form() as form:
        description = str(form.get("description") or "").strip()

    if len(description) < MIN_EQUIPMENT_LENGTH:
        error = f"Describe your equipment in more detail (at least {MIN_EQUIPMENT_LENGTH} characters)."
        return render(request, "equipment.html", description=description, error=error), 422

    await repo.set(EquipmentDescription(description=description))
    return render(
        request,
        "equipment.html",
        description=description,
        notice=("success", "Equipment description saved."),
    )


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True)],
    )


def create_app(
    cfg: config.Config | None = None,
    *,
    llm: LLMService | None = None,
    recipes: RecipeRepository | None = None,
    equipment: EquipmentRepository | None = None,
) -> Starlette:
    """Build the app. Serve with `uvicorn --factory app.app:create_app`.

    Settings are read from the environment when `cfg` is not given.
    """
    cfg = config.Config() if cfg is None else cfg
    configure_logging(cfg.log_level)

    @contextlib.asynccontextmanager
    async def lifespan(app: Starlette):
        yield
        await app.state.llm.close()

    starlette_app = Starlette(
        debug=True if cfg.env == config.Env.local else False,
        routes=[
            Route("/", homepage),
            Route("/recipes", recipe_list),
            Route("/recipes/new", recipe_new, methods=["GET", "POST"]),
            Route("/recipes/{id}", recipe_detail),
            Route("/recipes/{id}/edit", recipe_edit, methods=["GET", "POST"]),
            Route("/recipes/{id}/delete", recipe_delete, methods=["POST"]),
            Route("/ai-recipes", ai_recipes, methods=["GET", "POST"]),
            Route("/ai-recipes/save", ai_save, methods=["POST"]),
            Route("/equipment", equipment, methods=["GET", "POST"]),
            Mount("/assets", StaticFiles(directory=cfg.assets_dir), name="assets"),
        ],
        lifespan=lifespan,
    )

    starlette_app.state.config = cfg
    starlette_app.state.templates = templates_factory(cfg.html_dir)
    starlette_app.state.llm = LLMService(model=cfg.openai_model) if llm is None else llm
    starlette_app.state.recipes = (
        RecipeRepository(JsonFileStorage.for_key(cfg.data_dir, RECIPES_KEY))
        if recipes is None
        else recipes
    )
    starlette_app.state.equipment = (
        EquipmentRepository(JsonFileStorage.for_key(cfg.data_dir, EQUIPMENT_KEY))
        if equipment is None
        else equipment
    )
    return starlette_app

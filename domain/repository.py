import asyncio
from datetime import datetime, timezone
import logging
from typing import Any, Callable

from domain.errors import RecipeNotFound
from domain.models import EquipmentDescription, Recipe, RecipeInput, new_id
from domain.storage import Snapshot, Storage


logger = logging.getLogger(__name__)


class AsyncJolt:
    """Yield to the event loop around a blocking hand-off."""

    async def __aenter__(self) -> None:
        await asyncio.sleep(0)

    async def __aexit__(self, *args: Any, **kwargs: Any) -> None:
        await asyncio.sleep(0)


async def persist(
    storage: Storage,
    snapshot: Callable[[], Snapshot],
    lock: asyncio.Lock,
) -> None:
    """Write `snapshot()` to `storage` in a worker thread.

    The lock is held from taking the snapshot until the write returns, so
    writes reach the backend one at a time and in mutation order.
    """
    async with lock, AsyncJolt():
        await asyncio.to_thread(storage.save, snapshot())


class RecipeRepository:
    """Recipes held in memory and mirrored to a storage backend.

    Writes are serialised on a lock. Each one snapshots the collection once
    the previous write has finished, so the backend ends up holding the state
    after the last mutation.
    """

    def __init__(self, storage: Storage) -> None:
        self.storage = storage
        self._lock = asyncio.Lock()
        data = storage.load() or {}
        self._recipes: list[Recipe] = [
            Recipe.model_validate(r) for r in data.get("recipes", [])
        ]

    def snapshot(self) -> Snapshot:
        return {"recipes": [r.to_dict() for r in self._recipes]}

    async def _flush(self) -> None:
        await persist(self.storage, self.snapshot, self._lock)

    async def add(self, recipe: RecipeInput) -> Recipe:
        stored = Recipe(
            **recipe.model_dump(exclude={"id", "created_at"}),
            id=new_id(),
            created_at=datetime.now(timezone.utc),
        )
        self._recipes.append(stored)
        logger.info("Added recipe %s (%s)", stored.id, stored.name)
        await self._flush()
        return stored

    async def update(self, recipe: Recipe) -> Recipe:
        for i, existing in enumerate(self._recipes):
            if existing.id == recipe.id:
                break
        else:
            raise RecipeNotFound(recipe.id)

        updated = recipe.model_copy(update={"created_at": existing.created_at})
        self._recipes[i] = updated
        logger.info("Updated recipe %s", recipe.id)
        await self._flush()
        return updated

    async def delete(self, id: str) -> bool:
        remaining = [r for r in self._recipes if r.id != id]
        if len(remaining) == len(self._recipes):
            return False
        self._recipes = remaining
        logger.info("Deleted recipe %s", id)
        await self._flush()
        return True

    async def get(self, id: str) -> Recipe | None:
        for recipe in self._recipes:
            if recipe.id == id:
                return recipe
        return None

    async def list(self) -> tuple[Recipe, ...]:
        return tuple(self._recipes)


class EquipmentRepository:
    def __init__(self, storage: Storage) -> None:
        self.storage = storage
        self._lock = asyncio.Lock()
        data = storage.load() or {}
        self._equipment = EquipmentDescription.model_validate(
            data.get("equipment", {})
        )

    def snapshot(self) -> Snapshot:
        return {"equipment": self._equipment.to_dict()}

    async def get(self) -> EquipmentDescription:
        return self._equipment

    async def set(self, equipment: EquipmentDescription) -> EquipmentDescription:
        self._equipment = equipment
        logger.info("Replaced equipment description")
        await persist(self.storage, self.snapshot, self._lock)
        return equipment

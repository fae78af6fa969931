"""Keyed blob storage for the store snapshots.

Each backend holds one JSON document. It is read wholesale when a repository
starts and written wholesale after every mutation.
"""

import json
import logging
import os
from pathlib import Path
import tempfile
from typing import Any, Protocol, TypeAlias


logger = logging.getLogger(__name__)


RECIPES_KEY = "brewmate-recipes-storage"
EQUIPMENT_KEY = "brewmate-equipment-storage"


Snapshot: TypeAlias = dict[str, Any]


class Storage(Protocol):
    def load(self) -> Snapshot | None:
        ...

    def save(self, snapshot: Snapshot) -> None:
        ...


class JsonFileStorage:
    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    @classmethod
    def for_key(cls, data_dir: Path | str, key: str) -> "JsonFileStorage":
        return cls(Path(data_dir) / f"{key}.json")

    def load(self) -> Snapshot | None:
        if not self.path.exists():
            return None
        with open(self.path, encoding="utf-8") as f:
            return json.load(f)

    def save(self, snapshot: Snapshot) -> None:
        """Replace the document atomically.

        The snapshot goes to a temporary file next to the target, which is then
        renamed over it. Readers see either the old document or the new one.
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(snapshot, f, indent=2, ensure_ascii=False)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, self.path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise
        logger.debug("Wrote %s", self.path)


class MemoryStorage:
    def __init__(self, initial: Snapshot | None = None) -> None:
        self.snapshot = initial
        self.saves = 0

    def load(self) -> Snapshot | None:
        return None if self.snapshot is None else json.loads(json.dumps(self.snapshot))

    def save(self, snapshot: Snapshot) -> None:
        # Copy through JSON so callers cannot share state with the "disk".
        self.snapshot = json.loads(json.dumps(snapshot))
        self.saves += 1

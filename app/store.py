"""Access to the JSON media catalog."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Callable, Mapping, Sequence

from pydantic import ValidationError

from .models import CatalogEntry

logger = logging.getLogger(__name__)


class CatalogStoreError(RuntimeError):
    """Raised when the catalog file cannot be read or has the wrong shape."""


class CatalogStore:
    """Thin wrapper around the ``media.json`` catalog file.

    Reads always hit the file so every request sees the latest catalog.
    Writes notify listeners, which is how cached remote data gets dropped.
    """

    def __init__(self, path: Path | str):
        self._path = Path(path)
        self._listeners: list[Callable[[], None]] = []

    @property
    def path(self) -> Path:
        return self._path

    def add_listener(self, callback: Callable[[], None]) -> None:
        """Register ``callback`` to run after every successful write."""

        self._listeners.append(callback)

    def load(self) -> dict[str, list[CatalogEntry]]:
        """Return category name to entries, in file order."""

        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError as exc:
            raise CatalogStoreError(f"Catalog file {self._path} does not exist") from exc
        except (OSError, json.JSONDecodeError) as exc:
            raise CatalogStoreError(f"Catalog file {self._path} is unreadable: {exc}") from exc

        if not isinstance(raw, dict):
            raise CatalogStoreError("Catalog file must contain a JSON object")

        categories: dict[str, list[CatalogEntry]] = {}
        for category, items in raw.items():
            if not isinstance(items, list):
                raise CatalogStoreError(f"Category {category!r} must be a list")
            entries: list[CatalogEntry] = []
            for index, item in enumerate(items):
                try:
                    entries.append(CatalogEntry.model_validate(item))
                except ValidationError as exc:
                    logger.warning(
                        "Skipping invalid entry %d in category %r: %s",
                        index,
                        category,
                        exc,
                    )
            categories[category] = entries
        return categories

    def save(self, categories: Mapping[str, Sequence[CatalogEntry]]) -> None:
        """Persist ``categories`` and invalidate anything derived from them."""

        payload = {
            category: [entry.to_payload() for entry in entries]
            for category, entries in categories.items()
        }
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(
            json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8"
        )
        logger.debug("Wrote %d categories to %s", len(payload), self._path)
        for callback in self._listeners:
            callback()

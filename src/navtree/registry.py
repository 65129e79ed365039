"""Registry of navigable items, shared by a controller and its branches."""

import logging
from typing import Any, Iterator

logger = logging.getLogger(__name__)


class Registry:
    """Maps names to items and remembers which items have been created."""

    def __init__(self) -> None:
        self._items: dict[str, Any] = {}
        self._created: set[str] = set()

    def add(self, name: str, item: Any) -> bool:
        """Register an item. Returns False if the name is taken."""
        if name in self._items:
            logger.error("The name %r is already registered", name)
            return False
        self._items[name] = item
        return True

    def get(self, name: str) -> Any | None:
        return self._items.get(name)

    def is_created(self, name: str) -> bool:
        return name in self._created

    def mark_created(self, name: str) -> None:
        self._created.add(name)

    def __contains__(self, name: object) -> bool:
        return name in self._items

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

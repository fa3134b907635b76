"""Id-addressed helpers shared by the domain mutators."""

from collections.abc import Callable, Sequence
from typing import TypeVar

from yume.core.errors import NotFoundError

E = TypeVar("E")


def get_by_id(items: Sequence[E], item_id: int, kind: str) -> E:
    """Return the entity with ``item_id``.

    Raises:
        NotFoundError: no entity has that id.
    """
    for item in items:
        if item.id == item_id:
            return item
    raise NotFoundError(f"{kind} {item_id} not found")


def replace_by_id(items: Sequence[E], item_id: int, change: Callable[[E], E], kind: str) -> list[E]:
    """Return a new list where the entity with ``item_id`` is replaced by ``change(entity)``."""
    found = False
    result = []
    for item in items:
        if item.id == item_id:
            item = change(item)
            found = True
        result.append(item)
    if not found:
        raise NotFoundError(f"{kind} {item_id} not found")
    return result


def remove_by_id(items: Sequence[E], item_id: int, kind: str) -> list[E]:
    result = [item for item in items if item.id != item_id]
    if len(result) == len(items):
        raise NotFoundError(f"{kind} {item_id} not found")
    return result

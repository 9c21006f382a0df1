"""
Insertion-ordered set.

Iteration follows the order in which items were first added. Equality
with other sets ignores order, like the builtin set.
"""

from collections.abc import MutableSet
from typing import Any, Iterable, Iterator


class OrderedSet(MutableSet):
    """
    A mutable set that remembers insertion order.

    Example:
        tags = OrderedSet(["b", "a", "b"])
        list(tags)          # ["b", "a"]
        tags == {"a", "b"}  # True
    """

    def __init__(self, items: Iterable[Any] = ()):
        self._items = dict.fromkeys(items)

    def __contains__(self, item: Any) -> bool:
        return item in self._items

    def __iter__(self) -> Iterator[Any]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def add(self, item: Any) -> None:
        self._items[item] = None

    def discard(self, item: Any) -> None:
        self._items.pop(item, None)

    def __repr__(self) -> str:
        return f"OrderedSet({list(self._items)!r})"


__all__ = ["OrderedSet"]

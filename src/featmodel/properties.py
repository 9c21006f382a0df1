"""
Property Containers

Per-element storage for attribute values. Every feature, constraint and
feature model owns exactly one container.

INVARIANTS:
    - A stored value is an instance of its key's value_type
    - A stored value satisfied its key's validator when it was set
    - Values go in and come out as copies; callers never alias
      the container's internal state

All access to one container's mapping is serialized by that container's
lock. Different containers share nothing.

An owner may expose `attribute_guard(key)`, a context manager held around
validation and store of that key. Features use it to make NAME uniqueness
atomic across their whole feature model.
"""

import contextlib
import copy
import threading
from typing import Any, Dict, List, Optional, Tuple

from featmodel.attributes import Attribute
from featmodel.errors import TypeMismatchError, ValidationError


class PropertyContainer:
    """
    Mapping from Attribute to value for a single owning element.

    Example:
        container = PropertyContainer(owner=feature)
        container.get(TAGS)            # OrderedSet() (the default)
        container.set(TAGS, OrderedSet(["x"]))
        container.get(TAGS)            # OrderedSet(["x"])
    """

    def __init__(self, owner: Any = None):
        self._owner = owner
        self._values: Dict[Attribute, Any] = {}
        self._lock = threading.Lock()

    @property
    def owner(self) -> Any:
        return self._owner

    def get(self, key: Attribute) -> Any:
        """
        Return the value stored for key.

        Returns:
            The stored value, else the key's default for this owner,
            else None (unset)
        """
        with self._lock:
            if key in self._values:
                return copy.deepcopy(self._values[key])
        return key.default_for(self._owner)

    def set(self, key: Attribute, value: Any) -> None:
        """
        Store value for key, replacing any previous value.

        Raises:
            TypeMismatchError: If value is not a key.value_type
            ValidationError: If key.validator rejects value

        On error the container is left unchanged.
        """
        if not key.accepts_type(value):
            raise TypeMismatchError(key, value)

        stored = copy.deepcopy(value)
        # Validators may read other elements, so they run outside the container lock.
        with self._guard(key):
            if not key.is_valid(self._owner, stored):
                raise ValidationError(key, value)
            with self._lock:
                self._values[key] = stored

    def _guard(self, key: Attribute):
        guard = getattr(self._owner, "attribute_guard", None)
        if guard is None:
            return contextlib.nullcontext()
        return guard(key)

    def remove(self, key: Attribute) -> bool:
        """Drop the stored value for key. Returns True if one was stored."""
        with self._lock:
            return self._values.pop(key, None) is not None

    def has(self, key: Attribute) -> bool:
        """True if a value is explicitly stored (defaults don't count)."""
        with self._lock:
            return key in self._values

    __contains__ = has

    def keys(self) -> List[Attribute]:
        with self._lock:
            return list(self._values)

    def items(self) -> List[Tuple[Attribute, Any]]:
        with self._lock:
            return [(key, copy.deepcopy(value)) for key, value in self._values.items()]

    def __len__(self) -> int:
        with self._lock:
            return len(self._values)

    def __repr__(self) -> str:
        with self._lock:
            entries = ", ".join(f"{key}={value!r}" for key, value in self._values.items())
        return f"PropertyContainer({entries})"

    @classmethod
    def copy_from(cls, other: "PropertyContainer", owner: Optional[Any] = None) -> "PropertyContainer":
        """
        Create an independent deep copy of another container.

        Values are copied as they are, without re-running validators:
        they were valid when stored, and the new owner may not be fully
        built yet when its properties are copied.

        Args:
            other: Container to copy
            owner: Owner of the new container (defaults to other's owner)

        Returns:
            New container sharing no mutable state with other
        """
        clone = cls(owner=owner if owner is not None else other.owner)
        with other._lock:
            clone._values = {key: copy.deepcopy(value) for key, value in other._values.items()}
        return clone


__all__ = ["PropertyContainer"]

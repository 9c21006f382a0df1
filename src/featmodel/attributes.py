"""
Attribute Keys and the Attribute Registry

An attribute is a typed, namespaced metadata slot that can be attached to
any model element (feature, constraint, or the feature model itself).

Each key defines:
    - namespace + name (identity)
    - value_type (every stored value must be an instance)
    - an optional default (a fixed value, or computed from the owner)
    - an optional validator (owner, candidate) -> bool

Keys live in a registry. The package keeps one process-wide registry,
REGISTRY, created when this module is first imported. The built-in keys
below are registered there at that moment.

ARCHITECTURAL RULE:
    Keys are immutable once defined.
    A registry only supports definition and lookup.
    Defining the same (namespace, name) twice is an error, never an overwrite.
"""

import copy
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, Optional, Tuple

from featmodel.config import get_settings
from featmodel.errors import DuplicateAttributeError, TypeMismatchError
from featmodel.ordered_set import OrderedSet


logger = logging.getLogger(__name__)

Validator = Callable[[Any, Any], bool]
DefaultFactory = Callable[[Any], Any]


@dataclass(frozen=True)
class Attribute:
    """
    A typed attribute key.

    Properties:
        namespace: Namespace of the key (usually a dotted module path)
        name: Name within the namespace
        value_type: Python type every value must be an instance of
        validator: Optional predicate (owner, value) -> bool
        default_value: Default returned when nothing is stored
        default_factory: Computes the default from the owning element;
            takes precedence over default_value

    Equality and hashing use (namespace, name) only.
    """

    namespace: str
    name: str
    value_type: type = field(compare=False)
    validator: Optional[Validator] = field(default=None, compare=False)
    default_value: Any = field(default=None, compare=False)
    default_factory: Optional[DefaultFactory] = field(default=None, compare=False)

    @property
    def identity(self) -> Tuple[str, str]:
        return (self.namespace, self.name)

    @property
    def has_default(self) -> bool:
        return self.default_factory is not None or self.default_value is not None

    def default_for(self, owner: Any) -> Any:
        """
        Return the default value for an owning element.

        Fixed defaults are copied so callers can never mutate the key's
        own default (e.g. the empty tag set).

        Returns:
            The default, or None when the key has none
        """
        if self.default_factory is not None:
            return self.default_factory(owner)
        return copy.deepcopy(self.default_value)

    def accepts_type(self, value: Any) -> bool:
        return isinstance(value, self.value_type)

    def is_valid(self, owner: Any, value: Any) -> bool:
        if self.validator is None:
            return True
        return bool(self.validator(owner, value))

    def __str__(self) -> str:
        return f"{self.namespace}:{self.name}"


class AttributeRegistry:
    """
    Registry of attribute keys, indexed by (namespace, name).

    Definitions are serialized by a lock. Lookups read a dict that is
    only ever added to.
    """

    def __init__(self):
        self._attributes: Dict[Tuple[str, str], Attribute] = {}
        self._lock = threading.Lock()

    def define(
        self,
        namespace: str,
        name: str,
        value_type: type,
        validator: Optional[Validator] = None,
        default_value: Any = None,
        default_factory: Optional[DefaultFactory] = None,
    ) -> Attribute:
        """
        Define and register a new attribute key.

        Args:
            namespace: Key namespace
            name: Key name
            value_type: Type every value must be an instance of
            validator: Optional (owner, value) -> bool predicate
            default_value: Optional fixed default
            default_factory: Optional owner -> default callable

        Returns:
            The new Attribute

        Raises:
            DuplicateAttributeError: If (namespace, name) is already defined
            TypeMismatchError: If default_value is not an instance of value_type
        """
        attribute = Attribute(
            namespace=namespace,
            name=name,
            value_type=value_type,
            validator=validator,
            default_value=default_value,
            default_factory=default_factory,
        )
        if default_value is not None and not attribute.accepts_type(default_value):
            raise TypeMismatchError(attribute, default_value)
        with self._lock:
            if attribute.identity in self._attributes:
                raise DuplicateAttributeError(namespace, name)
            self._attributes[attribute.identity] = attribute

        logger.debug("Defined attribute %s (%s)", attribute, value_type.__name__)
        return attribute

    def get(self, namespace: str, name: str) -> Optional[Attribute]:
        return self._attributes.get((namespace, name))

    def __contains__(self, identity: Tuple[str, str]) -> bool:
        return identity in self._attributes

    def __iter__(self) -> Iterator[Attribute]:
        with self._lock:
            return iter(list(self._attributes.values()))

    def __len__(self) -> int:
        return len(self._attributes)


REGISTRY = AttributeRegistry()


def define_attribute(
    namespace: str,
    name: str,
    value_type: type,
    validator: Optional[Validator] = None,
    default_value: Any = None,
    default_factory: Optional[DefaultFactory] = None,
) -> Attribute:
    """Define an attribute in the process-wide registry."""
    return REGISTRY.define(
        namespace,
        name,
        value_type,
        validator=validator,
        default_value=default_value,
        default_factory=default_factory,
    )


def get_attribute(namespace: str, name: str) -> Optional[Attribute]:
    """Look up an attribute in the process-wide registry."""
    return REGISTRY.get(namespace, name)


# =============================================================================
# BUILT-IN ATTRIBUTES
# =============================================================================

NAMESPACE = "featmodel.attributes"


def _default_name(owner: Any) -> Optional[str]:
    identifier = getattr(owner, "identifier", None)
    if identifier is None:
        return None
    return f"{get_settings().default_name_prefix}{identifier}"


def _name_is_free(owner: Any, name: str) -> bool:
    """A name is valid if no other feature of the owner's model uses it."""
    feature_model = getattr(owner, "feature_model", None)
    if feature_model is None:
        return True
    existing = feature_model.get_feature(name)
    return existing is None or existing is owner


NAME = define_attribute(
    NAMESPACE,
    "name",
    str,
    validator=_name_is_free,
    default_factory=_default_name,
)
DESCRIPTION = define_attribute(NAMESPACE, "description", str)
TAGS = define_attribute(NAMESPACE, "tags", OrderedSet, default_value=OrderedSet())
HIDDEN = define_attribute(NAMESPACE, "hidden", bool, default_value=False)
ABSTRACT = define_attribute(NAMESPACE, "abstract", bool, default_value=False)


__all__ = [
    "Attribute",
    "AttributeRegistry",
    "REGISTRY",
    "define_attribute",
    "get_attribute",
    "NAMESPACE",
    "NAME",
    "DESCRIPTION",
    "TAGS",
    "HIDDEN",
    "ABSTRACT",
]

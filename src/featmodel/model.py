"""
Core Feature Model Objects

Defines the container side of the feature-modeling data model:
    - Element (common base: identifier + property container)
    - Feature (named, optionally hidden/abstract configuration unit)
    - FeatureModel (root container of features and constraints)

Constraints live in featmodel.constraints; a FeatureModel owns them.

ARCHITECTURAL RULE:
    Feature names, hidden and abstract flags are attributes.
    They are stored in the feature's PropertyContainer under the
    built-in NAME / HIDDEN / ABSTRACT keys, so the same validation and
    default rules apply to them as to any custom attribute.
"""

import contextlib
import itertools
import logging
import threading
from typing import TYPE_CHECKING, Dict, List, Optional, Union

from featmodel.attributes import ABSTRACT, DESCRIPTION, HIDDEN, NAME
from featmodel.properties import PropertyContainer

if TYPE_CHECKING:
    from featmodel.constraints import Constraint, Origin
    from featmodel.expressions import Formula


logger = logging.getLogger(__name__)

_identifiers = itertools.count(1)
_identifiers_lock = threading.Lock()


def _next_identifier() -> int:
    with _identifiers_lock:
        return next(_identifiers)


class Element:
    """
    Base of every annotatable model element.

    Properties:
        identifier: Process-unique positive integer, stable for the
            element's lifetime
        properties: The element's own PropertyContainer
        feature_model: The FeatureModel this element belongs to
    """

    def __init__(self, feature_model: Optional["FeatureModel"]):
        self._identifier = _next_identifier()
        self._feature_model = feature_model
        self._properties = PropertyContainer(owner=self)

    @property
    def identifier(self) -> int:
        return self._identifier

    @property
    def feature_model(self) -> Optional["FeatureModel"]:
        return self._feature_model

    @property
    def properties(self) -> PropertyContainer:
        return self._properties

    def attribute_guard(self, key):
        """
        Context held while a value for key is validated and stored.

        NAME writes hold the feature model lock, so two renames cannot both
        pass the uniqueness check, whichever path (Feature.name or
        properties.set) they take.
        """
        feature_model = self.feature_model
        if key == NAME and feature_model is not None:
            return feature_model._lock
        return contextlib.nullcontext()


class Feature(Element):
    """
    A named configuration unit of a product line.

    Features form a tree through `parent`. A feature with a hidden
    ancestor is treated as hidden by constraint queries.

    Do not construct directly; use FeatureModel.add_feature.
    """

    def __init__(self, feature_model: "FeatureModel", parent: Optional["Feature"] = None):
        super().__init__(feature_model)
        self._parent = parent
        self._children: List["Feature"] = []

    @property
    def name(self) -> str:
        return self._properties.get(NAME)

    @name.setter
    def name(self, name: str) -> None:
        self._properties.set(NAME, name)

    @property
    def description(self) -> Optional[str]:
        return self._properties.get(DESCRIPTION)

    @description.setter
    def description(self, description: str) -> None:
        self._properties.set(DESCRIPTION, description)

    @property
    def hidden(self) -> bool:
        return self._properties.get(HIDDEN)

    @hidden.setter
    def hidden(self, hidden: bool) -> None:
        self._properties.set(HIDDEN, hidden)

    @property
    def abstract(self) -> bool:
        return self._properties.get(ABSTRACT)

    @abstract.setter
    def abstract(self, abstract: bool) -> None:
        self._properties.set(ABSTRACT, abstract)

    @property
    def parent(self) -> Optional["Feature"]:
        return self._parent

    @property
    def children(self) -> List["Feature"]:
        return list(self._children)

    def is_hidden(self) -> bool:
        return self.hidden

    def has_hidden_parent(self) -> bool:
        """True if any ancestor of this feature is hidden."""
        ancestor = self._parent
        while ancestor is not None:
            if ancestor.is_hidden():
                return True
            ancestor = ancestor.parent
        return False

    def __repr__(self) -> str:
        return f"Feature({self.name!r})"


class FeatureModel(Element):
    """
    Root container for features and constraints.

    Features are kept in insertion order; the first feature added without
    a parent is the conventional root.

    INVARIANTS:
        - Feature names are unique within one model
        - Every constraint in `constraints` has this model as feature_model
    """

    def __init__(self, name: str = ""):
        super().__init__(None)
        self.name = name
        self._features: List[Feature] = []
        self._constraints: List["Constraint"] = []
        self._lock = threading.RLock()

    @property
    def feature_model(self) -> "FeatureModel":
        return self

    # =========================================================================
    # FEATURES
    # =========================================================================

    @property
    def features(self) -> List[Feature]:
        with self._lock:
            return list(self._features)

    @property
    def root(self) -> Optional[Feature]:
        with self._lock:
            for feature in self._features:
                if feature.parent is None:
                    return feature
        return None

    def add_feature(
        self,
        name: Optional[str] = None,
        parent: Optional[Feature] = None,
        hidden: bool = False,
        abstract: bool = False,
    ) -> Feature:
        """
        Create a feature in this model.

        Args:
            name: Feature name; when omitted the NAME default ("@" + identifier)
                applies, with a "_2", "_3", ... suffix if another
                feature already uses that name
            parent: Parent feature (must belong to this model)
            hidden: Initial HIDDEN attribute
            abstract: Initial ABSTRACT attribute

        Returns:
            The new Feature

        Raises:
            ValidationError: If another feature already uses the name
            ValueError: If parent belongs to another model
        """
        if parent is not None and parent.feature_model is not self:
            raise ValueError(f"Parent {parent!r} belongs to a different feature model")

        with self._lock:
            feature = Feature(self, parent=parent)
            if name is not None:
                feature.name = name
            elif self.get_feature(feature.name) is not None:
                # The generated name was taken explicitly by another feature
                feature.name = self._free_name(feature.name)
            if hidden:
                feature.hidden = True
            if abstract:
                feature.abstract = True
            self._features.append(feature)
            if parent is not None:
                parent._children.append(feature)

        logger.debug("Added feature %s to model %r", feature.name, self.name)
        return feature

    def _free_name(self, base: str) -> str:
        suffix = 2
        while self.get_feature(f"{base}_{suffix}") is not None:
            suffix += 1
        return f"{base}_{suffix}"

    def get_feature(self, name: str) -> Optional[Feature]:
        """
        Retrieve a feature by name.

        Returns:
            Feature or None if not found
        """
        with self._lock:
            for feature in self._features:
                if feature.name == name:
                    return feature
        return None

    def __contains__(self, name: str) -> bool:
        return self.get_feature(name) is not None

    # =========================================================================
    # CONSTRAINTS
    # =========================================================================

    @property
    def constraints(self) -> List["Constraint"]:
        with self._lock:
            return list(self._constraints)

    def add_constraint(self, constraint: "Constraint") -> "Constraint":
        if constraint.feature_model is not self:
            raise ValueError("Constraint belongs to a different feature model")
        with self._lock:
            if constraint not in self._constraints:
                self._constraints.append(constraint)
        return constraint

    def create_constraint(
        self,
        formula: Union["Formula", str],
        origin: Optional["Origin"] = None,
    ) -> "Constraint":
        """
        Create a constraint over this model and add it.

        Args:
            formula: Formula AST, or formula text to parse
            origin: When given, a constraint carrying this origin is created

        Raises:
            UnresolvedVariableError: If the formula names an unknown feature
            FormulaParseError: If formula text is malformed
        """
        from featmodel.constraints import Constraint
        from featmodel.parser import parse_formula

        if isinstance(formula, str):
            formula = parse_formula(formula)
        if origin is None:
            constraint = Constraint(self, formula)
        else:
            constraint = Constraint.with_origin(self, formula, origin)
        return self.add_constraint(constraint)

    def remove_constraint(self, constraint: "Constraint") -> bool:
        with self._lock:
            if constraint in self._constraints:
                self._constraints.remove(constraint)
                return True
        return False

    # =========================================================================
    # CLONING
    # =========================================================================

    def clone(self, name: Optional[str] = None) -> "FeatureModel":
        """
        Deep-copy this model.

        Features are recreated with the same names, tree and properties.
        Every constraint is cloned into the new model, so its contained
        features are the new model's features.

        Assumes the model is not modified while it is cloned.
        """
        clone = FeatureModel(self.name if name is None else name)
        clone._properties = PropertyContainer.copy_from(self._properties, owner=clone)

        mapping: Dict[int, Feature] = {}
        for feature in self.features:
            parent = mapping[feature.parent.identifier] if feature.parent is not None else None
            copied = Feature(clone, parent=parent)
            copied._properties = PropertyContainer.copy_from(feature.properties, owner=copied)
            if not copied.properties.has(NAME):
                # Keep generated names stable across the copy
                copied._properties.set(NAME, feature.name)
            clone._features.append(copied)
            if parent is not None:
                parent._children.append(copied)
            mapping[feature.identifier] = copied

        for constraint in self.constraints:
            clone._constraints.append(constraint.clone_into(clone))

        logger.debug(
            "Cloned model %r: %d features, %d constraints",
            self.name, len(clone._features), len(clone._constraints),
        )
        return clone

    def __repr__(self) -> str:
        return f"FeatureModel({self.name!r}, features={len(self._features)}, constraints={len(self._constraints)})"


__all__ = ["Element", "Feature", "FeatureModel"]

"""
Constraints

A Constraint binds a propositional formula to a feature model. It derives
the list of features the formula mentions (its contained features) and
carries description, tags, selection/implicit flags and custom properties.

Constraint kinds form a closed set:
    - STANDARD:    a plain constraint
    - WITH_ORIGIN: a constraint that records where it came from
                   (Origin.INTERNAL, or Origin.external(source_id))

Both kinds share one class and one field set. Behaviour that differs per
kind is looked up in small dispatch tables keyed by ConstraintKind.

INVARIANTS:
    - contained_features is exactly the resolution of
      variable_names(formula) against feature_model, in extraction order
    - contained_features is recomputed whenever the formula is replaced,
      and never changed otherwise
    - set_formula is all-or-nothing: if any variable cannot be resolved,
      formula and contained features keep their previous values
    - formula, tags and contained features are never handed out or taken
      in by reference; callers get copies or immutable snapshots

CONCURRENCY:
    The (formula, contained features) pair and the tag set are each
    guarded by their own lock. Writers build the new value outside the
    lock and swap it in; readers take a snapshot. A clone copies field by
    field and assumes the source is not being modified meanwhile.
"""

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, FrozenSet, Iterable, List, Optional, Set, Tuple

from featmodel.config import get_settings
from featmodel.errors import UnresolvedVariableError
from featmodel.expressions import Formula, clone_formula, format_formula, variable_names
from featmodel.model import Element, Feature, FeatureModel
from featmodel.properties import PropertyContainer


logger = logging.getLogger(__name__)


class ConstraintKind(Enum):
    """The closed set of constraint kinds."""
    STANDARD = "standard"
    WITH_ORIGIN = "with_origin"


@dataclass(frozen=True)
class Origin:
    """
    Where a constraint was defined.

    Properties:
        source_id: None for constraints defined in the model itself,
            otherwise an identifier of the external source (e.g. the
            imported model's name)
    """

    source_id: Optional[str] = None

    @property
    def is_external(self) -> bool:
        return self.source_id is not None

    @classmethod
    def external(cls, source_id: str) -> "Origin":
        if not source_id:
            raise ValueError("External origin needs a non-empty source_id")
        return cls(source_id)

    def __str__(self) -> str:
        return f"external({self.source_id})" if self.is_external else "internal"


Origin.INTERNAL = Origin()


_IS_EXTERNAL: Dict[ConstraintKind, Callable[["Constraint"], bool]] = {
    ConstraintKind.STANDARD: lambda constraint: False,
    ConstraintKind.WITH_ORIGIN: lambda constraint: constraint._origin.is_external,
}


class Constraint(Element):
    """
    A propositional constraint below the feature tree.

    Example:
        model = FeatureModel("Car")
        a = model.add_feature("A")
        b = model.add_feature("B")
        constraint = Constraint(model, and_(var("A"), not_(var("B"))))
        constraint.get_contained_features()   # [a, b]

    Properties:
        formula: The formula (None allowed, then no contained features)
        description: Free text, "" by default
        selected: UI/selection flag, False by default
        implicit: True for constraints derived by tooling rather than
            written by a modeler, False by default
        kind: ConstraintKind
        origin: Origin for WITH_ORIGIN constraints, None otherwise
    """

    def __init__(self, feature_model: FeatureModel, formula: Optional[Formula]):
        super().__init__(feature_model)
        self._formula: Optional[Formula] = None
        self._contained: Tuple[Feature, ...] = ()
        self._contained_lock = threading.Lock()

        self._tags: FrozenSet[str] = frozenset()
        self._tags_lock = threading.Lock()

        self.selected = False
        self.implicit = False
        self._description = ""
        self._kind = ConstraintKind.STANDARD
        self._origin: Optional[Origin] = None

        self.set_formula(formula)

    @classmethod
    def with_origin(
        cls,
        feature_model: FeatureModel,
        formula: Optional[Formula],
        origin: Origin = Origin.INTERNAL,
    ) -> "Constraint":
        """
        Create a WITH_ORIGIN constraint.

        Raises:
            ValueError: If origin is None
        """
        if origin is None:
            raise ValueError("A constraint origin cannot be None; use Origin.INTERNAL")
        constraint = cls(feature_model, formula)
        constraint._kind = ConstraintKind.WITH_ORIGIN
        constraint._origin = origin
        return constraint

    # =========================================================================
    # FORMULA AND CONTAINED FEATURES
    # =========================================================================

    @property
    def formula(self) -> Optional[Formula]:
        return self._formula

    @formula.setter
    def formula(self, formula: Optional[Formula]) -> None:
        self.set_formula(formula)

    def set_formula(self, formula: Optional[Formula]) -> None:
        """
        Replace the formula and recompute the contained features.

        Every variable name is resolved against the owning model before
        anything is changed.

        Raises:
            UnresolvedVariableError: If a variable names no feature of the
                model. The constraint is left unchanged.
        """
        contained = self._resolve(formula)
        with self._contained_lock:
            self._formula = formula
            self._contained = contained
        logger.debug(
            "Constraint %d formula set to %s (%d features)",
            self.identifier, format_formula(formula), len(contained),
        )

    def _resolve(self, formula: Optional[Formula]) -> Tuple[Feature, ...]:
        if formula is None:
            return ()
        names = variable_names(formula)
        if get_settings().deduplicate_contained_features:
            names = list(dict.fromkeys(names))

        features: List[Feature] = []
        for name in names:
            feature = self._feature_model.get_feature(name)
            if feature is None:
                raise UnresolvedVariableError(name)
            features.append(feature)
        return tuple(features)

    @property
    def contained_features(self) -> List[Feature]:
        return self.get_contained_features()

    def get_contained_features(self) -> List[Feature]:
        """Snapshot of the contained features, in variable-extraction order."""
        with self._contained_lock:
            return list(self._contained)

    def has_hidden_features(self) -> bool:
        """True if any contained feature is hidden or below a hidden feature."""
        for feature in self.get_contained_features():
            if feature.is_hidden() or feature.has_hidden_parent():
                return True
        return False

    @property
    def display_name(self) -> str:
        return format_formula(self._formula)

    # =========================================================================
    # METADATA
    # =========================================================================

    @property
    def description(self) -> str:
        return self._description

    @description.setter
    def description(self, description: str) -> None:
        self.set_description(description)

    def set_description(self, description: str) -> None:
        if description is None:
            description = ""
        self._description = description

    def get_tags(self) -> Set[str]:
        with self._tags_lock:
            return set(self._tags)

    def set_tags(self, tags: Iterable[str]) -> None:
        """Replace all tags (not a union with the current ones)."""
        new_tags = frozenset(tags)
        with self._tags_lock:
            self._tags = new_tags

    @property
    def tags(self) -> Set[str]:
        return self.get_tags()

    @tags.setter
    def tags(self, tags: Iterable[str]) -> None:
        self.set_tags(tags)

    # =========================================================================
    # KIND AND ORIGIN
    # =========================================================================

    @property
    def kind(self) -> ConstraintKind:
        return self._kind

    @property
    def origin(self) -> Optional[Origin]:
        return self._origin

    def set_origin(self, origin: Origin) -> None:
        """Record an origin; a STANDARD constraint becomes WITH_ORIGIN."""
        if origin is None:
            raise ValueError("A constraint origin cannot be None; use Origin.INTERNAL")
        self._kind = ConstraintKind.WITH_ORIGIN
        self._origin = origin

    def is_from_external_source(self) -> bool:
        return _IS_EXTERNAL[self._kind](self)

    # =========================================================================
    # CLONING
    # =========================================================================

    def clone_into(self, feature_model: FeatureModel) -> "Constraint":
        """
        Copy this constraint so that it belongs to another model.

        The formula is cloned structurally; description, flags, tags,
        properties, kind and origin are copied. Contained features are
        resolved again against the target model, never copied. The clone
        is not added to the target model.

        Raises:
            UnresolvedVariableError: If the target model lacks a feature the
                formula names
        """
        clone = Constraint(feature_model, clone_formula(self._formula))
        clone.selected = self.selected
        clone.implicit = self.implicit
        clone._description = self._description
        clone.set_tags(self.get_tags())
        clone._properties = PropertyContainer.copy_from(self._properties, owner=clone)
        clone._kind = self._kind
        clone._origin = self._origin

        logger.debug("Cloned constraint %d into constraint %d", self.identifier, clone.identifier)
        return clone

    def __repr__(self) -> str:
        if self._kind is ConstraintKind.WITH_ORIGIN:
            return f"Constraint({self.display_name!r}, origin={self._origin})"
        return f"Constraint({self.display_name!r})"


__all__ = ["Constraint", "ConstraintKind", "Origin"]

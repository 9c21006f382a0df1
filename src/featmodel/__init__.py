"""
featmodel: Feature Model Constraint and Attribute Core

A data model for software product-line variability:
    - Features arranged in a tree
    - Propositional constraints over features
    - Typed, validated attributes on every model element

ARCHITECTURAL GUARANTEE:
------------------------
This package contains ZERO knowledge of:
    - SAT solving or model analysis
    - File formats and persistence
    - User interfaces

Formulas name features; constraints resolve those names against the
model that owns them.
"""

import logging

from featmodel.attributes import (
    ABSTRACT,
    DESCRIPTION,
    HIDDEN,
    NAME,
    REGISTRY,
    TAGS,
    Attribute,
    AttributeRegistry,
    define_attribute,
    get_attribute,
)
from featmodel.config import Settings, configure_logging, get_settings, set_settings
from featmodel.constraints import Constraint, ConstraintKind, Origin
from featmodel.errors import (
    ConfigError,
    DuplicateAttributeError,
    FeatureModelError,
    FormulaParseError,
    TypeMismatchError,
    UnresolvedVariableError,
    ValidationError,
)
from featmodel.model import Element, Feature, FeatureModel
from featmodel.ordered_set import OrderedSet
from featmodel.parser import parse_formula
from featmodel.properties import PropertyContainer

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "__version__",
    "Attribute",
    "AttributeRegistry",
    "REGISTRY",
    "define_attribute",
    "get_attribute",
    "NAME",
    "DESCRIPTION",
    "TAGS",
    "HIDDEN",
    "ABSTRACT",
    "PropertyContainer",
    "OrderedSet",
    "Element",
    "Feature",
    "FeatureModel",
    "Constraint",
    "ConstraintKind",
    "Origin",
    "parse_formula",
    "Settings",
    "configure_logging",
    "get_settings",
    "set_settings",
    "FeatureModelError",
    "DuplicateAttributeError",
    "ValidationError",
    "TypeMismatchError",
    "UnresolvedVariableError",
    "FormulaParseError",
    "ConfigError",
]

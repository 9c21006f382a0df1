"""
Exception taxonomy for featmodel.

Every error raised by this package derives from FeatureModelError.
Errors are raised synchronously by the operation that detects them.
A failed operation leaves the object it was called on unchanged.
"""

from typing import Any


class FeatureModelError(Exception):
    """Base class for all featmodel errors."""
    pass


class DuplicateAttributeError(FeatureModelError):
    """Raised when an attribute key (namespace, name) is defined twice."""

    def __init__(self, namespace: str, name: str):
        self.namespace = namespace
        self.name = name
        super().__init__(f"Attribute already defined: {namespace}:{name}")


class ValidationError(FeatureModelError, ValueError):
    """
    Raised when an attribute validator rejects a candidate value.

    Properties:
        key: The attribute key whose validator rejected the value
        value: The rejected value
    """

    def __init__(self, key: Any, value: Any):
        self.key = key
        self.value = value
        super().__init__(f"Value {value!r} rejected for attribute {key}")


class TypeMismatchError(FeatureModelError, TypeError):
    """Raised when a value is not an instance of an attribute's value type."""

    def __init__(self, key: Any, value: Any):
        self.key = key
        self.value = value
        expected = getattr(key, "value_type", object).__name__
        super().__init__(
            f"Attribute {key} expects {expected}, got {type(value).__name__}"
        )


class UnresolvedVariableError(FeatureModelError, LookupError):
    """Raised when a formula variable does not name a feature of the model."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"No feature named {name!r} in feature model")


class FormulaParseError(FeatureModelError):
    """Raised when formula text cannot be parsed."""

    def __init__(self, text: str, reason: str):
        self.text = text
        self.reason = reason
        super().__init__(f"Failed to parse formula {text!r}: {reason}")


class ConfigError(FeatureModelError):
    """Raised when settings cannot be loaded."""
    pass


__all__ = [
    "FeatureModelError",
    "DuplicateAttributeError",
    "ValidationError",
    "TypeMismatchError",
    "UnresolvedVariableError",
    "FormulaParseError",
    "ConfigError",
]

"""
Propositional Formula System for featmodel

Constraints over features are represented as Abstract Syntax Trees (ASTs),
never as strings.

This ensures:
    - Variables can be extracted without re-parsing
    - Formulas can be cloned structurally
    - Formulas are independent of any one feature model

ARCHITECTURAL RULE:
    A formula only NAMES features. It never holds Feature objects.
    Resolution of names to features belongs to the constraint layer.
"""

from abc import ABC
from dataclasses import dataclass
from enum import Enum
from functools import reduce
from typing import List, Optional


class Formula(ABC):
    """
    Base class for all formula nodes.

    This is intentionally minimal.
    It exists to provide type-safety for the formula hierarchy.

    DO NOT:
        - Add evaluation logic here (belongs in a solver layer)
        - Add feature lookups here (belongs in constraints)

    This class is structure only.
    """
    pass


class BinaryOperator(Enum):
    """
    Binary connectives supported in propositional formulas.
    """

    AND = "&"
    OR = "|"
    IMPLIES = "=>"
    EQUIVALENT = "<=>"


class UnaryOperator(Enum):
    """Unary connectives."""
    NOT = "!"


@dataclass(frozen=True)
class Variable(Formula):
    """
    References a feature by name.

    Example:
        Variable("Engine")

    IMPORTANT:
        This object does NOT check that the feature exists.
        That is checked when a constraint resolves its formula.
    """

    name: str


@dataclass(frozen=True)
class Constant(Formula):
    """A boolean constant (true / false)."""

    value: bool


@dataclass(frozen=True)
class UnaryFormula(Formula):
    """
    Represents a unary operation (NOT).

    Example:
        !Manual

    Becomes:
        UnaryFormula(
            operator=UnaryOperator.NOT,
            operand=Variable("Manual")
        )
    """

    operator: UnaryOperator
    operand: Formula


@dataclass(frozen=True)
class BinaryFormula(Formula):
    """
    Represents a binary connective.

    Example:
        Automatic => !Manual

    Becomes:
        BinaryFormula(
            operator=BinaryOperator.IMPLIES,
            left=Variable("Automatic"),
            right=UnaryFormula(UnaryOperator.NOT, Variable("Manual"))
        )

    Properties:
        operator: BinaryOperator enum
        left: Left operand (Formula)
        right: Right operand (Formula)

    IMPORTANT:
        This object is immutable (frozen=True).
        It does NOT evaluate itself.
    """

    operator: BinaryOperator
    left: Formula
    right: Formula


# =============================================================================
# CONSTRUCTION HELPERS
# =============================================================================

def var(name: str) -> Variable:
    return Variable(name)


def not_(operand: Formula) -> UnaryFormula:
    return UnaryFormula(UnaryOperator.NOT, operand)


def _fold(operator: BinaryOperator, operands: tuple) -> Formula:
    if not operands:
        raise ValueError(f"{operator.name} needs at least one operand")
    return reduce(lambda left, right: BinaryFormula(operator, left, right), operands)


def and_(*operands: Formula) -> Formula:
    """Left-folded conjunction: and_(A, B, C) == (A & B) & C."""
    return _fold(BinaryOperator.AND, operands)


def or_(*operands: Formula) -> Formula:
    """Left-folded disjunction."""
    return _fold(BinaryOperator.OR, operands)


def implies(left: Formula, right: Formula) -> BinaryFormula:
    return BinaryFormula(BinaryOperator.IMPLIES, left, right)


def iff(left: Formula, right: Formula) -> BinaryFormula:
    return BinaryFormula(BinaryOperator.EQUIVALENT, left, right)


# =============================================================================
# TREE OPERATIONS
# =============================================================================

def variable_names(formula: Optional[Formula]) -> List[str]:
    """
    Extract the variable names of a formula in left-to-right order.

    Names are NOT deduplicated: a variable that occurs twice is returned
    twice. Callers that need a set decide that themselves.

    Args:
        formula: Formula tree, or None

    Returns:
        List of names (empty for None or a variable-free formula)
    """
    names: List[str] = []
    stack = [formula] if formula is not None else []
    while stack:
        node = stack.pop()
        if isinstance(node, Variable):
            names.append(node.name)
        elif isinstance(node, UnaryFormula):
            stack.append(node.operand)
        elif isinstance(node, BinaryFormula):
            # Right first so the left subtree is visited first
            stack.append(node.right)
            stack.append(node.left)
        elif isinstance(node, Constant):
            pass
        else:
            raise TypeError(f"Unsupported Formula type: {type(node)}")
    return names


def clone_formula(formula: Optional[Formula]) -> Optional[Formula]:
    """
    Structurally copy a formula.

    Every node of the result is a new object; no subtree is shared
    with the input.
    """
    if formula is None:
        return None
    if isinstance(formula, Variable):
        return Variable(formula.name)
    if isinstance(formula, Constant):
        return Constant(formula.value)
    if isinstance(formula, UnaryFormula):
        return UnaryFormula(formula.operator, clone_formula(formula.operand))
    if isinstance(formula, BinaryFormula):
        return BinaryFormula(
            formula.operator,
            clone_formula(formula.left),
            clone_formula(formula.right),
        )
    raise TypeError(f"Unsupported Formula type: {type(formula)}")


def format_formula(formula: Optional[Formula]) -> str:
    """Render a formula as readable text, e.g. "(A & !B)"."""
    if formula is None:
        return ""

    if isinstance(formula, Variable):
        return formula.name

    if isinstance(formula, Constant):
        return "true" if formula.value else "false"

    if isinstance(formula, UnaryFormula):
        return f"{formula.operator.value}{format_formula(formula.operand)}"

    if isinstance(formula, BinaryFormula):
        left = format_formula(formula.left)
        right = format_formula(formula.right)
        return f"({left} {formula.operator.value} {right})"

    raise TypeError(f"Unsupported Formula type: {type(formula)}")


__all__ = [
    "Formula",
    "BinaryOperator",
    "UnaryOperator",
    "Variable",
    "Constant",
    "UnaryFormula",
    "BinaryFormula",
    "var",
    "not_",
    "and_",
    "or_",
    "implies",
    "iff",
    "variable_names",
    "clone_formula",
    "format_formula",
]

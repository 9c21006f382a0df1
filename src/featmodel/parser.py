"""
Formula Parser for featmodel (text → Formula AST).

Syntax:
    - Variables: identifiers, e.g. Engine, gps_module, "Feature Name" (quoted)
    - Constants: true, false
    - NOT:        !A      or  not A
    - AND:        A & B   or  A and B
    - OR:         A | B   or  A or B
    - IMPLIES:    A => B
    - EQUIVALENT: A <=> B

Precedence (tightest first): NOT, AND, OR, IMPLIES, EQUIVALENT.
IMPLIES is right-associative; the others are left-associative.
"""

import re
from typing import List, Tuple

from featmodel.errors import FormulaParseError
from featmodel.expressions import (
    BinaryFormula,
    BinaryOperator,
    Constant,
    Formula,
    UnaryFormula,
    UnaryOperator,
    Variable,
)


_TOKEN_RE = re.compile(r'\s*(<=>|=>|\(|\)|!|&|\||"[^"]*"|[A-Za-z_][A-Za-z0-9_.\-]*)')

_KEYWORDS = {
    "and": "&",
    "or": "|",
    "not": "!",
}


def parse_formula(text: str) -> Formula:
    """
    Parse formula text into a Formula AST.

    Args:
        text: Formula in the syntax described in the module docstring

    Returns:
        Formula tree

    Raises:
        FormulaParseError: If the text is empty or malformed
    """
    if text is None or text.strip() == "":
        raise FormulaParseError(text or "", "empty formula")

    tokens = _tokenize(text)
    formula, pos = _parse_equivalence(text, tokens, 0)
    if pos < len(tokens):
        raise FormulaParseError(text, f"unexpected tokens after formula: {tokens[pos:]}")
    return formula


def _tokenize(text: str) -> List[str]:
    """Tokenize formula text; keywords are normalized to symbols."""
    tokens: List[str] = []
    pos = 0
    stripped_end = len(text.rstrip())
    while pos < stripped_end:
        match = _TOKEN_RE.match(text, pos)
        if match is None:
            raise FormulaParseError(text, f"unexpected character {text[pos:].lstrip()[:1]!r}")
        token = match.group(1)
        tokens.append(_KEYWORDS.get(token.lower(), token))
        pos = match.end()
    return tokens


def _parse_equivalence(text: str, tokens: List[str], pos: int) -> Tuple[Formula, int]:
    left, pos = _parse_implication(text, tokens, pos)
    while pos < len(tokens) and tokens[pos] == "<=>":
        right, pos = _parse_implication(text, tokens, pos + 1)
        left = BinaryFormula(BinaryOperator.EQUIVALENT, left, right)
    return left, pos


def _parse_implication(text: str, tokens: List[str], pos: int) -> Tuple[Formula, int]:
    left, pos = _parse_or(text, tokens, pos)
    if pos < len(tokens) and tokens[pos] == "=>":
        right, pos = _parse_implication(text, tokens, pos + 1)
        return BinaryFormula(BinaryOperator.IMPLIES, left, right), pos
    return left, pos


def _parse_or(text: str, tokens: List[str], pos: int) -> Tuple[Formula, int]:
    left, pos = _parse_and(text, tokens, pos)
    while pos < len(tokens) and tokens[pos] == "|":
        right, pos = _parse_and(text, tokens, pos + 1)
        left = BinaryFormula(BinaryOperator.OR, left, right)
    return left, pos


def _parse_and(text: str, tokens: List[str], pos: int) -> Tuple[Formula, int]:
    left, pos = _parse_unary(text, tokens, pos)
    while pos < len(tokens) and tokens[pos] == "&":
        right, pos = _parse_unary(text, tokens, pos + 1)
        left = BinaryFormula(BinaryOperator.AND, left, right)
    return left, pos


def _parse_unary(text: str, tokens: List[str], pos: int) -> Tuple[Formula, int]:
    if pos < len(tokens) and tokens[pos] == "!":
        operand, pos = _parse_unary(text, tokens, pos + 1)
        return UnaryFormula(UnaryOperator.NOT, operand), pos
    return _parse_primary(text, tokens, pos)


def _parse_primary(text: str, tokens: List[str], pos: int) -> Tuple[Formula, int]:
    """Parse a variable, constant, or parenthesized formula."""
    if pos >= len(tokens):
        raise FormulaParseError(text, "unexpected end of formula")

    token = tokens[pos]

    if token == "(":
        formula, pos = _parse_equivalence(text, tokens, pos + 1)
        if pos >= len(tokens) or tokens[pos] != ")":
            raise FormulaParseError(text, "missing closing parenthesis")
        return formula, pos + 1

    if token.startswith('"'):
        name = token[1:-1]
        if not name:
            raise FormulaParseError(text, "empty quoted variable name")
        return Variable(name), pos + 1

    lowered = token.lower()
    if lowered in ("true", "false"):
        return Constant(lowered == "true"), pos + 1

    if re.match(r"^[A-Za-z_]", token):
        return Variable(token), pos + 1

    raise FormulaParseError(text, f"unexpected token {token!r}")


__all__ = ["parse_formula"]

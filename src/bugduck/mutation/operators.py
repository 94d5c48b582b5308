"""
Operator tables and precedence rules shared by the mutation rules.

All tables are plain dicts so that membership doubles as the "does this rule
apply" predicate: a missing key means the operator is not a target.
"""

from enum import Enum
from typing import Dict, Optional


class OperatorClass(Enum):
    EQUALITY = "equality"
    ORDERING = "ordering"
    RELATIONAL_KEYWORD = "relational_keyword"
    LOGICAL = "logical"
    BITWISE = "bitwise"
    ARITHMETIC = "arithmetic"
    OTHER = "other"


_CLASSES: Dict[str, OperatorClass] = {
    "==": OperatorClass.EQUALITY,
    "!=": OperatorClass.EQUALITY,
    "===": OperatorClass.EQUALITY,
    "!==": OperatorClass.EQUALITY,
    "<": OperatorClass.ORDERING,
    "<=": OperatorClass.ORDERING,
    ">": OperatorClass.ORDERING,
    ">=": OperatorClass.ORDERING,
    "in": OperatorClass.RELATIONAL_KEYWORD,
    "instanceof": OperatorClass.RELATIONAL_KEYWORD,
    "&&": OperatorClass.LOGICAL,
    "||": OperatorClass.LOGICAL,
    "??": OperatorClass.LOGICAL,
    "&": OperatorClass.BITWISE,
    "|": OperatorClass.BITWISE,
    "^": OperatorClass.BITWISE,
    "<<": OperatorClass.BITWISE,
    ">>": OperatorClass.BITWISE,
    ">>>": OperatorClass.BITWISE,
    "+": OperatorClass.ARITHMETIC,
    "-": OperatorClass.ARITHMETIC,
    "*": OperatorClass.ARITHMETIC,
    "/": OperatorClass.ARITHMETIC,
    "%": OperatorClass.ARITHMETIC,
    "**": OperatorClass.ARITHMETIC,
}

# Binary operators whose result is always a boolean
BOOLEAN_CLASSES = frozenset({
    OperatorClass.EQUALITY,
    OperatorClass.ORDERING,
    OperatorClass.RELATIONAL_KEYWORD,
})

BOUNDARY_FLIP = {"<": "<=", "<=": "<", ">": ">=", ">=": ">"}

DIRECTION_FLIP = {"<": ">", ">": "<", "<=": ">=", ">=": "<="}

# Loose operators become strict; deliberately not an involution.
EQUALITY_FLIP = {"==": "!==", "!=": "===", "===": "!==", "!==": "==="}

ARITHMETIC_SWAP = {"+": "-", "-": "+", "*": "/", "/": "*", "%": "/"}

AND_OR_SWAP = {"&&": "||", "||": "&&"}

LOGICAL_BITWISE_SWAP = {"&&": "&", "&": "&&", "||": "|", "|": "||"}

# Binding power of JS binary operators, higher binds tighter.
PRECEDENCE: Dict[str, int] = {
    "??": 1,
    "||": 1,
    "&&": 2,
    "|": 3,
    "^": 4,
    "&": 5,
    "==": 6, "!=": 6, "===": 6, "!==": 6,
    "<": 7, "<=": 7, ">": 7, ">=": 7, "in": 7, "instanceof": 7,
    "<<": 8, ">>": 8, ">>>": 8,
    "+": 9, "-": 9,
    "*": 10, "/": 10, "%": 10,
    "**": 11,
}

HOMOGLYPHS: Dict[str, str] = {
    "a": "а",  # Cyrillic small a
    "c": "с",  # Cyrillic small es
    "e": "е",  # Cyrillic small ie
    "o": "о",  # Cyrillic small o
    "p": "р",  # Cyrillic small er
    "x": "х",  # Cyrillic small ha
    "y": "у",  # Cyrillic small u
}
HOMOGLYPHS.update({v: k for k, v in list(HOMOGLYPHS.items())})


def classify(operator: str) -> OperatorClass:
    return _CLASSES.get(operator, OperatorClass.OTHER)


def flip_boundary(operator: str) -> Optional[str]:
    return BOUNDARY_FLIP.get(operator)


def flip_direction(operator: str) -> Optional[str]:
    return DIRECTION_FLIP.get(operator)


def flip_equality(operator: str) -> Optional[str]:
    return EQUALITY_FLIP.get(operator)


def swap_arithmetic(operator: str) -> Optional[str]:
    return ARITHMETIC_SWAP.get(operator)


def swap_and_or(operator: str) -> Optional[str]:
    return AND_OR_SWAP.get(operator)


def swap_logical_bitwise(operator: str) -> Optional[str]:
    return LOGICAL_BITWISE_SWAP.get(operator)


def homoglyph_for(char: str) -> Optional[str]:
    return HOMOGLYPHS.get(char)


def _mixes_nullish(a: str, b: str) -> bool:
    """`??` cannot share an unparenthesized chain with `&&` or `||`."""
    pair = {a, b}
    return "??" in pair and bool(pair & {"&&", "||"})


def operand_needs_parens(operand_op: Optional[str], new_op: str, is_right: bool) -> bool:
    """
    Whether an operand that is itself a binary expression using
    ``operand_op`` must be parenthesized once its parent uses ``new_op``.

    ``**`` is right-associative; every other binary operator is
    left-associative.
    """
    if operand_op is None:
        return False
    if _mixes_nullish(operand_op, new_op):
        return True
    inner = PRECEDENCE.get(operand_op, 0)
    outer = PRECEDENCE.get(new_op, 0)
    if inner != outer:
        return inner < outer
    if new_op == "**":
        return not is_right
    return is_right

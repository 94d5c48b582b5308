"""
The mutation rule catalog.

Every rule scans the tree in pre-order and mutates the first node matching
its pattern. A rule returns True after exactly one mutation and False
without touching the tree when nothing matches; "no target" is never an
exception.
"""

import re
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from tree_sitter import Node

from bugduck.logging_config import logger
from .kinds import BugKind
from . import operators as ops
from .scope import FUNCTION_TYPES, shadowable_names
from .tree import Edit, SourceTree, named_children, node_key, unwrap_parens

RuleFn = Callable[[SourceTree], bool]
OperatorSwap = Callable[[str], Optional[str]]

LOOP_TYPES = ("for_statement", "while_statement", "do_statement")

INDEX_METHODS = frozenset({"at", "charAt", "slice", "substring", "substr"})

# Expressions that must be grouped before a prefix `!` can apply to them
_NEEDS_GROUP_FOR_NEGATION = frozenset({
    "binary_expression",
    "ternary_expression",
    "sequence_expression",
    "assignment_expression",
    "augmented_assignment_expression",
})

_BOOLEAN_LITERALS = ("true", "false")

# Operator characters that merge with an adjacent one into a different token
_FUSING = frozenset("+-*/")

_OCTAL_LEGACY = re.compile(r"0[0-7]+")
_DECIMAL_LEGACY = re.compile(r"0[0-9]+")


@dataclass(frozen=True)
class MutationRule:
    """One catalog entry: a bug kind, its transform and its sampling weight."""
    kind: BugKind
    apply: RuleFn
    weight: int = 1
    description: str = ""


# --- HELPERS ---

def binary_operator(tree: SourceTree, node: Node) -> Optional[str]:
    if node.type != "binary_expression":
        return None
    operator = node.child_by_field_name("operator")
    if operator is None:
        return None
    return tree.text_of(operator)


def _is_field(parent: Optional[Node], field: str, node: Node) -> bool:
    if parent is None:
        return False
    child = parent.child_by_field_name(field)
    return child is not None and node_key(child) == node_key(node)


def _wrap(node: Node) -> List[Edit]:
    return [(node.start_byte, node.start_byte, "("), (node.end_byte, node.end_byte, ")")]


def _padded_operator(tree: SourceTree, operator: Node, new_op: str) -> str:
    """Space out ``new_op`` where it would fuse with a neighbouring character."""
    source = tree.source_bytes
    before = chr(source[operator.start_byte - 1]) if operator.start_byte > 0 else " "
    after = chr(source[operator.end_byte]) if operator.end_byte < len(source) else " "
    # x+-1 -> x- -1, a*/re/ -> a/ /re/
    if before in _FUSING and new_op[0] in _FUSING:
        new_op = " " + new_op
    if after in _FUSING and new_op[-1] in _FUSING:
        new_op = new_op + " "
    return new_op


def rewrite_binary_operator(tree: SourceTree, node: Node, new_op: str) -> bool:
    """
    Change a binary expression's operator, keeping the original grouping.

    Parentheses are added around operands that would otherwise re-associate
    under the new operator's precedence, and around the expression itself
    when its parent would bind tighter.

    Returns:
        False, with the tree left unchanged, if the result does not reparse
        cleanly.
    """
    operator = node.child_by_field_name("operator")
    left = node.child_by_field_name("left")
    right = node.child_by_field_name("right")

    edits: List[Edit] = [(operator.start_byte, operator.end_byte, _padded_operator(tree, operator, new_op))]
    if left is not None and ops.operand_needs_parens(binary_operator(tree, left), new_op, is_right=False):
        edits.extend(_wrap(left))
    if right is not None and ops.operand_needs_parens(binary_operator(tree, right), new_op, is_right=True):
        edits.extend(_wrap(right))

    parent = node.parent
    parent_op = binary_operator(tree, parent) if parent is not None else None
    if parent_op is not None:
        is_right = _is_field(parent, "right", node)
        if ops.operand_needs_parens(new_op, parent_op, is_right=is_right):
            edits.extend(_wrap(node))

    checkpoint = tree.checkpoint()
    tree.splice(edits)
    if tree.error_nodes():
        tree.rollback(checkpoint)
        logger.debug(f"Rewrite to '{new_op}' did not reparse, reverted")
        return False
    return True


def _line(node: Node) -> int:
    return node.start_point[0] + 1


def _first_binary(tree: SourceTree, swap: OperatorSwap) -> Optional[Node]:
    for node in tree.find_all("binary_expression"):
        op = binary_operator(tree, node)
        if op is not None and swap(op) is not None:
            return node
    return None


def _swap_first_operator(tree: SourceTree, swap: OperatorSwap, kind: BugKind) -> bool:
    node = _first_binary(tree, swap)
    if node is None:
        return False
    old = binary_operator(tree, node)
    new = swap(old)
    line = _line(node)
    if not rewrite_binary_operator(tree, node, new):
        return False
    logger.debug(f"{kind}: '{old}' -> '{new}' at line {line}")
    return True


def _is_negated(node: Node) -> bool:
    """True when the node is, through any parentheses, the operand of `!`."""
    parent = node.parent
    while parent is not None and parent.type == "parenthesized_expression":
        parent = parent.parent
    if parent is None or parent.type != "unary_expression":
        return False
    operator = parent.child_by_field_name("operator")
    return operator is not None and operator.type == "!"


def _is_negation_target(tree: SourceTree, node: Node) -> bool:
    if node.type in _BOOLEAN_LITERALS:
        # `true` in a type position is a literal type, not a value
        return node.parent is None or node.parent.type != "literal_type"
    op = binary_operator(tree, node)
    if op is None:
        return False
    cls = ops.classify(op)
    return cls in ops.BOOLEAN_CLASSES or cls is ops.OperatorClass.LOGICAL


def _negation_needs_outer_group(tree: SourceTree, node: Node) -> bool:
    """`!x` as a member/call target or as the base of `**` must be grouped."""
    parent = node.parent
    if parent is None:
        return False
    if parent.type in ("member_expression", "subscript_expression"):
        return _is_field(parent, "object", node)
    if parent.type in ("call_expression", "new_expression"):
        return _is_field(parent, "function", node) or _is_field(parent, "constructor", node)
    if binary_operator(tree, parent) == "**":
        return _is_field(parent, "left", node)
    return False


def bump_numeric_literal(text: str) -> Optional[str]:
    """
    Return the decimal spelling of ``text + 1``, or None for literals that
    are not plain JS numbers (BigInt, malformed).
    """
    raw = text.replace("_", "")
    if not raw or raw.endswith("n"):
        return None
    try:
        if _OCTAL_LEGACY.fullmatch(raw):
            return str(int(raw, 8) + 1)
        if _DECIMAL_LEGACY.fullmatch(raw):
            return str(int(raw, 10) + 1)
        if raw[:2].lower() in ("0x", "0o", "0b"):
            return str(int(raw, 0) + 1)
        if any(c in raw for c in ".eE"):
            value = float(raw) + 1
            if value.is_integer() and abs(value) < 1e21:
                return str(int(value))
            return repr(value)
        return str(int(raw) + 1)
    except ValueError:
        return None


def _call_method_name(tree: SourceTree, call: Node) -> Optional[str]:
    callee = call.child_by_field_name("function")
    if callee is None or callee.type != "member_expression":
        return None
    prop = callee.child_by_field_name("property")
    if prop is None or prop.type != "property_identifier":
        return None
    return tree.text_of(prop)


def _loop_condition(node: Node) -> Optional[Node]:
    condition = node.child_by_field_name("condition")
    if condition is not None and condition.type == "expression_statement":
        inner = named_children(condition)
        condition = inner[0] if inner else None
    return unwrap_parens(condition)


def _directive_prologue(body: Node) -> List[Node]:
    """Leading string-literal statements of a function body ('use strict')."""
    directives = []
    for statement in named_children(body):
        inner = named_children(statement) if statement.type == "expression_statement" else []
        if len(inner) != 1 or inner[0].type != "string":
            break
        directives.append(statement)
    return directives


def _shadow_insertion(tree: SourceTree, body: Node, declaration: str) -> Tuple[int, str]:
    """
    Where and what to insert so a declaration opens ``body``.

    The declaration goes after any directive prologue and on the same line
    as the brace or the last directive, so later line numbers do not move.
    """
    directives = _directive_prologue(body)
    if not directives:
        return body.start_byte + 1, f" {declaration}"
    last = directives[-1]
    if tree.text_of(last).endswith(";"):
        return last.end_byte, f" {declaration}"
    return last.end_byte, f"; {declaration}"


def _is_declared_name(node: Node) -> bool:
    parent = node.parent
    if parent is None:
        return False
    if parent.type in ("variable_declarator", "function_declaration", "generator_function_declaration"):
        return _is_field(parent, "name", node)
    return False


# --- RULES ---

def apply_boolean_negation(tree: SourceTree) -> bool:
    for node in tree.walk():
        if not _is_negation_target(tree, node) or _is_negated(node):
            continue

        text = tree.text_of(node)
        negated = f"!({text})" if node.type in _NEEDS_GROUP_FOR_NEGATION else f"!{text}"
        if _negation_needs_outer_group(tree, node):
            negated = f"({negated})"
        line = _line(node)
        tree.replace(node, negated)
        logger.debug(f"booleanNegation: negated '{text}' at line {line}")
        return True
    return False


def apply_off_by_one(tree: SourceTree) -> bool:
    for loop in tree.find_all(*LOOP_TYPES):
        test = _loop_condition(loop)
        if test is None:
            continue
        old = binary_operator(tree, test)
        new = ops.flip_boundary(old) if old else None
        if new is None:
            continue
        line = _line(test)
        if not rewrite_binary_operator(tree, test, new):
            return False
        logger.debug(f"offByOne: {loop.type} test '{old}' -> '{new}' at line {line}")
        return True
    return False


def apply_logical_and_or_swap(tree: SourceTree) -> bool:
    return _swap_first_operator(tree, ops.swap_and_or, BugKind.LOGICAL_AND_OR_SWAP)


def apply_comparison_direction_flip(tree: SourceTree) -> bool:
    return _swap_first_operator(tree, ops.flip_direction, BugKind.COMPARISON_DIRECTION_FLIP)


def apply_equality_inequality_flip(tree: SourceTree) -> bool:
    return _swap_first_operator(tree, ops.flip_equality, BugKind.EQUALITY_INEQUALITY_FLIP)


def apply_invert_ternary_branches(tree: SourceTree) -> bool:
    for node in tree.find_all("ternary_expression"):
        consequence = node.child_by_field_name("consequence")
        alternative = node.child_by_field_name("alternative")
        if consequence is None or alternative is None:
            continue
        if tree.text_of(consequence) == tree.text_of(alternative):
            continue
        line = _line(node)
        tree.splice([
            (consequence.start_byte, consequence.end_byte, tree.text_of(alternative)),
            (alternative.start_byte, alternative.end_byte, tree.text_of(consequence)),
        ])
        logger.debug(f"invertTernaryBranches: swapped branches at line {line}")
        return True
    return False


def apply_wrong_arithmetic_operator(tree: SourceTree) -> bool:
    return _swap_first_operator(tree, ops.swap_arithmetic, BugKind.WRONG_ARITHMETIC_OPERATOR)


def apply_bitwise_logical_swap(tree: SourceTree) -> bool:
    return _swap_first_operator(tree, ops.swap_logical_bitwise, BugKind.BITWISE_LOGICAL_SWAP)


def apply_index_off_by_one(tree: SourceTree) -> bool:
    for node in tree.find_all("subscript_expression", "call_expression"):
        if node.type == "subscript_expression":
            index = node.child_by_field_name("index")
            candidates = [index] if index is not None else []
        else:
            if _call_method_name(tree, node) not in INDEX_METHODS:
                continue
            arguments = node.child_by_field_name("arguments")
            candidates = named_children(arguments) if arguments is not None else []

        for literal in candidates:
            if literal.type != "number":
                continue
            old = tree.text_of(literal)
            new = bump_numeric_literal(old)
            if new is None:
                continue
            line = _line(literal)
            tree.replace(literal, new)
            logger.debug(f"indexOffByOne: {old} -> {new} at line {line}")
            return True
    return False


def apply_general_boundary_off_by_one(tree: SourceTree) -> bool:
    return _swap_first_operator(tree, ops.flip_boundary, BugKind.GENERAL_BOUNDARY_OFF_BY_ONE)


def apply_homoglyph_sabotage(tree: SourceTree) -> bool:
    # Only the declaration is renamed; every reference keeps the old spelling.
    for node in tree.find_all("identifier"):
        if not _is_declared_name(node):
            continue
        name = tree.text_of(node)
        for i, char in enumerate(name):
            swap = ops.homoglyph_for(char)
            if swap is None:
                continue
            line = _line(node)
            tree.replace(node, name[:i] + swap + name[i + 1:])
            logger.debug(f"homoglyphSabotage: '{name}' char {i} swapped at line {line}")
            return True
    return False


def apply_scope_gaslighting(tree: SourceTree) -> bool:
    for node in tree.find_all(*FUNCTION_TYPES):
        body = node.child_by_field_name("body")
        if body is None or body.type != "statement_block":
            continue
        victims = shadowable_names(tree, node)
        if not victims:
            continue
        victim = victims[0]
        offset, text = _shadow_insertion(tree, body, f"let {victim} = null;")
        line = _line(body)
        tree.insert(offset, text)
        logger.debug(f"scopeGaslighting: shadowed '{victim}' at line {line}")
        return True
    return False


# --- CATALOG ---

DEFAULT_WEIGHTS: Dict[BugKind, int] = {
    BugKind.HOMOGLYPH_SABOTAGE: 5,
    BugKind.SCOPE_GASLIGHTING: 5,
    BugKind.BOOLEAN_NEGATION: 1,
    BugKind.OFF_BY_ONE: 1,
    BugKind.LOGICAL_AND_OR_SWAP: 1,
    BugKind.COMPARISON_DIRECTION_FLIP: 1,
    BugKind.EQUALITY_INEQUALITY_FLIP: 1,
    BugKind.INVERT_TERNARY_BRANCHES: 1,
    BugKind.WRONG_ARITHMETIC_OPERATOR: 1,
    BugKind.BITWISE_LOGICAL_SWAP: 1,
    BugKind.INDEX_OFF_BY_ONE: 1,
    BugKind.GENERAL_BOUNDARY_OFF_BY_ONE: 1,
}

RULES: Dict[BugKind, RuleFn] = {
    BugKind.BOOLEAN_NEGATION: apply_boolean_negation,
    BugKind.OFF_BY_ONE: apply_off_by_one,
    BugKind.LOGICAL_AND_OR_SWAP: apply_logical_and_or_swap,
    BugKind.COMPARISON_DIRECTION_FLIP: apply_comparison_direction_flip,
    BugKind.EQUALITY_INEQUALITY_FLIP: apply_equality_inequality_flip,
    BugKind.INVERT_TERNARY_BRANCHES: apply_invert_ternary_branches,
    BugKind.WRONG_ARITHMETIC_OPERATOR: apply_wrong_arithmetic_operator,
    BugKind.BITWISE_LOGICAL_SWAP: apply_bitwise_logical_swap,
    BugKind.INDEX_OFF_BY_ONE: apply_index_off_by_one,
    BugKind.GENERAL_BOUNDARY_OFF_BY_ONE: apply_general_boundary_off_by_one,
    BugKind.HOMOGLYPH_SABOTAGE: apply_homoglyph_sabotage,
    BugKind.SCOPE_GASLIGHTING: apply_scope_gaslighting,
}

DESCRIPTIONS: Dict[BugKind, str] = {
    BugKind.BOOLEAN_NEGATION: "Negate a boolean literal or comparison/logical expression",
    BugKind.OFF_BY_ONE: "Flip boundary inclusion in a loop test (< <-> <=)",
    BugKind.LOGICAL_AND_OR_SWAP: "Swap && and ||",
    BugKind.COMPARISON_DIRECTION_FLIP: "Reverse an ordering comparison (< <-> >)",
    BugKind.EQUALITY_INEQUALITY_FLIP: "Invert equality, loose becomes strict",
    BugKind.INVERT_TERNARY_BRANCHES: "Swap the branches of a conditional expression",
    BugKind.WRONG_ARITHMETIC_OPERATOR: "Swap + -, * /, and turn % into /",
    BugKind.BITWISE_LOGICAL_SWAP: "Trade && / || for & / | and back",
    BugKind.INDEX_OFF_BY_ONE: "Increment a literal index or index-method argument",
    BugKind.GENERAL_BOUNDARY_OFF_BY_ONE: "Flip boundary inclusion in any comparison",
    BugKind.HOMOGLYPH_SABOTAGE: "Swap one letter of a declared name for a look-alike",
    BugKind.SCOPE_GASLIGHTING: "Shadow an outer variable with null inside a function",
}


def build_catalog(weights: Optional[Dict[str, int]] = None) -> List[MutationRule]:
    """
    Build the catalog, optionally overriding per-kind weights.

    Override keys are BugKind values (``"offByOne"``); unknown keys and
    non-positive weights are ignored with a warning.
    """
    effective = dict(DEFAULT_WEIGHTS)
    if weights and not isinstance(weights, dict):
        logger.warning(f"Ignoring weight overrides of type {type(weights).__name__}")
        weights = None
    for key, value in (weights or {}).items():
        try:
            kind = BugKind(key)
        except ValueError:
            logger.warning(f"Ignoring weight for unknown bug kind '{key}'")
            continue
        if not isinstance(value, int) or value < 1:
            logger.warning(f"Ignoring non-positive weight {value!r} for '{key}'")
            continue
        effective[kind] = value

    return [
        MutationRule(kind=kind, apply=RULES[kind], weight=effective[kind], description=DESCRIPTIONS[kind])
        for kind in BugKind
    ]

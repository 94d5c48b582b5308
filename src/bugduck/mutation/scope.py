"""
Lexical binding analysis over tree-sitter JS/TS trees.

This is deliberately an approximation of ECMAScript scoping, tuned for one
question: which names does a function read from an enclosing scope without
declaring them itself? It models function scopes (params, hoisted ``var``),
block scopes (``let``/``const``/``class``/``function``), ``for`` heads,
``catch`` params and module imports. Globals that are never declared in the
file (``console``, ``window``) are not bindings.
"""

from typing import Dict, Iterator, List, Optional, Set, Tuple

from tree_sitter import Node

from .tree import SourceTree, named_children, node_key

# Functions eligible for shadow injection
FUNCTION_TYPES = frozenset({
    "function_declaration",
    "generator_function_declaration",
    "function_expression",
    "function",
    "generator_function",
    "arrow_function",
})

# Anything that opens a function scope, including methods
FUNCTION_SCOPE_TYPES = FUNCTION_TYPES | {"method_definition"}

BLOCK_SCOPE_TYPES = frozenset({
    "statement_block",
    "class_static_block",
    "switch_case",
    "switch_default",
})

REFERENCE_TYPES = frozenset({"identifier", "shorthand_property_identifier"})

_NAMED_DECLARATIONS = frozenset({
    "function_declaration",
    "generator_function_declaration",
    "class_declaration",
    "abstract_class_declaration",
    "enum_declaration",
})


def pattern_identifiers(node: Optional[Node]) -> List[Node]:
    """Identifier nodes bound by a binding pattern or parameter list."""
    if node is None:
        return []
    kind = node.type
    if kind in ("identifier", "shorthand_property_identifier_pattern"):
        return [node]
    if kind in ("object_pattern", "array_pattern", "formal_parameters", "rest_pattern"):
        found = []
        for child in named_children(node):
            found.extend(pattern_identifiers(child))
        return found
    if kind == "pair_pattern":
        return pattern_identifiers(node.child_by_field_name("value"))
    if kind in ("assignment_pattern", "object_assignment_pattern"):
        return pattern_identifiers(node.child_by_field_name("left"))
    if kind in ("required_parameter", "optional_parameter"):
        return pattern_identifiers(node.child_by_field_name("pattern"))
    return []


def _declarator_identifiers(declaration: Node) -> List[Node]:
    found = []
    for child in named_children(declaration):
        if child.type == "variable_declarator":
            found.extend(pattern_identifiers(child.child_by_field_name("name")))
    return found


def _import_identifiers(statement: Node) -> List[Node]:
    found = []
    for clause in named_children(statement):
        if clause.type != "import_clause":
            continue
        for part in named_children(clause):
            if part.type == "identifier":
                found.append(part)
            elif part.type == "namespace_import":
                found.extend(c for c in named_children(part) if c.type == "identifier")
            elif part.type == "named_imports":
                for spec in named_children(part):
                    if spec.type != "import_specifier":
                        continue
                    local = spec.child_by_field_name("alias") or spec.child_by_field_name("name")
                    if local is not None and local.type == "identifier":
                        found.append(local)
    return found


def _statement_identifiers(statement: Node) -> List[Node]:
    """Names a statement declares in the block that directly contains it."""
    kind = statement.type
    if kind in ("lexical_declaration", "variable_declaration"):
        return _declarator_identifiers(statement)
    if kind in _NAMED_DECLARATIONS:
        name = statement.child_by_field_name("name")
        return [name] if name is not None else []
    if kind == "export_statement":
        declaration = statement.child_by_field_name("declaration")
        return _statement_identifiers(declaration) if declaration is not None else []
    if kind == "import_statement":
        return _import_identifiers(statement)
    return []


def _walk_function_local(node: Node) -> Iterator[Node]:
    """Pre-order walk that does not descend into nested function scopes."""
    stack = list(reversed(node.children))
    while stack:
        current = stack.pop()
        yield current
        if current.type in FUNCTION_SCOPE_TYPES:
            continue
        stack.extend(reversed(current.children))


def _hoisted_var_identifiers(body: Node) -> List[Node]:
    found = []
    for node in _walk_function_local(body):
        if node.type == "variable_declaration":
            found.extend(_declarator_identifiers(node))
        elif node.type == "for_in_statement":
            kind = node.child_by_field_name("kind")
            if kind is not None and kind.type == "var":
                found.extend(pattern_identifiers(node.child_by_field_name("left")))
    return found


def _block_identifiers(block: Node) -> List[Node]:
    found = []
    for statement in named_children(block):
        found.extend(_statement_identifiers(statement))
    return found


def scope_binding_identifiers(scope: Node) -> List[Node]:
    """
    Identifier nodes whose binding lives in ``scope``.

    Returns an empty list for nodes that do not open a scope.
    """
    kind = scope.type
    if kind == "program":
        return _block_identifiers(scope) + _hoisted_var_identifiers(scope)

    if kind in FUNCTION_SCOPE_TYPES:
        found: List[Node] = []
        if kind in ("function_expression", "function", "generator_function"):
            name = scope.child_by_field_name("name")
            if name is not None:
                found.append(name)
        found.extend(pattern_identifiers(scope.child_by_field_name("parameters")))
        found.extend(pattern_identifiers(scope.child_by_field_name("parameter")))
        body = scope.child_by_field_name("body")
        if body is not None and body.type == "statement_block":
            found.extend(_block_identifiers(body))
            found.extend(_hoisted_var_identifiers(body))
        return found

    if kind in BLOCK_SCOPE_TYPES:
        return _block_identifiers(scope)

    if kind == "for_statement":
        initializer = scope.child_by_field_name("initializer")
        if initializer is not None and initializer.type == "lexical_declaration":
            return _declarator_identifiers(initializer)
        return []

    if kind == "for_in_statement":
        declared = scope.child_by_field_name("kind")
        if declared is not None and declared.type in ("let", "const"):
            return pattern_identifiers(scope.child_by_field_name("left"))
        return []

    if kind == "catch_clause":
        return pattern_identifiers(scope.child_by_field_name("parameter"))

    return []


def scope_bindings(tree: SourceTree, scope: Node) -> Set[str]:
    return {tree.text_of(n) for n in scope_binding_identifiers(scope)}


def enclosing_bindings(tree: SourceTree, function: Node) -> Set[str]:
    """Every name bound by a scope that lexically encloses ``function``."""
    names: Set[str] = set()
    ancestor = function.parent
    while ancestor is not None:
        names |= scope_bindings(tree, ancestor)
        ancestor = ancestor.parent
    return names


def _binding_keys(node: Node) -> Set[Tuple[int, int, str]]:
    """Keys of every identifier in a declaring position inside ``node``."""
    keys = set()
    stack = [node]
    while stack:
        current = stack.pop()
        for ident in scope_binding_identifiers(current):
            keys.add(node_key(ident))
        if current.type in _NAMED_DECLARATIONS:
            name = current.child_by_field_name("name")
            if name is not None:
                keys.add(node_key(name))
        stack.extend(current.children)
    return keys


def referenced_names(tree: SourceTree, function: Node) -> List[str]:
    """
    Names read or written inside a function body, in first-use order.

    Parameter default values are not part of the body and are skipped.
    """
    body = function.child_by_field_name("body")
    if body is None:
        return []

    declaring = _binding_keys(function)
    seen: Dict[str, None] = {}
    for node in tree.walk(body):
        if node.type in REFERENCE_TYPES and node_key(node) not in declaring:
            seen.setdefault(tree.text_of(node), None)
    return list(seen)


def shadowable_names(tree: SourceTree, function: Node) -> List[str]:
    """
    Names the function uses from an enclosing scope without rebinding them.

    Ordered by first use inside the body.
    """
    outer = enclosing_bindings(tree, function)
    if not outer:
        return []
    own = scope_bindings(tree, function)
    return [name for name in referenced_names(tree, function) if name in outer and name not in own]

"""
SourceTree: a mutable syntax tree over a single source buffer.

tree-sitter trees are immutable, so a mutation is expressed as one or more
byte-range splices of the source followed by a reparse. Everything outside
the spliced ranges (formatting, comments, line breaks) is kept byte for byte.
"""

from typing import Iterable, Iterator, List, Optional, Tuple

from tree_sitter import Node

from bugduck.exceptions import ParseFailure
from bugduck.logging_config import logger
from .languages import DEFAULT_LANGUAGE, get_parser

# (start_byte, end_byte, replacement text)
Edit = Tuple[int, int, str]


def named_children(node: Node) -> List[Node]:
    """Named children without comments, which tree-sitter attaches anywhere."""
    return [child for child in node.named_children if child.type != "comment"]


def unwrap_parens(node: Optional[Node]) -> Optional[Node]:
    """Strip any number of parenthesized_expression wrappers."""
    while node is not None and node.type == "parenthesized_expression":
        inner = named_children(node)
        if not inner:
            return None
        node = inner[0]
    return node


def node_key(node: Node) -> Tuple[int, int, str]:
    """Stable identity for a node within one parse."""
    return (node.start_byte, node.end_byte, node.type)


class SourceTree:
    """
    Source text plus its current parse.

    Node objects handed out by ``walk`` or ``root`` are only valid until the
    next ``splice``.
    """

    def __init__(self, source: str, language: str = DEFAULT_LANGUAGE, file_path: Optional[str] = None):
        self.language = language
        self.file_path = file_path
        self._parser = get_parser(language)
        self._source = source.encode("utf-8")
        self._tree = self._parser.parse(self._source)
        self.edit_count = 0

    @classmethod
    def parse(cls, source: str, language: str = DEFAULT_LANGUAGE, file_path: Optional[str] = None) -> "SourceTree":
        """
        Parse ``source`` and refuse anything tree-sitter had to recover from.

        Raises:
            ParseFailure: On the first ERROR or missing node.
        """
        tree = cls(source, language, file_path)
        errors = tree.error_nodes()
        if errors:
            first = errors[0]
            line = first.start_point[0] + 1
            col = first.start_point[1] + 1
            kind = "missing token" if first.is_missing else "syntax error"
            raise ParseFailure(file_path, f"{kind} at line {line}, column {col}", line, col)
        return tree

    @property
    def root(self) -> Node:
        return self._tree.root_node

    @property
    def text(self) -> str:
        return self._source.decode("utf-8")

    @property
    def source_bytes(self) -> bytes:
        return self._source

    def text_of(self, node: Node) -> str:
        return self._source[node.start_byte:node.end_byte].decode("utf-8")

    def walk(self, node: Optional[Node] = None) -> Iterator[Node]:
        """
        Pre-order traversal in source order.

        Iterative so that deeply nested expressions cannot hit the recursion
        limit.
        """
        stack = [node or self.root]
        while stack:
            current = stack.pop()
            yield current
            stack.extend(reversed(current.children))

    def find_all(self, *types: str, node: Optional[Node] = None) -> Iterator[Node]:
        wanted = set(types)
        for current in self.walk(node):
            if current.type in wanted:
                yield current

    def error_nodes(self) -> List[Node]:
        """All ERROR and missing nodes, in source order."""
        if not self.root.has_error:
            return []
        return [n for n in self.walk() if n.type == "ERROR" or n.is_missing]

    def splice(self, edits: Iterable[Edit]) -> None:
        """
        Apply non-overlapping byte-range replacements and reparse once.

        Raises:
            ValueError: If two edits overlap.
        """
        # Zero-width inserts sort after a replacement sharing their start
        ordered = sorted(edits, key=lambda e: (e[0], e[1]), reverse=True)
        previous_start = None
        source = self._source
        for start, end, replacement in ordered:
            if previous_start is not None and end > previous_start:
                raise ValueError(f"Overlapping edits at bytes {start}-{end}")
            source = source[:start] + replacement.encode("utf-8") + source[end:]
            previous_start = start

        self._source = source
        self._tree = self._parser.parse(self._source)
        self.edit_count += 1
        logger.debug(f"Applied {len(ordered)} splice(s), tree now {len(self._source)} bytes")

    def checkpoint(self) -> Tuple[bytes, int]:
        return self._source, self.edit_count

    def rollback(self, checkpoint: Tuple[bytes, int]) -> None:
        """Return to a state captured by ``checkpoint``."""
        self._source, self.edit_count = checkpoint
        self._tree = self._parser.parse(self._source)
        logger.debug("Rolled back to checkpoint")

    def replace(self, node: Node, replacement: str) -> None:
        self.splice([(node.start_byte, node.end_byte, replacement)])

    def insert(self, offset: int, text: str) -> None:
        self.splice([(offset, offset, text)])

"""
Turns a mutated SourceTree back into text that matches the original's
line-ending convention and trailing-newline state.
"""

from bugduck.exceptions import PrinterError
from bugduck.logging_config import logger
from .tree import SourceTree


def detect_line_ending(content: str) -> str:
    """'\\r\\n' if the content uses CRLF anywhere, else '\\n'."""
    if '\r\n' in content:
        return '\r\n'
    return '\n'


def normalize_line_endings(content: str, line_ending: str) -> str:
    # First convert all to LF
    content = content.replace('\r\n', '\n')
    if line_ending == '\r\n':
        content = content.replace('\n', '\r\n')
    return content


def preserve_trailing_newline(original: str, content: str) -> str:
    """Make ``content`` end with a line break exactly when ``original`` does."""
    wants_newline = original.endswith('\n')
    has_newline = content.endswith('\n')
    if wants_newline and not has_newline:
        return content + detect_line_ending(original)
    if has_newline and not wants_newline:
        return content[:-2] if content.endswith('\r\n') else content[:-1]
    return content


def render(tree: SourceTree, original: str) -> str:
    """
    Produce the final text for a mutated tree.

    Raises:
        PrinterError: If the regenerated text no longer parses cleanly.
    """
    errors = tree.error_nodes()
    if errors:
        first = errors[0]
        raise PrinterError(
            f"Mutated source no longer parses near line {first.start_point[0] + 1}"
        )

    content = normalize_line_endings(tree.text, detect_line_ending(original))
    content = preserve_trailing_newline(original, content)
    logger.debug(f"Rendered {len(content)} chars after {tree.edit_count} edit(s)")
    return content

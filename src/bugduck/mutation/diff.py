"""
Bounding-box line diff between two buffers.

Only one structural mutation separates the buffers being compared, so a
common-prefix / common-suffix scan is enough to find the changed lines; no
edit script is computed.
"""

from typing import Optional

from bugduck.schemas import DiffRange


def _common_prefix(before: str, after: str) -> int:
    limit = min(len(before), len(after))
    i = 0
    while i < limit and before[i] == after[i]:
        i += 1
    return i


def _common_suffix(before: str, after: str, prefix: int) -> int:
    # The suffix may not reach back into the prefix on either side
    limit = min(len(before), len(after)) - prefix
    i = 0
    while i < limit and before[-1 - i] == after[-1 - i]:
        i += 1
    return i


def _line_at(text: str, offset: int) -> int:
    """1-indexed line containing ``offset``."""
    return text.count("\n", 0, offset) + 1


def slice_lines(text: str, start_line: int, end_line: int) -> str:
    """The inclusive, 1-indexed line range of ``text`` joined with '\\n'."""
    return "\n".join(text.split("\n")[start_line - 1:end_line])


def compute_diff_range(before: str, after: str) -> Optional[DiffRange]:
    """
    Find the line span that differs between ``before`` and ``after``.

    Returns:
        None when the buffers are identical, otherwise a DiffRange whose
        snippets are exactly the ``[start_line, end_line]`` slices of each
        buffer.
    """
    if before == after:
        return None

    prefix = _common_prefix(before, after)
    suffix = _common_suffix(before, after, prefix)

    start_line = _line_at(before, prefix)
    before_end = max(len(before) - suffix, prefix)
    after_end = max(len(after) - suffix, prefix)
    end_line = max(_line_at(before, before_end), _line_at(after, after_end))

    return DiffRange(
        start_line=start_line,
        end_line=end_line,
        before_snippet=slice_lines(before, start_line, end_line),
        after_snippet=slice_lines(after, start_line, end_line),
    )

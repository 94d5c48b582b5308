"""
bugduck - Plausible bug injection for JavaScript and TypeScript sources.

Parses a file with tree-sitter, applies a weighted random selection of
small syntax-preserving mutations, and reports what changed.
"""

__version__ = "0.4.0"

from bugduck.mutation import (
    BugKind,
    InjectionResult,
    MutationOrchestrator,
    SourceTree,
    compute_diff_range,
    inject_bugs,
)
from bugduck.schemas import DiffRange, HistoryEntry

__all__ = [
    "__version__",
    "BugKind",
    "InjectionResult",
    "MutationOrchestrator",
    "SourceTree",
    "compute_diff_range",
    "inject_bugs",
    "DiffRange",
    "HistoryEntry",
]

"""
Bug injection over tree-sitter syntax trees.

Public API:
- inject_bugs: parse, mutate, render and diff one buffer
- MutationOrchestrator: weighted selection of rules over a SourceTree
- build_catalog: the rule catalog with optional weight overrides
- compute_diff_range: bounding-box line diff of two buffers
- CodeEditor: backup-first atomic file writes
"""

from .kinds import BugKind
from .tree import SourceTree
from .rules import MutationRule, build_catalog, DEFAULT_WEIGHTS
from .orchestrator import MutationOrchestrator
from .printer import render
from .diff import compute_diff_range
from .languages import detect_language, is_supported_file
from .injector import inject_bugs
from .editor import CodeEditor
from bugduck.schemas import InjectionResult

__all__ = [
    "BugKind",
    "SourceTree",
    "MutationRule",
    "build_catalog",
    "DEFAULT_WEIGHTS",
    "MutationOrchestrator",
    "render",
    "compute_diff_range",
    "detect_language",
    "is_supported_file",
    "inject_bugs",
    "CodeEditor",
    "InjectionResult",
]

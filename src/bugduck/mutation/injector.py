"""
inject_bugs: the parse -> orchestrate -> render -> diff pipeline.
"""

import random
from typing import Dict, Optional

from bugduck.logging_config import logger
from bugduck.schemas import InjectionResult
from .diff import compute_diff_range
from .languages import detect_language
from .orchestrator import MutationOrchestrator
from .printer import render
from .rules import build_catalog
from .tree import SourceTree


def inject_bugs(
    code: str,
    max_bugs: int,
    language: Optional[str] = None,
    file_path: Optional[str] = None,
    rng: Optional[random.Random] = None,
    weights: Optional[Dict[str, int]] = None,
) -> InjectionResult:
    """
    Apply up to ``max_bugs`` distinct bug kinds to ``code``.

    Args:
        code: Source text to mutate
        max_bugs: Upper bound on the number of kinds applied
        language: Grammar name; detected from ``file_path`` when omitted
        file_path: Used for grammar detection and error messages
        rng: Random source; pass a seeded one for reproducible runs
        weights: Per-kind weight overrides keyed by BugKind value

    Returns:
        InjectionResult. When nothing could be broken, ``applied`` is empty,
        ``code`` is the untouched input and ``diff`` is None.

    Raises:
        ParseFailure: If ``code`` does not parse.
        PrinterError: If the mutated text no longer parses.
    """
    language = language or detect_language(file_path)
    tree = SourceTree.parse(code, language, file_path)

    orchestrator = MutationOrchestrator(build_catalog(weights), rng)
    applied = orchestrator.run(tree, max_bugs)

    if not applied:
        logger.info(f"Nothing to break in {file_path or '<buffer>'}")
        return InjectionResult(code=code, applied=[], diff=None, language=language)

    mutated = render(tree, code)
    diff = compute_diff_range(code, mutated)
    if diff is not None:
        logger.debug(f"Changed lines {diff.start_line}-{diff.end_line}")

    return InjectionResult(code=mutated, applied=applied, diff=diff, language=language)

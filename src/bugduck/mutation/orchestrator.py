"""
MutationOrchestrator: weighted random selection of rules over one tree.
"""

import random
from typing import List, Optional, Sequence

from bugduck.logging_config import logger
from .kinds import BugKind
from .rules import MutationRule, build_catalog
from .tree import SourceTree


def weighted_order(rules: Sequence[MutationRule], rng: random.Random) -> List[MutationRule]:
    """
    Draw a random ordering in which heavier rules tend to come first.

    Each rule gets the key ``u ** (1 / weight)`` with ``u`` uniform in (0, 1]
    and the rules are sorted by descending key (Efraimidis-Spirakis).
    """
    keyed = []
    for rule in rules:
        u = 1.0 - rng.random()
        keyed.append((u ** (1.0 / rule.weight), rule))
    keyed.sort(key=lambda pair: pair[0], reverse=True)
    return [rule for _, rule in keyed]


class MutationOrchestrator:
    """
    Applies up to ``max_count`` distinct bug kinds to a SourceTree.

    A round shuffles the kinds still in the pool by weight and tries them in
    that order; the first one that mutates the tree is recorded, every entry
    of its kind leaves the pool, and a fresh round starts. A round in which
    every remaining rule fails ends the run.
    """

    def __init__(self, catalog: Optional[List[MutationRule]] = None, rng: Optional[random.Random] = None):
        self.catalog = catalog if catalog is not None else build_catalog()
        self.rng = rng or random.Random()

    def run(self, tree: SourceTree, max_count: int) -> List[BugKind]:
        applied: List[BugKind] = []
        if max_count <= 0:
            return applied

        pool = list(self.catalog)
        while len(applied) < max_count and pool:
            winner = None
            for rule in weighted_order(pool, self.rng):
                if rule.apply(tree):
                    winner = rule
                    break
                logger.debug(f"{rule.kind}: no target")

            if winner is None:
                logger.debug(f"No remaining rule applies ({len(pool)} left in pool)")
                break

            applied.append(winner.kind)
            # A kind may appear under several weighted entries; drop them all
            pool = [r for r in pool if r.kind != winner.kind]

        logger.info(f"Applied {len(applied)}/{max_count} bug(s): {[str(k) for k in applied]}")
        return applied

"""
Tests for weighted rule selection and the run loop.
"""

import random

from bugduck.mutation import BugKind, MutationOrchestrator, build_catalog, rules
from bugduck.mutation.orchestrator import weighted_order
from bugduck.mutation.rules import MutationRule


class CountingRule:
    """Stand-in rule body that records how often it was tried."""

    def __init__(self, result: bool):
        self.result = result
        self.calls = 0

    def __call__(self, tree) -> bool:
        self.calls += 1
        return self.result


def test_zero_budget_applies_nothing(parse, rich_source, rng):
    tree = parse(rich_source)
    assert MutationOrchestrator(rng=rng).run(tree, 0) == []
    assert MutationOrchestrator(rng=rng).run(tree, -3) == []
    assert tree.text == rich_source


def test_nothing_to_break(parse, rng):
    tree = parse("foo(bar);\n")
    assert MutationOrchestrator(rng=rng).run(tree, 5) == []
    assert tree.text == "foo(bar);\n"


def test_kinds_are_distinct_and_bounded(parse, rich_source):
    for seed in range(10):
        tree = parse(rich_source)
        applied = MutationOrchestrator(rng=random.Random(seed)).run(tree, 4)
        assert 1 <= len(applied) <= 4
        assert len(set(applied)) == len(applied)
        assert not tree.error_nodes()


def test_full_budget_uses_every_applicable_kind_once(parse, rich_source):
    tree = parse(rich_source)
    applied = MutationOrchestrator(rng=random.Random(7)).run(tree, 12)
    assert len(set(applied)) == len(applied)
    assert all(isinstance(kind, BugKind) for kind in applied)


def test_seeded_runs_are_reproducible(parse, rich_source):
    first = parse(rich_source)
    second = parse(rich_source)
    a = MutationOrchestrator(rng=random.Random(99)).run(first, 3)
    b = MutationOrchestrator(rng=random.Random(99)).run(second, 3)
    assert a == b
    assert first.text == second.text


def test_run_stops_after_a_round_with_no_success():
    hit = CountingRule(True)
    miss_a = CountingRule(False)
    miss_b = CountingRule(False)
    catalog = [
        MutationRule(kind=BugKind.OFF_BY_ONE, apply=hit),
        MutationRule(kind=BugKind.BOOLEAN_NEGATION, apply=miss_a),
        MutationRule(kind=BugKind.INDEX_OFF_BY_ONE, apply=miss_b),
    ]

    applied = MutationOrchestrator(catalog, random.Random(3)).run(None, 10)

    assert applied == [BugKind.OFF_BY_ONE]
    assert hit.calls == 1
    # Each failing rule is tried at most once before the hit and once after
    assert 1 <= miss_a.calls <= 2
    assert 1 <= miss_b.calls <= 2


def test_weighted_order_prefers_heavy_rules():
    heavy = MutationRule(kind=BugKind.HOMOGLYPH_SABOTAGE, apply=CountingRule(True), weight=100)
    light = MutationRule(kind=BugKind.OFF_BY_ONE, apply=CountingRule(True), weight=1)
    rng = random.Random(42)

    heavy_first = sum(1 for _ in range(200) if weighted_order([light, heavy], rng)[0] is heavy)

    assert heavy_first > 180


def test_weighted_order_is_a_permutation(rng):
    catalog = build_catalog()
    ordered = weighted_order(catalog, rng)
    assert sorted(r.kind for r in ordered) == sorted(r.kind for r in catalog)


def test_duplicate_entries_of_a_kind_are_applied_once(parse):
    tree = parse("a = true; b = false;")
    entry = MutationRule(kind=BugKind.BOOLEAN_NEGATION, apply=rules.apply_boolean_negation)

    applied = MutationOrchestrator([entry, entry], random.Random(0)).run(tree, 5)

    assert applied == [BugKind.BOOLEAN_NEGATION]
    assert tree.text == "a = !true; b = false;"


def test_duplicate_entries_do_not_starve_other_kinds():
    first = CountingRule(True)
    second = CountingRule(True)
    other = CountingRule(True)
    catalog = [
        MutationRule(kind=BugKind.OFF_BY_ONE, apply=first),
        MutationRule(kind=BugKind.OFF_BY_ONE, apply=second),
        MutationRule(kind=BugKind.INDEX_OFF_BY_ONE, apply=other),
    ]

    for seed in range(20):
        applied = MutationOrchestrator(catalog, random.Random(seed)).run(None, 3)
        assert sorted(applied) == sorted([BugKind.OFF_BY_ONE, BugKind.INDEX_OFF_BY_ONE])

# tests/unit/core/test_canonical.py
"""Tests for canonical JSON and topology hashing."""

from __future__ import annotations

import math

import pytest

from cmdsynth.contracts import CommandConstraintState, CommandSeverity
from cmdsynth.core.canonical import canonical_json, compute_topology_hash, stable_hash
from tests.helpers import make_chain, make_edge, make_graph, make_node


class TestCanonicalJson:
    def test_keys_sorted_without_whitespace(self) -> None:
        assert canonical_json({"b": 1, "a": [1, 2]}) == '{"a":[1,2],"b":1}'

    def test_enums_render_as_values(self) -> None:
        assert canonical_json({"severity": CommandSeverity.CRITICAL}) == '{"severity":"critical"}'

    def test_tuples_render_as_lists(self) -> None:
        assert canonical_json(("a", "b")) == '["a","b"]'

    @pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf])
    def test_non_finite_floats_rejected(self, value: float) -> None:
        with pytest.raises(ValueError, match="non-finite"):
            canonical_json({"x": value})

    def test_stable_hash_is_sha256_hex(self) -> None:
        digest = stable_hash({"a": 1})
        assert len(digest) == 64
        assert digest == stable_hash({"a": 1})


class TestTopologyHash:
    def test_ignores_node_and_edge_order(self) -> None:
        graph = make_chain(["A", "B", "C"])
        shuffled = make_graph(tuple(reversed(graph.nodes)), tuple(reversed(graph.edges)))

        assert compute_topology_hash(graph) == compute_topology_hash(shuffled)

    def test_ignores_node_state(self) -> None:
        graph = make_chain(["A", "B"])
        resolved = make_chain(["A", "B"], state=CommandConstraintState.RESOLVED)

        assert compute_topology_hash(graph) == compute_topology_hash(resolved)

    def test_parallel_edge_changes_hash(self) -> None:
        nodes = [make_node("A"), make_node("B")]
        single = make_graph(nodes, [("A", "B")])
        double = make_graph(nodes, [("A", "B"), ("A", "B")])

        assert compute_topology_hash(single) != compute_topology_hash(double)

    def test_edge_budget_changes_hash(self) -> None:
        nodes = [make_node("A"), make_node("B")]
        fast = make_graph(nodes, [make_edge("A", "B", latency_budget_ms=100)])
        slow = make_graph(nodes, [make_edge("A", "B", latency_budget_ms=900)])

        assert compute_topology_hash(fast) != compute_topology_hash(slow)

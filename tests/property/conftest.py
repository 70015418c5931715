# tests/property/conftest.py
"""Shared Hypothesis strategies for property-based tests.

Strategy Categories:
- Acyclic graphs (edges only run from earlier to later node indices)
- Cyclic graphs (an acyclic graph plus at least one back edge)
- ISO-8601 timestamps and synthesis windows

Usage:
    from tests.property.conftest import acyclic_graphs

    @given(graph=acyclic_graphs())
    def test_something(graph: CommandGraph) -> None:
        ...
"""

from __future__ import annotations

from datetime import UTC, datetime

from hypothesis import strategies as st

from cmdsynth.contracts import CommandConstraintState, CommandGraph, CommandSeverity, SynthesisWindow
from cmdsynth.contracts.timestamps import format_timestamp
from tests.helpers import GRAPH_ID, make_edge, make_graph, make_node

MAX_NODES = 10

node_states = st.sampled_from(list(CommandConstraintState))
node_severities = st.sampled_from(list(CommandSeverity))


@st.composite
def _forward_edges(draw: st.DrawFn, size: int) -> list[tuple[int, int]]:
    """Index pairs (i, j) with i < j, duplicates allowed."""
    if size < 2:
        return []
    pairs = draw(
        st.lists(
            st.tuples(st.integers(0, size - 1), st.integers(0, size - 1)).filter(lambda pair: pair[0] != pair[1]),
            max_size=size * 2,
        )
    )
    return [(min(pair), max(pair)) for pair in pairs]


@st.composite
def acyclic_graphs(draw: st.DrawFn, min_nodes: int = 0, max_nodes: int = MAX_NODES) -> CommandGraph:
    """Random DAG. Node order is shuffled so the rank order is hidden from Kahn seeding."""
    size = draw(st.integers(min_value=min_nodes, max_value=max_nodes))
    ids = [f"N{index}" for index in range(size)]
    edges = [
        make_edge(
            ids[i],
            ids[j],
            order=draw(st.integers(0, 3)),
            latency_budget_ms=draw(st.integers(1, 500)),
        )
        for i, j in draw(_forward_edges(size))
    ]
    nodes = [
        make_node(
            node_id,
            name=draw(st.sampled_from(["alpha", "bravo", "charlie", "delta"])),
            weight=draw(st.integers(0, 20)),
            state=draw(node_states),
            severity=draw(node_severities),
        )
        for node_id in ids
    ]
    return make_graph(draw(st.permutations(nodes)), edges)


@st.composite
def cyclic_graphs(draw: st.DrawFn) -> CommandGraph:
    """DAG plus one back edge (j -> i with i <= j, self-loops included)."""
    graph = draw(acyclic_graphs(min_nodes=1))
    ids = sorted((node.id for node in graph.nodes), key=lambda node_id: int(node_id[1:]))
    target = draw(st.integers(0, len(ids) - 1))
    source = draw(st.integers(target, len(ids) - 1))
    # Guarantee a path target -> source so the back edge closes a cycle
    chain = [make_edge(a, b) for a, b in zip(ids[target:source], ids[target + 1 : source + 1], strict=False)]
    return make_graph(graph.nodes, [*graph.edges, *chain, make_edge(ids[source], ids[target])])


timestamps = st.datetimes(
    min_value=datetime(2020, 1, 1),
    max_value=datetime(2030, 1, 1),
    timezones=st.just(UTC),
).map(format_timestamp)


@st.composite
def windows(draw: st.DrawFn) -> SynthesisWindow:
    first, second = draw(timestamps), draw(timestamps)
    return SynthesisWindow(
        graph_id=GRAPH_ID,
        since=min(first, second),
        until=max(first, second),
        limit=draw(st.integers(min_value=-10, max_value=3000)),
    )

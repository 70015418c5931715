# src/cmdsynth/core/topology.py
"""Topology analyzer: adjacency, cycle detection, ordering and layering.

Pure and synchronous. Nothing here mutates the input graph or emits events.

Cycle policy:
    Cycles never raise. Kahn ordering and layering silently drop every node
    that sits on (or downstream of) a cycle; callers detect this by comparing
    ``len(topology.ordered)`` with ``graph.node_count``. The three-color DFS
    reports each grey revisit as a critical finding and keeps going, so one
    cycle can be reported once per entry node.

Dangling edges (endpoints missing from ``graph.nodes``) are a caller
precondition. They are not repaired: a dangling target still contributes
indegree and a dangling source still contributes adjacency.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterator
from typing import TypeAlias

import networkx as nx
import structlog
from networkx import MultiDiGraph

from cmdsynth.contracts import (
    CommandExecutionState,
    CommandGraph,
    CommandGraphAudit,
    CommandGraphTopology,
    CommandNodeId,
    CommandSeverity,
    CommandWave,
    ensure_wave_id,
)

logger = structlog.get_logger(__name__)

_WHITE = "white"
_GREY = "grey"
_BLACK = "black"

# (node id, path from the DFS entry node, remaining successors)
_Frame: TypeAlias = tuple[CommandNodeId, tuple[str, ...], Iterator[CommandNodeId]]


def build_adjacency(graph: CommandGraph) -> dict[str, list[CommandNodeId]]:
    """Successor ids per node, in edge order. Duplicate edges are kept."""
    adjacency: dict[str, list[CommandNodeId]] = {}
    for edge in graph.edges:
        adjacency.setdefault(edge.source, []).append(edge.target)
    return adjacency


def build_reverse(graph: CommandGraph) -> dict[str, list[CommandNodeId]]:
    """Predecessor ids per node, in edge order. Duplicate edges are kept."""
    reverse: dict[str, list[CommandNodeId]] = {}
    for edge in graph.edges:
        reverse.setdefault(edge.target, []).append(edge.source)
    return reverse


def compute_indegree(graph: CommandGraph) -> dict[str, int]:
    """Incoming edge count per node, every graph node present."""
    indegree: dict[str, int] = {node.id: 0 for node in graph.nodes}
    for edge in graph.edges:
        indegree[edge.target] = indegree.get(edge.target, 0) + 1
    return indegree


def detect_cycles(graph: CommandGraph) -> list[CommandGraphAudit]:
    """Three-color DFS from every node, recording each grey revisit.

    The issue string carries the traversal path from the entry node to the
    revisited node (``cycle-detected:a>b>a``) and the finding is tagged with
    the node that closes the cycle. Iterative, so deep chains do not hit the
    recursion limit.
    """
    adjacency = build_adjacency(graph)
    colors: dict[str, str] = {node.id: _WHITE for node in graph.nodes}
    audits: list[CommandGraphAudit] = []

    def enter(node_id: CommandNodeId, path: tuple[str, ...]) -> _Frame | None:
        color = colors.get(node_id)
        if color == _GREY:
            audits.append(
                CommandGraphAudit(
                    graph_id=graph.id,
                    issue=f"cycle-detected:{'>'.join(path)}",
                    severity=CommandSeverity.CRITICAL,
                    node_id=node_id,
                )
            )
            return None
        if color == _BLACK:
            return None
        colors[node_id] = _GREY
        return node_id, path, iter(adjacency.get(node_id, []))

    for node in graph.nodes:
        root = enter(node.id, (node.id,))
        if root is None:
            continue
        stack = [root]
        while stack:
            node_id, path, successors = stack[-1]
            target = next(successors, None)
            if target is None:
                colors[node_id] = _BLACK
                stack.pop()
                continue
            frame = enter(target, (*path, target))
            if frame is not None:
                stack.append(frame)

    return audits


def topological_order(graph: CommandGraph) -> list[CommandNodeId]:
    """Kahn's algorithm. Nodes on or behind a cycle are absent from the result."""
    adjacency = build_adjacency(graph)
    indegree = compute_indegree(graph)

    queue: deque[CommandNodeId] = deque(node.id for node in graph.nodes if indegree[node.id] == 0)
    ordered: list[CommandNodeId] = []

    while queue:
        current = queue.popleft()
        ordered.append(current)
        for child in adjacency.get(current, []):
            indegree[child] -= 1
            if indegree[child] == 0:
                queue.append(child)

    return ordered


def build_layers(graph: CommandGraph, ordered: list[CommandNodeId]) -> list[tuple[CommandNodeId, ...]]:
    """Peel zero-indegree frontiers into layers.

    An empty graph yields exactly one empty layer. A non-empty graph with no
    zero-indegree node (every node on or behind a cycle) yields no layers.
    Only ids present in ``graph.nodes`` are placed.
    """
    if not graph.nodes:
        return [()]

    adjacency = build_adjacency(graph)
    indegree = compute_indegree(graph)
    known = {node.id for node in graph.nodes}

    frontier: list[CommandNodeId] = [node_id for node_id in ordered if indegree[node_id] == 0]
    visited: set[CommandNodeId] = set()
    layers: list[tuple[CommandNodeId, ...]] = []
    while frontier:
        layer = tuple(frontier)
        layers.append(layer)
        visited.update(layer)

        frontier = []
        queued: set[CommandNodeId] = set()
        for node_id in layer:
            for child in adjacency.get(node_id, []):
                indegree[child] -= 1
                if indegree[child] <= 0 and child in known and child not in visited and child not in queued:
                    frontier.append(child)
                    queued.add(child)

    return layers


def build_topology(graph: CommandGraph) -> CommandGraphTopology:
    """Compute ordering, layers, indegree and both adjacency directions."""
    ordered = topological_order(graph)
    layers = build_layers(graph, ordered)

    logger.debug(
        "topology_built",
        graph_id=graph.id,
        nodes=graph.node_count,
        edges=graph.edge_count,
        ordered=len(ordered),
        layers=len(layers),
    )

    return CommandGraphTopology(
        ordered=tuple(ordered),
        layers=tuple(layers),
        indegree=compute_indegree(graph),
        adjacency=build_adjacency(graph),
        reverse=build_reverse(graph),
    )


def plan_waves(graph: CommandGraph) -> tuple[CommandWave, ...]:
    """Materialize topology layers as queued waves.

    Wave k depends on wave k-1; wave 0 depends on nothing.
    """
    topology = build_topology(graph)
    nodes_by_id = {node.id: node for node in graph.nodes}
    return tuple(
        CommandWave(
            id=ensure_wave_id(graph.id, index),
            graph_id=graph.id,
            title=f"Wave {index + 1}",
            index=index,
            commands=tuple(nodes_by_id[node_id] for node_id in layer),
            depends_on=() if index == 0 else (ensure_wave_id(graph.id, index - 1),),
            execution_state=CommandExecutionState.QUEUED,
        )
        for index, layer in enumerate(topology.layers)
    )


def to_nx_graph(graph: CommandGraph) -> MultiDiGraph[str]:
    """Return a frozen NetworkX view of the graph.

    Nodes are added in graph order; each edge is keyed by its position in
    ``graph.edges`` so duplicate dependencies survive as parallel edges.
    Dangling edge endpoints become bare nodes without a ``name`` attribute.
    """
    nx_graph: MultiDiGraph[str] = nx.MultiDiGraph()
    for node in graph.nodes:
        nx_graph.add_node(node.id, name=node.name, weight=node.weight)
    for position, edge in enumerate(graph.edges):
        nx_graph.add_edge(
            edge.source,
            edge.target,
            key=position,
            order=edge.order,
            latency_budget_ms=edge.latency_budget_ms,
            cost=edge.cost,
        )
    return nx.freeze(nx_graph)  # type: ignore[no-any-return]

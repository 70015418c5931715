# src/cmdsynth/engine/forecast.py
"""Forecast engine: readiness, cost, latency, risk and critical path.

Every estimator is a pure function of the graph (and its topology where
ordering matters). Rounding is half-up to keep scores stable for values
that land exactly on .5.
"""

from __future__ import annotations

import math

from cmdsynth.contracts import (
    SEVERITY_RANK,
    URGENCY_RANK,
    CommandConstraintState,
    CommandGraph,
    CommandGraphForecast,
    CommandGraphTopology,
    CommandNodeId,
    CommandSeverity,
    summarize_by_severity,
)
from cmdsynth.core.topology import build_topology

# Fixed scheduling overhead added per node to the latency estimate
NODE_OVERHEAD_MS = 150

_BLOCKING_STATES = frozenset({CommandConstraintState.BLOCKED, CommandConstraintState.DEFERRED})


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def estimate_readiness(graph: CommandGraph) -> int:
    """Percentage of resolved nodes, 0-100. An empty graph is 0% ready."""
    resolved = sum(1 for node in graph.nodes if node.state == CommandConstraintState.RESOLVED)
    total = max(1, graph.node_count)
    return round_half_up(resolved / total * 100)


def estimate_cost(graph: CommandGraph) -> float:
    return sum(node.weight for node in graph.nodes) + sum(edge.cost for edge in graph.edges)


def estimate_latency(graph: CommandGraph) -> float:
    """Sum of edge latency budgets plus a fixed overhead per node."""
    return sum(edge.latency_budget_ms for edge in graph.edges) + graph.node_count * NODE_OVERHEAD_MS


def risk_vector(graph: CommandGraph) -> int:
    """Weighted severity/urgency risk, summed per node after rounding."""
    total = 0
    for node in graph.nodes:
        factor = 0.6 + 0.2 * SEVERITY_RANK[node.severity] + 0.2 * URGENCY_RANK[node.urgency]
        total += round_half_up((node.weight + 1) * factor)
    return total


def count_blockers(graph: CommandGraph) -> int:
    return sum(1 for node in graph.nodes if node.state in _BLOCKING_STATES)


def build_critical_path(ordered: tuple[CommandNodeId, ...] | list[CommandNodeId], graph: CommandGraph) -> list[CommandNodeId]:
    """Heaviest third of the topological order.

    This is a weight-ranked prefix, not a longest-path computation: edge
    latency and actual dependency chains are ignored. The sort is stable,
    so equal weights keep topological order. Ids missing from the node set
    rank as weight 0.
    """
    weights = {node.id: node.weight for node in graph.nodes}
    by_weight = sorted(ordered, key=lambda node_id: -weights.get(node_id, 0))
    return by_weight[: max(1, math.ceil(len(ordered) / 3))]


def build_forecast(graph: CommandGraph, topology: CommandGraphTopology | None = None) -> CommandGraphForecast:
    """Forecast execution of a graph.

    Args:
        graph: Graph to forecast
        topology: Precomputed topology; computed from the graph when omitted

    Returns:
        Forecast with readiness latency, wave count, blockers and risk
    """
    if topology is None:
        topology = build_topology(graph)
    severity_counts = summarize_by_severity(graph.nodes)
    critical_path = build_critical_path(topology.ordered, graph)
    readiness = estimate_readiness(graph)

    return CommandGraphForecast(
        graph_id=graph.id,
        ready_in_ms=estimate_latency(graph),
        wave_count=len(topology.layers),
        blockers=count_blockers(graph),
        critical_path_length=len(critical_path),
        risk_score=max(1, risk_vector(graph) + readiness),
        conflict_count=severity_counts[CommandSeverity.CRITICAL] + severity_counts[CommandSeverity.WARNING],
        cost=estimate_cost(graph),
        readiness=readiness,
    )

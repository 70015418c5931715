# src/cmdsynth/engine/synthesis.py
"""Synthesis facade: the single go/no-go entry point for planners."""

from __future__ import annotations

from cmdsynth.contracts import CommandGraph, CommandSynthesisResult
from cmdsynth.core.topology import build_topology
from cmdsynth.engine.audit import run_audit
from cmdsynth.engine.forecast import build_critical_path, build_forecast, estimate_readiness, round_half_up

_MS_PER_MINUTE = 60_000


def to_synthesis_result(graph: CommandGraph) -> CommandSynthesisResult:
    """Combine topology, forecast and audit into one result.

    ``ready`` requires no blocked/deferred nodes and a complete topological
    order (no node lost to a cycle). ``conflicts`` lists audit issue ids;
    callers needing severities call run_audit() themselves.
    """
    topology = build_topology(graph)
    forecast = build_forecast(graph, topology)

    return CommandSynthesisResult(
        graph_id=graph.id,
        ready=forecast.blockers == 0 and len(topology.ordered) == graph.node_count,
        conflicts=tuple(finding.issue for finding in run_audit(graph)),
        critical_paths=tuple(build_critical_path(topology.ordered, graph)),
        readiness_score=estimate_readiness(graph),
        execution_order=topology.ordered,
        forecast_minutes=max(1, round_half_up(forecast.ready_in_ms / _MS_PER_MINUTE)),
    )
